"""Action interface, closed type tags and the action registry.

Every action renders itself as RAPID text twice over: as standalone text
(``to_rapid_declaration`` / ``to_rapid_instruction``), and through a
generator that tracks declared names and the active tool
(``write_rapid_declaration`` / ``write_rapid_instruction``).
"""

import dataclasses
import enum
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Iterator, Optional, Type

import jax
import numpy as np

from ..core import RobotModel, RobotTool


class ActionType(enum.Enum):
    MOVEMENT = "movement"
    ABSOLUTE_JOINT_MOVEMENT = "absolute_joint_movement"
    DIGITAL_OUTPUT = "digital_output"
    WAIT_TIME = "wait_time"
    WAIT_DI = "wait_di"
    COMMENT = "comment"
    CODE_LINE = "code_line"
    OVERRIDE_ROBOT_TOOL = "override_robot_tool"
    ACTION_GROUP = "action_group"


class CodeType(enum.Enum):
    """Block of the program module a free-form line belongs to."""
    DECLARATION = "declaration"
    INSTRUCTION = "instruction"


ACTION_CLASSES: Dict[ActionType, Type["Action"]] = {}


def register_action(cls):
    """Class decorator adding an action class to the registry under its type tag."""
    ACTION_CLASSES[cls.action_type] = cls
    return cls


def content_equal(a, b) -> bool:
    """Structural equality that compares arrays element-wise and objects by their fields."""
    if isinstance(a, (jax.Array, np.ndarray)) or isinstance(b, (jax.Array, np.ndarray)):
        a, b = np.asarray(a), np.asarray(b)
        return a.shape == b.shape and bool(np.array_equal(a, b))
    if type(a) is not type(b):
        return False
    if isinstance(a, (list, tuple)):
        return len(a) == len(b) and all(content_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(content_equal(a[k], b[k]) for k in a)
    if dataclasses.is_dataclass(a):
        return all(content_equal(getattr(a, f.name), getattr(b, f.name)) for f in dataclasses.fields(a))
    if hasattr(a, "__dict__"):
        return content_equal(vars(a), vars(b))
    return a == b


class ContentEquality:
    """Mixin giving value semantics to records that hold arrays."""

    def __eq__(self, other):
        return content_equal(self, other)

    def __ne__(self, other):
        return not self == other

    __hash__ = object.__hash__


def default_tool(robot: Optional[RobotModel]) -> RobotTool:
    """Tool used by movements that do not override it."""
    if robot is None:
        return RobotTool.default()
    return robot.tool


class Action(ContentEquality, ABC):
    """Base class of all program actions."""

    action_type: ActionType
    is_composite = False

    def to_rapid_declaration(self, robot: Optional[RobotModel] = None) -> str:
        """Declaration text, or an empty string if the action declares nothing."""
        return ""

    @abstractmethod
    def to_rapid_instruction(self, robot: Optional[RobotModel] = None) -> str:
        """Instruction text, or an empty string if the action is invalid."""

    def write_rapid_declaration(self, generator):
        generator.add_declaration(self.to_rapid_declaration(generator.robot))

    def write_rapid_instruction(self, generator):
        generator.add_instruction(self.to_rapid_instruction(generator.robot))

    @abstractmethod
    def duplicate(self) -> "Action":
        """Deep copy of the action."""

    @property
    @abstractmethod
    def is_valid(self) -> bool:
        """Structural completeness; says nothing about reachability."""


def iter_actions(actions: Iterable[Action]) -> Iterator[Action]:
    """Depth-first, order-preserving walk that yields groups before their children."""
    for action in actions:
        yield action
        if action.is_composite:
            yield from iter_actions(action.actions)

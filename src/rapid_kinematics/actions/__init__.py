"""Program actions and the RAPID data records they reference."""

from .base import (
    ACTION_CLASSES,
    Action,
    ActionType,
    CodeType,
    iter_actions,
)
from .data import RobotTarget, SpeedData, WorkObject, ZoneData, tool_to_rapid_declaration
from .signals import DigitalOutput, WaitDI
from .program import CodeLine, Comment, OverrideRobotTool, WaitTime
from .movement import AbsoluteJointMovement, Movement, MovementType
from .group import ActionGroup

__all__ = [
    "ACTION_CLASSES",
    "AbsoluteJointMovement",
    "Action",
    "ActionGroup",
    "ActionType",
    "CodeLine",
    "CodeType",
    "Comment",
    "DigitalOutput",
    "Movement",
    "MovementType",
    "OverrideRobotTool",
    "RobotTarget",
    "SpeedData",
    "WaitDI",
    "WaitTime",
    "WorkObject",
    "ZoneData",
    "iter_actions",
    "tool_to_rapid_declaration",
]

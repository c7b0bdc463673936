"""Named group of actions."""

from dataclasses import dataclass, field
from typing import List, Optional

from .base import Action, ActionType, register_action
from ..core import RobotModel


@register_action
@dataclass(eq=False)
class ActionGroup(Action):
    """Ordered, mutable list of actions rendered as one block.

    A group with a non-empty name brackets its instructions with start and
    end comments; an anonymous group renders its children only. Groups may
    be nested.
    """
    name: str = ""
    actions: List[Action] = field(default_factory=list)

    action_type = ActionType.ACTION_GROUP
    is_composite = True

    @property
    def is_valid(self) -> bool:
        return self.name is not None and all(action.is_valid for action in self.actions)

    @property
    def start_marker(self) -> str:
        return f"! Start of group: {self.name}"

    @property
    def end_marker(self) -> str:
        return f"! End of group: {self.name}"

    def append(self, action: Action):
        self.actions.append(action)

    def to_rapid_declaration(self, robot: Optional[RobotModel] = None) -> str:
        lines = [action.to_rapid_declaration(robot) for action in self.actions]
        return "\n".join(line for line in lines if line)

    def to_rapid_instruction(self, robot: Optional[RobotModel] = None) -> str:
        lines = [action.to_rapid_instruction(robot) for action in self.actions]
        if self.name:
            lines = [self.start_marker] + lines + [self.end_marker]
        return "\n".join(line for line in lines if line)

    def write_rapid_declaration(self, generator):
        for action in self.actions:
            generator.write_declaration(action)

    def write_rapid_instruction(self, generator):
        if self.name:
            generator.add_instruction(self.start_marker)
        for action in self.actions:
            generator.write_instruction(action)
        if self.name:
            generator.add_instruction(self.end_marker)

    def duplicate(self) -> "ActionGroup":
        return ActionGroup(self.name, [action.duplicate() for action in self.actions])

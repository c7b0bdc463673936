"""Digital I/O actions."""

from dataclasses import dataclass
from typing import Optional

from .base import Action, ActionType, register_action
from ..core import RobotModel


@register_action
@dataclass(eq=False)
class DigitalOutput(Action):
    """Set a digital output signal (``SetDO``).

    A movement can carry a digital output, in which case the signal is set
    by the ``MoveLDO`` / ``MoveJDO`` instruction at the target.
    """
    name: str
    is_active: bool = False

    action_type = ActionType.DIGITAL_OUTPUT

    @property
    def is_valid(self) -> bool:
        return bool(self.name)

    @property
    def value(self) -> int:
        return 1 if self.is_active else 0

    def to_rapid_instruction(self, robot: Optional[RobotModel] = None) -> str:
        if not self.is_valid:
            return ""
        return f"SetDO {self.name}, {self.value};"

    def duplicate(self) -> "DigitalOutput":
        return DigitalOutput(self.name, self.is_active)


@register_action
@dataclass(eq=False)
class WaitDI(Action):
    """Wait until a digital input reaches a value (``WaitDI``)."""
    name: str
    is_active: bool = True

    action_type = ActionType.WAIT_DI

    @property
    def is_valid(self) -> bool:
        return bool(self.name)

    def to_rapid_instruction(self, robot: Optional[RobotModel] = None) -> str:
        if not self.is_valid:
            return ""
        return f"WaitDI {self.name}, {1 if self.is_active else 0};"

    def duplicate(self) -> "WaitDI":
        return WaitDI(self.name, self.is_active)

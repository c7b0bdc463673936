"""Program flow actions: waits, comments, raw code lines and tool overrides."""

import math
from dataclasses import dataclass
from typing import Optional

from .base import Action, ActionType, CodeType, register_action
from ..core import RobotModel, RobotTool
from ..core.joint_position import format_value


@register_action
@dataclass(eq=False)
class WaitTime(Action):
    """Pause program execution for a duration in seconds."""
    duration: float

    action_type = ActionType.WAIT_TIME

    @property
    def is_valid(self) -> bool:
        return math.isfinite(self.duration) and self.duration >= 0

    def to_rapid_instruction(self, robot: Optional[RobotModel] = None) -> str:
        if not self.is_valid:
            return ""
        return f"WaitTime {format_value(self.duration)};"

    def duplicate(self) -> "WaitTime":
        return WaitTime(self.duration)


@register_action
@dataclass(eq=False)
class Comment(Action):
    """RAPID comment; multi-line text becomes one ``!`` line per line.

    Comments are written to the instruction block unless ``code_type`` is
    DECLARATION.
    """
    text: str
    code_type: CodeType = CodeType.INSTRUCTION

    action_type = ActionType.COMMENT

    @property
    def is_valid(self) -> bool:
        return self.text is not None

    def _render(self) -> str:
        return "\n".join(f"! {line}" for line in self.text.splitlines() or [""])

    def to_rapid_declaration(self, robot: Optional[RobotModel] = None) -> str:
        if not self.is_valid or self.code_type != CodeType.DECLARATION:
            return ""
        return self._render()

    def to_rapid_instruction(self, robot: Optional[RobotModel] = None) -> str:
        if not self.is_valid or self.code_type != CodeType.INSTRUCTION:
            return ""
        return self._render()

    def duplicate(self) -> "Comment":
        return Comment(self.text, self.code_type)


@register_action
@dataclass(eq=False)
class CodeLine(Action):
    """Verbatim RAPID code written to the block selected by ``code_type``."""
    code: str
    code_type: CodeType = CodeType.INSTRUCTION

    action_type = ActionType.CODE_LINE

    @property
    def is_valid(self) -> bool:
        return bool(self.code)

    def to_rapid_declaration(self, robot: Optional[RobotModel] = None) -> str:
        if not self.is_valid or self.code_type != CodeType.DECLARATION:
            return ""
        return self.code

    def to_rapid_instruction(self, robot: Optional[RobotModel] = None) -> str:
        if not self.is_valid or self.code_type != CodeType.INSTRUCTION:
            return ""
        return self.code

    def duplicate(self) -> "CodeLine":
        return CodeLine(self.code, self.code_type)


@register_action
@dataclass(eq=False)
class OverrideRobotTool(Action):
    """Replace the tool used by the movements that follow."""
    robot_tool: RobotTool

    action_type = ActionType.OVERRIDE_ROBOT_TOOL

    @property
    def is_valid(self) -> bool:
        return self.robot_tool is not None and self.robot_tool.is_valid

    def to_rapid_instruction(self, robot: Optional[RobotModel] = None) -> str:
        if not self.is_valid:
            return ""
        return f"! Default Robot Tool changed to {self.robot_tool.name}."

    def write_rapid_instruction(self, generator):
        generator.use_tool(self.robot_tool)
        generator.add_instruction(self.to_rapid_instruction(generator.robot))

    def duplicate(self) -> "OverrideRobotTool":
        return OverrideRobotTool(self.robot_tool.duplicate())

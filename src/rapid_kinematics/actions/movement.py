"""Motion actions: Cartesian moves to a robtarget and absolute joint moves."""

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .base import Action, ActionType, default_tool, register_action
from .data import RobotTarget, SpeedData, WorkObject, ZoneData
from .signals import DigitalOutput
from ..core import ExternalJointPosition, RobotJointPosition, RobotModel, RobotTool


class MovementType(enum.IntEnum):
    """RAPID move instruction of a movement."""
    LINEAR = 1
    JOINT = 2


MOVE_INSTRUCTIONS = {
    MovementType.LINEAR: "MoveL",
    MovementType.JOINT: "MoveJ",
}


def _data_declarations(generator, records) -> None:
    for record in records:
        text = record.to_rapid_declaration()
        if text and generator.should_declare(record.name, record):
            generator.add_declaration(text)


@register_action
@dataclass(eq=False)
class Movement(Action):
    """Move the TCP to a target with ``MoveL`` or ``MoveJ``.

    Attributes:
        target: Target to reach.
        speed_data: Movement speed.
        zone_data: Path blending at the target.
        movement_type: ``MovementType.LINEAR`` or ``MovementType.JOINT``.
        robot_tool: Tool for this movement. None uses the robot's current tool.
        work_object: Frame the target is expressed in.
        digital_output: Signal set at the target (``MoveLDO`` / ``MoveJDO``).
    """
    target: RobotTarget
    speed_data: SpeedData = field(default_factory=lambda: SpeedData.from_value(100))
    zone_data: ZoneData = field(default_factory=lambda: ZoneData.from_precision(0))
    movement_type: int = MovementType.JOINT
    robot_tool: Optional[RobotTool] = None
    work_object: WorkObject = field(default_factory=WorkObject.default)
    digital_output: Optional[DigitalOutput] = None

    action_type = ActionType.MOVEMENT

    def __post_init__(self):
        self.movement_type = int(self.movement_type)

    @property
    def name(self) -> str:
        return self.target.name if self.target is not None else ""

    @property
    def movement_type_is_valid(self) -> bool:
        return self.movement_type in MOVE_INSTRUCTIONS

    @property
    def is_valid(self) -> bool:
        if self.target is None or not self.target.is_valid:
            return False
        if self.speed_data is None or not self.speed_data.is_valid:
            return False
        if self.zone_data is None or not self.zone_data.is_valid:
            return False
        if self.work_object is None or not self.work_object.is_valid:
            return False
        if self.robot_tool is not None and not self.robot_tool.is_valid:
            return False
        if self.digital_output is not None and not self.digital_output.is_valid:
            return False
        return self.movement_type_is_valid

    def _instruction(self, tool: RobotTool) -> str:
        instruction = MOVE_INSTRUCTIONS[MovementType(self.movement_type)]
        text = (f"{self.target.name}, {self.speed_data.rapid_name}, {self.zone_data.rapid_name}, "
                f"{tool.name}\\WObj:={self.work_object.name}")
        if self.digital_output is not None:
            return f"{instruction}DO {text}, {self.digital_output.name}, {self.digital_output.value};"
        return f"{instruction} {text};"

    def to_rapid_declaration(self, robot: Optional[RobotModel] = None) -> str:
        if not self.is_valid:
            return ""
        lines = [self.target.to_rapid_declaration(self.work_object),
                 self.speed_data.to_rapid_declaration(),
                 self.zone_data.to_rapid_declaration()]
        return "\n".join(line for line in lines if line)

    def to_rapid_instruction(self, robot: Optional[RobotModel] = None) -> str:
        if not self.is_valid:
            return ""
        return self._instruction(self.robot_tool if self.robot_tool is not None else default_tool(robot))

    def write_rapid_declaration(self, generator):
        if generator.should_declare(self.target.name, self.target):
            generator.add_declaration(self.target.to_rapid_declaration(self.work_object))
        _data_declarations(generator, [self.speed_data, self.zone_data])

    def write_rapid_instruction(self, generator):
        tool = self.robot_tool if self.robot_tool is not None else generator.current_tool
        generator.record_tool(tool)
        generator.record_work_object(self.work_object)
        generator.add_instruction(self._instruction(tool))

    def duplicate(self) -> "Movement":
        return Movement(
            target=self.target.duplicate(),
            speed_data=self.speed_data.duplicate(),
            zone_data=self.zone_data.duplicate(),
            movement_type=self.movement_type,
            robot_tool=self.robot_tool.duplicate() if self.robot_tool is not None else None,
            work_object=self.work_object.duplicate(),
            digital_output=self.digital_output.duplicate() if self.digital_output is not None else None,
        )


@register_action
@dataclass(eq=False)
class AbsoluteJointMovement(Action):
    """Move every axis to a joint position with ``MoveAbsJ``."""
    name: str
    robot_joint_position: RobotJointPosition = field(default_factory=lambda: RobotJointPosition([0.0] * 6))
    external_joint_position: ExternalJointPosition = field(default_factory=ExternalJointPosition)
    speed_data: SpeedData = field(default_factory=lambda: SpeedData.from_value(100))
    zone_data: ZoneData = field(default_factory=lambda: ZoneData.from_precision(0))
    robot_tool: Optional[RobotTool] = None

    action_type = ActionType.ABSOLUTE_JOINT_MOVEMENT

    @classmethod
    def create(cls, name: str, internal_axis_values: Sequence[float],
               external_axis_values: Sequence[float] = (), **kwargs) -> "AbsoluteJointMovement":
        return cls(name, RobotJointPosition(internal_axis_values),
                   ExternalJointPosition(external_axis_values), **kwargs)

    @property
    def is_valid(self) -> bool:
        if not self.name:
            return False
        if self.robot_joint_position is None or self.external_joint_position is None:
            return False
        if self.speed_data is None or not self.speed_data.is_valid:
            return False
        if self.zone_data is None or not self.zone_data.is_valid:
            return False
        return self.robot_tool is None or self.robot_tool.is_valid

    @property
    def internal_axis_values(self) -> List[float]:
        return self.robot_joint_position.to_list()

    @property
    def external_axis_values(self) -> List[float]:
        return self.external_joint_position.to_list()

    def _joint_target_declaration(self) -> str:
        return (f"CONST jointtarget {self.name} := [{self.robot_joint_position.to_rapid()}, "
                f"{self.external_joint_position.to_rapid()}];")

    def _instruction(self, tool: RobotTool) -> str:
        return f"MoveAbsJ {self.name}, {self.speed_data.rapid_name}, {self.zone_data.rapid_name}, {tool.name};"

    def to_rapid_declaration(self, robot: Optional[RobotModel] = None) -> str:
        if not self.is_valid:
            return ""
        lines = [self._joint_target_declaration(),
                 self.speed_data.to_rapid_declaration(),
                 self.zone_data.to_rapid_declaration()]
        return "\n".join(line for line in lines if line)

    def to_rapid_instruction(self, robot: Optional[RobotModel] = None) -> str:
        if not self.is_valid:
            return ""
        return self._instruction(self.robot_tool if self.robot_tool is not None else default_tool(robot))

    def write_rapid_declaration(self, generator):
        if generator.should_declare(self.name, self):
            generator.add_declaration(self._joint_target_declaration())
        _data_declarations(generator, [self.speed_data, self.zone_data])

    def write_rapid_instruction(self, generator):
        tool = self.robot_tool if self.robot_tool is not None else generator.current_tool
        generator.record_tool(tool)
        generator.add_instruction(self._instruction(tool))

    def duplicate(self) -> "AbsoluteJointMovement":
        return AbsoluteJointMovement(
            name=self.name,
            robot_joint_position=self.robot_joint_position.duplicate(),
            external_joint_position=self.external_joint_position.duplicate(),
            speed_data=self.speed_data.duplicate(),
            zone_data=self.zone_data.duplicate(),
            robot_tool=self.robot_tool.duplicate() if self.robot_tool is not None else None,
        )

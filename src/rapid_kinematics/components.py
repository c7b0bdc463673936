"""Thin adapters from list-shaped user input to the core constructors.

Inputs follow longest-list matching: every list is stretched to the length
of the longest one by repeating its last item. Missing required input gives
``None`` instead of an exception.
"""

import os
from typing import Any, List, Optional, Sequence, Tuple, Union

from .actions import AbsoluteJointMovement, DigitalOutput, Movement, MovementType
from .actions import RobotTarget, SpeedData, WorkObject, ZoneData
from .chain import ForwardKinematicsResult, forward_kinematics, forward_kinematics_save
from .core import ExternalJointPosition, RobotJointPosition, RobotModel, RobotTool
from .core.joint_position import pad_axis_values
from .rapid import RAPIDGenerator
from .util.logger import log_info

SpeedInput = Union[SpeedData, float]
ZoneInput = Union[ZoneData, int]


def _longest(*lists: Sequence) -> int:
    return max(len(values) for values in lists)


def _item(values: Sequence, index: int) -> Any:
    return values[min(index, len(values) - 1)]


def _name(names: Sequence[str], index: int) -> str:
    """Name of item ``index``; items past the end of ``names`` get a ``_<k>`` suffix."""
    last = len(names) - 1
    if index <= last:
        return names[index]
    return f"{names[last]}_{index - last}"


def _speed_data(value: SpeedInput) -> SpeedData:
    return value if isinstance(value, SpeedData) else SpeedData.from_value(value)


def _zone_data(value: ZoneInput) -> ZoneData:
    return value if isinstance(value, ZoneData) else ZoneData.from_precision(int(value))


def create_movements(target_names: Sequence[str], target_planes: Sequence[Any],
                     speed_data: Sequence[SpeedInput] = (100,),
                     zone_data: Sequence[ZoneInput] = (0,),
                     movement_types: Sequence[int] = (MovementType.JOINT,),
                     axis_configurations: Sequence[int] = (0,),
                     external_axis_values: Sequence[Sequence[float]] = ((),),
                     robot_tools: Sequence[Optional[RobotTool]] = (None,),
                     work_objects: Sequence[Optional[WorkObject]] = (None,),
                     digital_outputs: Sequence[Optional[DigitalOutput]] = (None,)) -> Optional[List[Movement]]:
    """One movement per target plane, with longest-list matching on every input."""
    if not target_names or not target_planes:
        return None
    count = _longest(target_names, target_planes, speed_data, zone_data, movement_types,
                     axis_configurations, external_axis_values, robot_tools, work_objects, digital_outputs)

    movements = []
    for i in range(count):
        target = RobotTarget(
            name=_name(target_names, i),
            plane=_item(target_planes, i),
            axis_configuration=_item(axis_configurations, i),
            external_joint_position=ExternalJointPosition(_item(external_axis_values, i)),
        )
        work_object = _item(work_objects, i)
        movements.append(Movement(
            target=target,
            speed_data=_speed_data(_item(speed_data, i)),
            zone_data=_zone_data(_item(zone_data, i)),
            movement_type=_item(movement_types, i),
            robot_tool=_item(robot_tools, i),
            work_object=work_object if work_object is not None else WorkObject.default(),
            digital_output=_item(digital_outputs, i),
        ))
    return movements


def create_absolute_joint_movements(names: Sequence[str],
                                    internal_axis_values: Sequence[Sequence[float]],
                                    external_axis_values: Sequence[Sequence[float]] = ((),),
                                    speed_data: Sequence[SpeedInput] = (100,),
                                    zone_data: Sequence[ZoneInput] = (0,),
                                    robot_tools: Sequence[Optional[RobotTool]] = (None,),
                                    ) -> Optional[List[AbsoluteJointMovement]]:
    """One absolute joint movement per joint position, with longest-list matching."""
    if not names or not internal_axis_values:
        return None
    count = _longest(names, internal_axis_values, external_axis_values, speed_data, zone_data, robot_tools)

    return [
        AbsoluteJointMovement(
            name=_name(names, i),
            robot_joint_position=RobotJointPosition(_item(internal_axis_values, i)),
            external_joint_position=ExternalJointPosition(_item(external_axis_values, i)),
            speed_data=_speed_data(_item(speed_data, i)),
            zone_data=_zone_data(_item(zone_data, i)),
            robot_tool=_item(robot_tools, i),
        )
        for i in range(count)
    ]


def compute_forward_kinematics(robot: RobotModel, internal_axis_values: Optional[Sequence[float]] = None,
                               external_axis_values: Sequence[float] = (), hide_mesh: bool = False,
                               save: bool = False) -> Optional[ForwardKinematicsResult]:
    """Forward kinematics with short joint vectors padded with 0.

    Returns None when no internal axis values are given.
    """
    if internal_axis_values is None:
        return None
    internal = pad_axis_values(internal_axis_values)
    external = pad_axis_values(external_axis_values, count=len(robot.external_axes))
    if save:
        return forward_kinematics_save(robot, internal, external, hide_mesh)
    return forward_kinematics(robot, internal, external, hide_mesh)


def write_rapid_files(generator: RAPIDGenerator, directory: str) -> Tuple[str, str]:
    """Write ``<module>.mod`` and ``BASE.sys`` into ``directory``.

    Returns:
        Paths of the program module and the base module.
    """
    os.makedirs(directory, exist_ok=True)
    program = generator.generate()

    program_path = os.path.join(directory, f"{program.module_name}.mod")
    with open(program_path, "w") as f:
        f.write(program.program_module)

    base_path = os.path.join(directory, "BASE.sys")
    with open(base_path, "w") as f:
        f.write(program.base_module)

    log_info(f"Wrote {program_path} and {base_path}")
    return program_path, base_path

"""Versioned JSON records for actions, robot tools and external axes.

Every record is a plain dict carrying an integer ``version`` and a ``type``
tag. Frames are stored as nested 4x4 lists and meshes as vertex and face
lists. Records written by a newer version of the library are rejected.
"""

import json
from typing import Any, Dict, List, Optional, Sequence

import jax.numpy as jnp
import numpy as np

from ..actions import (
    AbsoluteJointMovement,
    Action,
    ActionGroup,
    ActionType,
    CodeLine,
    CodeType,
    Comment,
    DigitalOutput,
    Movement,
    OverrideRobotTool,
    RobotTarget,
    SpeedData,
    WaitDI,
    WaitTime,
    WorkObject,
    ZoneData,
)
from ..core import (
    AxisLimits,
    AxisType,
    ExternalAxis,
    ExternalJointPosition,
    ExternalLinearAxis,
    ExternalRotationalAxis,
    Mesh,
    RobotJointPosition,
    RobotTool,
)
from ..util.logger import log_error

SERIALIZATION_VERSION = 1

Record = Dict[str, Any]


def _record(type_name: str, **fields) -> Record:
    return {"version": SERIALIZATION_VERSION, "type": type_name, **fields}


def _check_record(record: Record, expected: Optional[str] = None) -> str:
    if not isinstance(record, dict) or "type" not in record or "version" not in record:
        log_error("A serialized record needs a 'type' and a 'version'")
    if int(record["version"]) > SERIALIZATION_VERSION:
        log_error(f"Record version {record['version']} is newer than the supported version "
                  f"{SERIALIZATION_VERSION}")
    if expected is not None and record["type"] != expected:
        log_error(f"Expected a '{expected}' record, got '{record['type']}'")
    return record["type"]


# Geometry
def _encode_frame(frame) -> List[List[float]]:
    return np.asarray(frame).tolist()


def _decode_frame(data) -> jnp.ndarray:
    return jnp.asarray(data, dtype=jnp.float64).reshape(4, 4)


def _encode_mesh(mesh: Mesh) -> Record:
    return {"vertices": np.asarray(mesh.vertices).tolist(), "faces": np.asarray(mesh.faces).tolist()}


def _decode_mesh(data: Optional[Record]) -> Mesh:
    if data is None:
        return Mesh.empty()
    return Mesh.from_lists(data["vertices"], data["faces"])


# Tools and external axes
def encode_robot_tool(tool: RobotTool) -> Record:
    return _record(
        "robot_tool",
        name=tool.name,
        attachment_plane=_encode_frame(tool.attachment_plane),
        tool_plane=_encode_frame(tool.tool_plane),
        mesh=_encode_mesh(tool.mesh),
        mass=tool.mass,
    )


def decode_robot_tool(record: Record) -> RobotTool:
    _check_record(record, "robot_tool")
    return RobotTool.create(
        name=record["name"],
        attachment_plane=_decode_frame(record["attachment_plane"]),
        tool_plane=_decode_frame(record["tool_plane"]),
        mesh=_decode_mesh(record.get("mesh")),
        mass=record.get("mass", 0.001),
    )


def encode_external_axis(axis: ExternalAxis) -> Record:
    return _record(
        "external_axis",
        axis_type=axis.axis_type.value,
        name=axis.name,
        axis_plane=_encode_frame(axis.axis_plane),
        attachment_plane=_encode_frame(axis.attachment_plane),
        axis_limits=list(axis.axis_limits.as_tuple()),
        axis_number=axis.axis_number,
        moves_robot=axis.moves_robot,
        base_mesh=_encode_mesh(axis.base_mesh),
        link_mesh=_encode_mesh(axis.link_mesh),
    )


def decode_external_axis(record: Record) -> ExternalAxis:
    _check_record(record, "external_axis")
    axis_type = AxisType(record["axis_type"])
    axis_plane = _decode_frame(record["axis_plane"])
    limits = AxisLimits(*record["axis_limits"])
    base_mesh = _decode_mesh(record.get("base_mesh"))
    link_mesh = _decode_mesh(record.get("link_mesh"))
    if axis_type == AxisType.LINEAR:
        return ExternalLinearAxis(
            record["name"], axis_plane, limits, base_mesh, link_mesh,
            attachment_plane=_decode_frame(record["attachment_plane"]),
            axis_number=record["axis_number"], moves_robot=record["moves_robot"])
    return ExternalRotationalAxis(
        record["name"], axis_plane, limits, base_mesh, link_mesh,
        axis_number=record["axis_number"], moves_robot=record["moves_robot"])


# Data records
def _encode_speed_data(speed: SpeedData) -> Record:
    return {"name": speed.name, "v_tcp": speed.v_tcp, "v_ori": speed.v_ori, "v_leax": speed.v_leax,
            "v_reax": speed.v_reax, "predefined": speed.predefined}


def _encode_zone_data(zone: ZoneData) -> Record:
    return {"name": zone.name, "fine_point": zone.fine_point, "pzone_tcp": zone.pzone_tcp,
            "pzone_ori": zone.pzone_ori, "pzone_eax": zone.pzone_eax, "zone_ori": zone.zone_ori,
            "zone_leax": zone.zone_leax, "zone_reax": zone.zone_reax, "predefined": zone.predefined}


def _encode_work_object(work_object: WorkObject) -> Record:
    axis = work_object.external_axis
    return {"name": work_object.name, "plane": _encode_frame(work_object.plane),
            "external_axis": encode_external_axis(axis) if axis is not None else None}


def _decode_work_object(data: Record) -> WorkObject:
    axis = data.get("external_axis")
    return WorkObject(data["name"], _decode_frame(data["plane"]),
                      decode_external_axis(axis) if axis is not None else None)


def _encode_target(target: RobotTarget) -> Record:
    return {"name": target.name, "plane": _encode_frame(target.plane),
            "axis_configuration": target.axis_configuration,
            "external_axis_values": target.external_joint_position.to_list()}


def _decode_target(data: Record) -> RobotTarget:
    return RobotTarget.create(data["name"], _decode_frame(data["plane"]), data["axis_configuration"],
                              data["external_axis_values"])


def _encode_optional_tool(tool: Optional[RobotTool]) -> Optional[Record]:
    return encode_robot_tool(tool) if tool is not None else None


def _decode_optional_tool(data: Optional[Record]) -> Optional[RobotTool]:
    return decode_robot_tool(data) if data is not None else None


# Actions
def _encode_movement(action: Movement) -> Record:
    return {
        "target": _encode_target(action.target),
        "speed_data": _encode_speed_data(action.speed_data),
        "zone_data": _encode_zone_data(action.zone_data),
        "movement_type": int(action.movement_type),
        "robot_tool": _encode_optional_tool(action.robot_tool),
        "work_object": _encode_work_object(action.work_object),
        "digital_output": encode_action(action.digital_output) if action.digital_output is not None else None,
    }


def _decode_movement(data: Record) -> Movement:
    digital_output = data.get("digital_output")
    return Movement(
        target=_decode_target(data["target"]),
        speed_data=SpeedData(**data["speed_data"]),
        zone_data=ZoneData(**data["zone_data"]),
        movement_type=data["movement_type"],
        robot_tool=_decode_optional_tool(data.get("robot_tool")),
        work_object=_decode_work_object(data["work_object"]),
        digital_output=decode_action(digital_output) if digital_output is not None else None,
    )


def _encode_absolute_joint_movement(action: AbsoluteJointMovement) -> Record:
    return {
        "name": action.name,
        "internal_axis_values": action.internal_axis_values,
        "external_axis_values": action.external_axis_values,
        "speed_data": _encode_speed_data(action.speed_data),
        "zone_data": _encode_zone_data(action.zone_data),
        "robot_tool": _encode_optional_tool(action.robot_tool),
    }


def _decode_absolute_joint_movement(data: Record) -> AbsoluteJointMovement:
    return AbsoluteJointMovement(
        name=data["name"],
        robot_joint_position=RobotJointPosition(data["internal_axis_values"]),
        external_joint_position=ExternalJointPosition(data["external_axis_values"]),
        speed_data=SpeedData(**data["speed_data"]),
        zone_data=ZoneData(**data["zone_data"]),
        robot_tool=_decode_optional_tool(data.get("robot_tool")),
    )


ACTION_CODECS: Dict[ActionType, tuple] = {
    ActionType.MOVEMENT: (_encode_movement, _decode_movement),
    ActionType.ABSOLUTE_JOINT_MOVEMENT: (_encode_absolute_joint_movement, _decode_absolute_joint_movement),
    ActionType.DIGITAL_OUTPUT: (
        lambda a: {"name": a.name, "is_active": a.is_active},
        lambda d: DigitalOutput(d["name"], d["is_active"])),
    ActionType.WAIT_TIME: (
        lambda a: {"duration": a.duration},
        lambda d: WaitTime(d["duration"])),
    ActionType.WAIT_DI: (
        lambda a: {"name": a.name, "is_active": a.is_active},
        lambda d: WaitDI(d["name"], d["is_active"])),
    ActionType.COMMENT: (
        lambda a: {"text": a.text, "code_type": a.code_type.value},
        lambda d: Comment(d["text"], CodeType(d["code_type"]))),
    ActionType.CODE_LINE: (
        lambda a: {"code": a.code, "code_type": a.code_type.value},
        lambda d: CodeLine(d["code"], CodeType(d["code_type"]))),
    ActionType.OVERRIDE_ROBOT_TOOL: (
        lambda a: {"robot_tool": encode_robot_tool(a.robot_tool)},
        lambda d: OverrideRobotTool(decode_robot_tool(d["robot_tool"]))),
    ActionType.ACTION_GROUP: (
        lambda a: {"name": a.name, "actions": [encode_action(child) for child in a.actions]},
        lambda d: ActionGroup(d["name"], [decode_action(child) for child in d["actions"]])),
}


def encode_action(action: Action) -> Record:
    encode, _ = ACTION_CODECS[action.action_type]
    return _record(action.action_type.value, **encode(action))


def decode_action(record: Record) -> Action:
    type_name = _check_record(record)
    try:
        action_type = ActionType(type_name)
    except ValueError:
        log_error(f"Unknown action type '{type_name}'")
    _, decode = ACTION_CODECS[action_type]
    return decode(record)


def save_actions(actions: Sequence[Action], path: str):
    """Write actions to a JSON file."""
    with open(path, "w") as f:
        json.dump({"version": SERIALIZATION_VERSION, "actions": [encode_action(a) for a in actions]},
                  f, indent=2)


def load_actions(path: str) -> List[Action]:
    """Read actions written by :py:func:`save_actions`."""
    with open(path, "r") as f:
        data = json.load(f)
    if int(data.get("version", 0)) > SERIALIZATION_VERSION:
        log_error(f"File version {data['version']} is newer than the supported version "
                  f"{SERIALIZATION_VERSION}")
    return [decode_action(record) for record in data["actions"]]

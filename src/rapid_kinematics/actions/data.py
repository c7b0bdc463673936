"""RAPID data records referenced by actions.

These are the robtarget, speeddata, zonedata and wobjdata values of a RAPID
program. Each record knows its declaration text. Records that map onto a
predefined controller value (``v100``, ``z10``, ``fine``, ``wobj0``) declare
nothing.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

import jax
import jax.numpy as jnp
import numpy as np

from .base import ContentEquality
from .validation import (
    axis_configuration_is_valid,
    nearest_predefined_speed,
    predefined_speed_value_is_valid,
)
from ..core import ExternalAxis, ExternalJointPosition, RobotTool
from ..core.joint_position import format_number, format_value
from ..transforms import frames, se3, so3

Array = jax.Array


def pose_to_rapid(frame: Array) -> str:
    """``[[x, y, z], [q1, q2, q3, q4]]`` text of a frame."""
    position = np.asarray(se3.get_position(frame))
    quaternion = np.asarray(so3.to_quaternion(se3.get_rotation(frame)))
    return ("[[" + ", ".join(format_number(v) for v in position) + "], ["
            + ", ".join(format_number(v, 6) for v in quaternion) + "]]")


@dataclass(eq=False)
class SpeedData(ContentEquality):
    """Velocities of a movement (speeddata).

    A predefined speed data renders as ``v<n>``. A speed that is not one of
    the controller's predefined values is replaced by the nearest one.
    """
    name: str = ""
    v_tcp: float = 100.0
    v_ori: float = 500.0
    v_leax: float = 5000.0
    v_reax: float = 1000.0
    predefined: bool = False

    @classmethod
    def from_value(cls, v_tcp: float) -> "SpeedData":
        return cls(name="", v_tcp=float(v_tcp), predefined=True)

    @property
    def exact_predefined_value(self) -> bool:
        return predefined_speed_value_is_valid(self.v_tcp)

    @property
    def rapid_name(self) -> str:
        if self.predefined:
            return f"v{nearest_predefined_speed(self.v_tcp)}"
        return self.name

    @property
    def is_valid(self) -> bool:
        if self.predefined:
            return True
        return bool(self.name) and min(self.v_tcp, self.v_ori, self.v_leax, self.v_reax) >= 0

    def to_rapid_declaration(self) -> str:
        if self.predefined:
            return ""
        values = ", ".join(format_value(v) for v in (self.v_tcp, self.v_ori, self.v_leax, self.v_reax))
        return f"VAR speeddata {self.name} := [{values}];"

    def duplicate(self) -> "SpeedData":
        return SpeedData(self.name, self.v_tcp, self.v_ori, self.v_leax, self.v_reax, self.predefined)


@dataclass(eq=False)
class ZoneData(ContentEquality):
    """Path blending at a target (zonedata).

    ``ZoneData.from_precision(p)`` gives the predefined ``fine`` zone for a
    negative precision and ``z<p>`` otherwise.
    """
    name: str = ""
    fine_point: bool = False
    pzone_tcp: float = 10.0
    pzone_ori: float = 15.0
    pzone_eax: float = 15.0
    zone_ori: float = 1.5
    zone_leax: float = 15.0
    zone_reax: float = 1.5
    predefined: bool = False

    @classmethod
    def from_precision(cls, precision: int) -> "ZoneData":
        if precision < 0:
            return cls(name="fine", fine_point=True, pzone_tcp=0.0, pzone_ori=0.0, pzone_eax=0.0,
                       zone_ori=0.0, zone_leax=0.0, zone_reax=0.0, predefined=True)
        return cls(name=f"z{int(precision)}", pzone_tcp=float(precision), predefined=True)

    @property
    def precision(self) -> int:
        """Predefined zone size, -1 for fine."""
        return -1 if self.fine_point else int(self.pzone_tcp)

    @property
    def rapid_name(self) -> str:
        return self.name

    @property
    def is_valid(self) -> bool:
        return bool(self.name)

    def to_rapid_declaration(self) -> str:
        if self.predefined:
            return ""
        finep = "TRUE" if self.fine_point else "FALSE"
        values = ", ".join(format_value(v) for v in (
            self.pzone_tcp, self.pzone_ori, self.pzone_eax, self.zone_ori, self.zone_leax, self.zone_reax))
        return f"VAR zonedata {self.name} := [{finep}, {values}];"

    def duplicate(self) -> "ZoneData":
        return ZoneData(self.name, self.fine_point, self.pzone_tcp, self.pzone_ori, self.pzone_eax,
                        self.zone_ori, self.zone_leax, self.zone_reax, self.predefined)


@dataclass(eq=False)
class WorkObject(ContentEquality):
    """User frame that targets are expressed in (wobjdata).

    A work object mounted on a positioner names that mechanical unit and is
    not programmed in a fixed location.
    """
    name: str = "wobj0"
    plane: Array = field(default_factory=frames.world_xy)
    external_axis: Optional[ExternalAxis] = None

    @classmethod
    def default(cls) -> "WorkObject":
        return cls()

    @property
    def is_default(self) -> bool:
        return self.name == "wobj0"

    @property
    def is_valid(self) -> bool:
        return bool(self.name) and frames.is_valid(self.plane)

    def to_rapid_declaration(self) -> str:
        if self.external_axis is None:
            ufprog, ufmec = "TRUE", ""
        else:
            ufprog, ufmec = "FALSE", self.external_axis.name
        return (f"PERS wobjdata {self.name} := [FALSE, {ufprog}, \"{ufmec}\", "
                f"{pose_to_rapid(self.plane)}, [[0, 0, 0], [1, 0, 0, 0]]];")

    def duplicate(self) -> "WorkObject":
        axis = self.external_axis.duplicate() if self.external_axis is not None else None
        return WorkObject(self.name, jnp.array(self.plane), axis)


@dataclass(eq=False)
class RobotTarget(ContentEquality):
    """Cartesian target (robtarget).

    Attributes:
        name: RAPID variable name.
        plane: World frame the TCP should reach.
        axis_configuration: The cfx value of the robot configuration (0..7).
        external_joint_position: External axis values at the target.
    """
    name: str
    plane: Array
    axis_configuration: int = 0
    external_joint_position: ExternalJointPosition = field(default_factory=ExternalJointPosition)

    @classmethod
    def create(cls, name: str, plane: Array, axis_configuration: int = 0,
               external_axis_values: Sequence[float] = ()) -> "RobotTarget":
        return cls(name, plane, axis_configuration, ExternalJointPosition(external_axis_values))

    @property
    def is_valid(self) -> bool:
        return bool(self.name) and frames.is_valid(self.plane)

    @property
    def axis_configuration_is_valid(self) -> bool:
        return axis_configuration_is_valid(self.axis_configuration)

    def local_plane(self, work_object: Optional[WorkObject] = None) -> Array:
        """Target frame relative to the work object frame."""
        if work_object is None:
            return self.plane
        return se3.multiply(se3.inverse(work_object.plane), self.plane)

    def to_rapid_declaration(self, work_object: Optional[WorkObject] = None) -> str:
        pose = pose_to_rapid(self.local_plane(work_object))[1:-1]
        return (f"CONST robtarget {self.name} := [{pose}, [0, 0, 0, {self.axis_configuration}], "
                f"{self.external_joint_position.to_rapid()}];")

    def duplicate(self) -> "RobotTarget":
        return RobotTarget(self.name, jnp.array(self.plane), self.axis_configuration,
                           self.external_joint_position.duplicate())


def tool_to_rapid_declaration(tool: RobotTool) -> str:
    """tooldata declaration of a robot-held tool: TCP offset and mass."""
    return (f"PERS tooldata {tool.name} := [TRUE, {pose_to_rapid(tool.offset)}, "
            f"[{format_value(tool.mass)}, [0, 0, 0.001], [1, 0, 0, 0], 0, 0, 0]];")

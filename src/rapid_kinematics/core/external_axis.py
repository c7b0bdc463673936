"""External (auxiliary) axes: linear tracks and rotational positioners.

An external axis is posed by a single joint value. A linear axis translates
its link along the z-axis of its axis plane; a rotational axis rotates its
link about that z-axis through the axis plane origin. Unlike the immutable
robot model, external axes are edited in place through their setters, and
they cache the meshes of their last pose.
"""

import enum
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import jax
import jax.numpy as jnp

from .joint_position import AxisLimits, is_unset
from .mesh import Mesh
from ..transforms import frames, se3
from ..util.logger import log_error

Array = jax.Array

AXIS_LOGIC = "ABCDEF"


class AxisType(enum.Enum):
    LINEAR = "linear"
    ROTATIONAL = "rotational"


class ExternalAxis(ABC):
    """Common state and pose operations of an external axis.

    Args:
        name: Name of the mechanical unit.
        axis_plane: Frame whose z-axis is the motion direction or rotation axis.
        axis_limits: Limits in mm (linear) or degrees (rotational).
        base_mesh: Fixed part of the axis.
        link_mesh: Moving part of the axis, posed for axis value 0.
        attachment_plane: Frame where the robot or the work object is mounted.
            Defaults to the axis plane.
        axis_number: Logical axis slot 0..5 (eax_a .. eax_f), -1 if unassigned.
        moves_robot: True if the axis carries the robot base.
    """

    axis_type: AxisType

    def __init__(self, name: str = "", axis_plane: Optional[Array] = None,
                 axis_limits: Optional[AxisLimits] = None, base_mesh: Optional[Mesh] = None,
                 link_mesh: Optional[Mesh] = None, attachment_plane: Optional[Array] = None,
                 axis_number: int = -1, moves_robot: bool = False):
        self._name = name
        self._axis_plane = axis_plane
        self._attachment_plane = attachment_plane if attachment_plane is not None else axis_plane
        self._axis_limits = axis_limits
        self._axis_number = -1
        self.axis_number = axis_number
        self._moves_robot = moves_robot
        self._base_mesh = base_mesh if base_mesh is not None else Mesh.empty()
        self._link_mesh = link_mesh if link_mesh is not None else Mesh.empty()
        self._posed_meshes: List[Mesh] = []

    def __repr__(self) -> str:
        label = "External Linear Axis" if self.axis_type == AxisType.LINEAR else "External Rotational Axis"
        if not self.is_valid:
            return f"Invalid {label}"
        return f"{label} ({self._name})"

    # Pose computation
    @abstractmethod
    def _motion(self, value: float) -> Array:
        """Transform of the link for a (resolved) axis value."""

    def resolve_value(self, value: float) -> float:
        """Substitute the nearest in-limit value of 0 for the unset sentinel."""
        if is_unset(value):
            return self._axis_limits.clamp(0.0)
        return value

    def calculate_transformation_matrix(self, value: float) -> Tuple[Array, bool]:
        """Transform for ``value`` and whether it lies within the limits.

        The transform is always computed from the raw value; out-of-limit
        values are only reported.
        """
        value = self.resolve_value(value)
        in_limits = self._axis_limits.contains(value)
        return self._motion(value), in_limits

    def calculate_transformation_matrix_save(self, value: float) -> Array:
        """Transform for ``value`` clamped into the limits."""
        value = self._axis_limits.clamp(self.resolve_value(value))
        return self._motion(value)

    def calculate_position(self, value: float) -> Tuple[Array, bool]:
        """Attachment plane posed for ``value``, and whether it lies within the limits."""
        transform, in_limits = self.calculate_transformation_matrix(value)
        return se3.multiply(transform, self._attachment_plane), in_limits

    def calculate_position_save(self, value: float) -> Array:
        """Attachment plane posed for ``value`` clamped into the limits."""
        transform = self.calculate_transformation_matrix_save(value)
        return se3.multiply(transform, self._attachment_plane)

    def pose_meshes(self, value: float) -> List[Mesh]:
        """Return ``[base, link]`` with the link posed by the unclamped transform."""
        transform, _ = self.calculate_transformation_matrix(value)
        self._posed_meshes = [self._base_mesh.duplicate(), self._link_mesh.transform(transform)]
        return self._posed_meshes

    def transform(self, xform: Array):
        """Relocate the axis in place with a rigid transform."""
        self._attachment_plane = se3.multiply(xform, self._attachment_plane)
        self._axis_plane = se3.multiply(xform, self._axis_plane)
        self._base_mesh = self._base_mesh.transform(xform)
        self._link_mesh = self._link_mesh.transform(xform)
        self._posed_meshes = [mesh.transform(xform) for mesh in self._posed_meshes]

    def reinitialize(self):
        self._posed_meshes = []

    def duplicate(self, duplicate_mesh: bool = True) -> "ExternalAxis":
        """Deep copy; without meshes if ``duplicate_mesh`` is False."""
        other = type(self).__new__(type(self))
        other._name = self._name
        other._axis_plane = jnp.array(self._axis_plane) if self._axis_plane is not None else None
        other._attachment_plane = (jnp.array(self._attachment_plane)
                                   if self._attachment_plane is not None else None)
        other._axis_limits = self._axis_limits
        other._axis_number = self._axis_number
        other._moves_robot = self._moves_robot
        if duplicate_mesh:
            other._base_mesh = self._base_mesh.duplicate()
            other._link_mesh = self._link_mesh.duplicate()
            other._posed_meshes = [mesh.duplicate() for mesh in self._posed_meshes]
        else:
            other._base_mesh = Mesh.empty()
            other._link_mesh = Mesh.empty()
            other._posed_meshes = []
        return other

    # Properties
    @property
    def is_valid(self) -> bool:
        if not frames.is_valid(self._attachment_plane):
            return False
        if not frames.is_valid(self._axis_plane):
            return False
        if self._axis_limits is None:
            return False
        return True

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str):
        self._name = value

    @property
    def attachment_plane(self) -> Array:
        return self._attachment_plane

    @attachment_plane.setter
    def attachment_plane(self, value: Array):
        self._attachment_plane = value
        self.reinitialize()

    @property
    def axis_plane(self) -> Array:
        return self._axis_plane

    @axis_plane.setter
    def axis_plane(self, value: Array):
        self._axis_plane = value
        self.reinitialize()

    @property
    def axis_limits(self) -> AxisLimits:
        return self._axis_limits

    @axis_limits.setter
    def axis_limits(self, value: AxisLimits):
        self._axis_limits = value
        self.reinitialize()

    @property
    def axis_number(self) -> int:
        return self._axis_number

    @axis_number.setter
    def axis_number(self, value: int):
        if value < -1 or value > 5:
            log_error(f"Axis number must be in -1..5, got {value}")
        self._axis_number = value

    @property
    def axis_logic(self) -> str:
        """RAPID extjoint letter of the axis slot, '-' if unassigned."""
        if 0 <= self._axis_number < len(AXIS_LOGIC):
            return AXIS_LOGIC[self._axis_number]
        return "-"

    @property
    def moves_robot(self) -> bool:
        return self._moves_robot

    @moves_robot.setter
    def moves_robot(self, value: bool):
        self._moves_robot = value

    @property
    def base_mesh(self) -> Mesh:
        return self._base_mesh

    @base_mesh.setter
    def base_mesh(self, value: Mesh):
        self._base_mesh = value
        self._posed_meshes = []

    @property
    def link_mesh(self) -> Mesh:
        return self._link_mesh

    @link_mesh.setter
    def link_mesh(self, value: Mesh):
        self._link_mesh = value
        self._posed_meshes = []

    @property
    def posed_meshes(self) -> List[Mesh]:
        return self._posed_meshes


class ExternalLinearAxis(ExternalAxis):
    """Track that translates its link along the z-axis of the axis plane (mm)."""

    axis_type = AxisType.LINEAR

    @property
    def axis(self) -> Array:
        return frames.z_axis(self._axis_plane)

    def _motion(self, value: float) -> Array:
        return se3.translation(self.axis * value)


class ExternalRotationalAxis(ExternalAxis):
    """Positioner that rotates its link about the z-axis of the axis plane (degrees).

    The attachment plane is kept equal to the axis plane: setting either one
    overwrites the other.
    """

    axis_type = AxisType.ROTATIONAL

    def __init__(self, name: str = "", axis_plane: Optional[Array] = None,
                 axis_limits: Optional[AxisLimits] = None, base_mesh: Optional[Mesh] = None,
                 link_mesh: Optional[Mesh] = None, axis_number: int = -1,
                 moves_robot: bool = False):
        super().__init__(name, axis_plane, axis_limits, base_mesh, link_mesh,
                         attachment_plane=axis_plane, axis_number=axis_number,
                         moves_robot=moves_robot)

    def _motion(self, value: float) -> Array:
        return se3.rotation_about_axis(
            jnp.deg2rad(value), frames.z_axis(self._axis_plane), frames.origin(self._axis_plane))

    @ExternalAxis.attachment_plane.setter
    def attachment_plane(self, value: Array):
        self._attachment_plane = value
        self._axis_plane = jnp.array(value)
        self.reinitialize()

    @ExternalAxis.axis_plane.setter
    def axis_plane(self, value: Array):
        self._axis_plane = value
        self._attachment_plane = jnp.array(value)
        self.reinitialize()

"""Robot and tool descriptions for forward kinematics and code generation.

The robot is a 6-axis serial arm described at its zero pose: every axis is a
frame whose z-axis is the rotation axis. Frames are stored in robot-local
coordinates and placed in the world by ``base_plane``.
"""

from typing import List, Optional, Sequence, Tuple

import jax
import jax.numpy as jnp
from flax import struct

from .external_axis import ExternalAxis
from .joint_position import NUM_EXTERNAL_AXES, NUM_INTERNAL_AXES, AxisLimits
from .mesh import Mesh
from ..transforms import frames, se3
from ..util.logger import log_error

Array = jax.Array


@struct.dataclass
class RobotTool:
    """End effector mounted on the robot flange.

    Attributes:
        name: RAPID tooldata name.
        attachment_plane: Frame of the tool that is mounted on the flange.
        tool_plane: Tool center point frame, in the same coordinates as
                    ``attachment_plane``.
        mesh: Tool geometry, in the same coordinates as ``attachment_plane``.
        mass: Tool mass in kg, written to the tooldata declaration.
    """
    name: str = struct.field(pytree_node=False)
    attachment_plane: Array
    tool_plane: Array
    mesh: Mesh
    mass: float = struct.field(pytree_node=False, default=0.001)

    @classmethod
    def create(cls, name: str, attachment_plane: Optional[Array] = None,
               tool_plane: Optional[Array] = None, mesh: Optional[Mesh] = None,
               mass: float = 0.001) -> "RobotTool":
        return cls(
            name=name,
            attachment_plane=attachment_plane if attachment_plane is not None else frames.world_xy(),
            tool_plane=tool_plane if tool_plane is not None else frames.world_xy(),
            mesh=mesh if mesh is not None else Mesh.empty(),
            mass=mass,
        )

    @classmethod
    def default(cls) -> "RobotTool":
        """The bare flange, ``tool0``."""
        return cls.create("tool0")

    @property
    def is_valid(self) -> bool:
        if not self.name:
            return False
        return frames.is_valid(self.attachment_plane) and frames.is_valid(self.tool_plane)

    @property
    def offset(self) -> Array:
        """TCP frame relative to the mounting frame."""
        return se3.multiply(se3.inverse(self.attachment_plane), self.tool_plane)

    def __eq__(self, other):
        if not isinstance(other, RobotTool):
            return NotImplemented
        return (self.name == other.name and self.mass == other.mass
                and bool(jnp.array_equal(self.attachment_plane, other.attachment_plane))
                and bool(jnp.array_equal(self.tool_plane, other.tool_plane))
                and self.mesh.equals(other.mesh))

    def duplicate(self) -> "RobotTool":
        return self.replace(attachment_plane=jnp.array(self.attachment_plane),
                            tool_plane=jnp.array(self.tool_plane),
                            mesh=self.mesh.duplicate())


@struct.dataclass
class RobotModel:
    """Immutable description of a 6-axis robot with its tool and external axes.

    Attributes:
        name: Robot name. Static field.
        base_plane: (4, 4) world frame of the robot base (position plane).
        axis_planes: (6, 4, 4) robot-local zero-pose frames of the internal axes.
        axis_limits: Limits of the internal axes in degrees. Static field.
        meshes: Base mesh followed by the six link meshes, robot-local.
        mounting_frame: (4, 4) robot-local flange frame at zero pose.
        tool: Mounted tool.
        external_axes: External axes ordered by axis number. Static field;
                       the axes themselves are mutable objects.
    """
    name: str = struct.field(pytree_node=False)
    base_plane: Array
    axis_planes: Array
    axis_limits: Tuple[AxisLimits, ...] = struct.field(pytree_node=False)
    meshes: Tuple[Mesh, ...]
    mounting_frame: Array
    tool: RobotTool
    external_axes: Tuple[ExternalAxis, ...] = struct.field(pytree_node=False, default=())

    @classmethod
    def create(cls, name: str, axis_planes: Sequence[Array], axis_limits: Sequence[AxisLimits],
               mounting_frame: Array, base_plane: Optional[Array] = None,
               meshes: Optional[Sequence[Mesh]] = None, tool: Optional[RobotTool] = None,
               external_axes: Sequence[ExternalAxis] = ()) -> "RobotModel":
        """Validate the description and assign external axis numbers.

        Unassigned external axes (axis number -1) receive the first free slot,
        in attachment order. Axis numbers must be unique.

        Raises:
            ValueError: If the arm does not have exactly six axes, if the mesh
                        list is not base + six links, or if external axis
                        numbers collide.
        """
        if len(axis_planes) != NUM_INTERNAL_AXES or len(axis_limits) != NUM_INTERNAL_AXES:
            log_error(f"A robot needs exactly {NUM_INTERNAL_AXES} axis planes and axis limits, "
                      f"got {len(axis_planes)} and {len(axis_limits)}")
        if meshes is None:
            meshes = [Mesh.empty() for _ in range(NUM_INTERNAL_AXES + 1)]
        if len(meshes) != NUM_INTERNAL_AXES + 1:
            log_error(f"A robot needs {NUM_INTERNAL_AXES + 1} meshes (base and links), got {len(meshes)}")

        return cls(
            name=name,
            base_plane=base_plane if base_plane is not None else frames.world_xy(),
            axis_planes=jnp.stack([jnp.asarray(plane) for plane in axis_planes]),
            axis_limits=tuple(axis_limits),
            meshes=tuple(meshes),
            mounting_frame=jnp.asarray(mounting_frame),
            tool=tool if tool is not None else RobotTool.default(),
            external_axes=assign_axis_numbers(external_axes),
        )

    @property
    def world_axis_planes(self) -> Array:
        """(6, 4, 4) zero-pose axis frames in world coordinates."""
        return se3.multiply(self.base_plane, self.axis_planes)

    @property
    def world_mounting_frame(self) -> Array:
        return se3.multiply(self.base_plane, self.mounting_frame)

    @property
    def world_tool_plane(self) -> Array:
        """Zero-pose TCP frame in world coordinates."""
        return se3.multiply(self.world_mounting_frame, self.tool.offset)

    @property
    def is_valid(self) -> bool:
        if not self.name:
            return False
        if not frames.is_valid(self.base_plane):
            return False
        if not all(frames.is_valid(plane) for plane in self.axis_planes):
            return False
        if not self.tool.is_valid:
            return False
        return all(axis.is_valid for axis in self.external_axes)

    def with_tool(self, tool: RobotTool) -> "RobotModel":
        return self.replace(tool=tool)

    def get_external_axis(self, name: str) -> Optional[ExternalAxis]:
        for axis in self.external_axes:
            if axis.name == name:
                return axis
        return None


def assign_axis_numbers(external_axes: Sequence[ExternalAxis]) -> Tuple[ExternalAxis, ...]:
    """Give unassigned axes the first free slot and order the axes by slot."""
    if len(external_axes) > NUM_EXTERNAL_AXES:
        log_error(f"At most {NUM_EXTERNAL_AXES} external axes can be attached, got {len(external_axes)}")

    used: List[int] = []
    for axis in external_axes:
        if axis.axis_number == -1:
            continue
        if axis.axis_number in used:
            log_error(f"External axis number {axis.axis_number} is assigned more than once")
        used.append(axis.axis_number)

    free = [i for i in range(NUM_EXTERNAL_AXES) if i not in used]
    for axis in external_axes:
        if axis.axis_number == -1:
            axis.axis_number = free.pop(0)

    return tuple(sorted(external_axes, key=lambda axis: axis.axis_number))

"""Forward kinematics for a 6-axis robot with external axes.

The internal chain is a product of exponentials in the world frame: each axis
rotates about its zero-pose axis frame, and the pose of link ``i`` is the
product of the incremental rotations of axes ``0 .. i``. External axes that
carry the robot are resolved first and prepended to that chain; positioners
that do not carry the robot are posed on their own.

Out-of-limit joint values never abort the computation. They are reported in
``error_text`` and in the in-limit flags, and the raw value is used. The
``save`` variant clamps every value into its limits instead.
"""

from typing import List, Optional, Sequence, Tuple

import jax
import jax.numpy as jnp
from flax import struct

from .core import Mesh, RobotModel
from .core.joint_position import NUM_INTERNAL_AXES, is_unset
from .transforms import frames, se3
from .util.logger import log_error

Array = jax.Array


@struct.dataclass
class ForwardKinematicsResult:
    """Outcome of one forward kinematics evaluation.

    Attributes:
        tcp_plane: (4, 4) world frame of the tool center point.
        internal_axis_planes: (6, 4, 4) posed frames of the internal axes.
        external_axis_planes: Posed attachment frame of every external axis.
        posed_internal_meshes: Base, six links and tool; empty when meshes are hidden.
        posed_external_meshes: ``[base, link]`` per external axis; empty when meshes are hidden.
        internal_axis_in_limits: One flag per internal axis.
        external_axis_in_limits: One flag per external axis.
        error_text: One warning per axis outside its limits.
    """
    tcp_plane: Array
    internal_axis_planes: Array
    external_axis_planes: Tuple[Array, ...]
    posed_internal_meshes: Tuple[Mesh, ...]
    posed_external_meshes: Tuple[Tuple[Mesh, ...], ...]
    internal_axis_in_limits: Tuple[bool, ...] = struct.field(pytree_node=False)
    external_axis_in_limits: Tuple[bool, ...] = struct.field(pytree_node=False)
    error_text: Tuple[str, ...] = struct.field(pytree_node=False)

    @property
    def in_limits(self) -> Tuple[bool, ...]:
        """Internal flags followed by external flags."""
        return self.internal_axis_in_limits + self.external_axis_in_limits

    @property
    def axes_are_valid(self) -> bool:
        return all(self.in_limits)


def accumulate_chain(transforms: Array) -> Array:
    """Cumulative products ``T_0, T_0 T_1, ..., T_0 ... T_n`` of a (n, 4, 4) stack."""

    def scan_body(carry, T):
        carry = se3.multiply(carry, T)
        return carry, carry

    _, chain = jax.lax.scan(scan_body, jnp.eye(4, dtype=transforms.dtype), transforms)
    return chain


def internal_axis_transforms(robot: RobotModel, axis_values: Sequence[float]) -> Array:
    """(6, 4, 4) incremental rotations of the internal axes, degrees in."""
    planes = robot.world_axis_planes
    angles = jnp.deg2rad(jnp.asarray(axis_values, dtype=jnp.float64))
    return se3.rotation_about_axis(angles, frames.z_axis(planes), frames.origin(planes))


def _check_input(robot: RobotModel, internal_axis_values: Sequence[float],
                 external_axis_values: Sequence[float]):
    if len(internal_axis_values) < NUM_INTERNAL_AXES:
        log_error(f"Forward kinematics needs {NUM_INTERNAL_AXES} internal axis values, "
                  f"got {len(internal_axis_values)}")
    if len(external_axis_values) < len(robot.external_axes):
        log_error(f"Forward kinematics needs {len(robot.external_axes)} external axis values, "
                  f"got {len(external_axis_values)}")


def forward_kinematics(robot: RobotModel, internal_axis_values: Sequence[float],
                       external_axis_values: Sequence[float] = (),
                       hide_mesh: bool = False) -> ForwardKinematicsResult:
    """Pose the robot and its external axes, reporting limit violations.

    Args:
        robot: Robot to pose.
        internal_axis_values: Six internal axis values in degrees.
        external_axis_values: One value per attached external axis, in
                              attachment order. Extra values are ignored.
        hide_mesh: Skip mesh posing and compute frames only.

    Returns:
        ForwardKinematicsResult with raw-value poses and one warning per
        violated axis.

    Raises:
        ValueError: If fewer than 6 internal values or fewer external values
                    than attached external axes are supplied.
    """
    _check_input(robot, internal_axis_values, external_axis_values)

    error_text: List[str] = []
    base_transform = jnp.eye(4)
    external_transforms = []
    external_in_limits = []

    for i, axis in enumerate(robot.external_axes):
        transform, in_limits = axis.calculate_transformation_matrix(external_axis_values[i])
        if not in_limits:
            error_text.append(f"External axis value {i + 1} is not in range.")
        if axis.moves_robot:
            base_transform = se3.multiply(base_transform, transform)
        external_transforms.append(transform)
        external_in_limits.append(in_limits)

    values = []
    internal_in_limits = []
    for i in range(NUM_INTERNAL_AXES):
        limits = robot.axis_limits[i]
        value = internal_axis_values[i]
        if is_unset(value):
            value = limits.clamp(0.0)
        in_limits = limits.contains(value)
        if not in_limits:
            error_text.append(f"Internal axis value {i + 1} is not in range.")
        values.append(value)
        internal_in_limits.append(in_limits)

    return _pose(robot, values, base_transform, external_transforms,
                 tuple(internal_in_limits), tuple(external_in_limits), tuple(error_text), hide_mesh)


def forward_kinematics_save(robot: RobotModel, internal_axis_values: Sequence[float],
                            external_axis_values: Sequence[float] = (),
                            hide_mesh: bool = False) -> ForwardKinematicsResult:
    """Pose the robot with every axis value clamped into its limits.

    Never reports warnings; all in-limit flags are True.
    """
    _check_input(robot, internal_axis_values, external_axis_values)

    base_transform = jnp.eye(4)
    external_transforms = []
    for i, axis in enumerate(robot.external_axes):
        transform = axis.calculate_transformation_matrix_save(external_axis_values[i])
        if axis.moves_robot:
            base_transform = se3.multiply(base_transform, transform)
        external_transforms.append(transform)

    values = []
    for i in range(NUM_INTERNAL_AXES):
        limits = robot.axis_limits[i]
        value = internal_axis_values[i]
        values.append(limits.clamp(limits.clamp(0.0) if is_unset(value) else value))

    return _pose(robot, values, base_transform, external_transforms,
                 (True,) * NUM_INTERNAL_AXES, (True,) * len(robot.external_axes), (), hide_mesh)


def _pose(robot: RobotModel, values: Sequence[float], base_transform: Array,
          external_transforms: Sequence[Array], internal_in_limits, external_in_limits,
          error_text, hide_mesh: bool) -> ForwardKinematicsResult:
    # Pose of every link relative to the (possibly moved) robot base
    chain = se3.multiply(base_transform, accumulate_chain(internal_axis_transforms(robot, values)))

    tcp_plane = se3.multiply(chain[-1], robot.world_tool_plane)
    internal_axis_planes = se3.multiply(chain, robot.world_axis_planes)
    external_axis_planes = tuple(
        se3.multiply(transform, axis.attachment_plane)
        for axis, transform in zip(robot.external_axes, external_transforms))

    posed_internal_meshes: Tuple[Mesh, ...] = ()
    posed_external_meshes: Tuple[Tuple[Mesh, ...], ...] = ()

    if not hide_mesh:
        link_meshes = [robot.meshes[0].transform(se3.multiply(base_transform, robot.base_plane))]
        for i in range(NUM_INTERNAL_AXES):
            link_meshes.append(robot.meshes[i + 1].transform(se3.multiply(chain[i], robot.base_plane)))
        tool_zero_pose = se3.multiply(robot.world_mounting_frame, se3.inverse(robot.tool.attachment_plane))
        link_meshes.append(robot.tool.mesh.transform(se3.multiply(chain[-1], tool_zero_pose)))
        posed_internal_meshes = tuple(link_meshes)

        posed_external_meshes = tuple(
            (axis.base_mesh.duplicate(), axis.link_mesh.transform(transform))
            for axis, transform in zip(robot.external_axes, external_transforms))

    return ForwardKinematicsResult(
        tcp_plane=tcp_plane,
        internal_axis_planes=internal_axis_planes,
        external_axis_planes=external_axis_planes,
        posed_internal_meshes=posed_internal_meshes,
        posed_external_meshes=posed_external_meshes,
        internal_axis_in_limits=tuple(internal_in_limits),
        external_axis_in_limits=tuple(external_in_limits),
        error_text=tuple(error_text),
    )


class ForwardKinematics:
    """Forward kinematics engine for one robot.

    Every call computes a fresh result; the engine only keeps the last one so
    that a viewer can redraw it.

    Args:
        robot: Robot to pose.
        hide_mesh: Compute frames only and skip mesh posing.
    """

    def __init__(self, robot: RobotModel, hide_mesh: bool = False):
        self.robot = robot
        self.hide_mesh = hide_mesh
        self.last_result: Optional[ForwardKinematicsResult] = None

    def calculate(self, internal_axis_values: Sequence[float],
                  external_axis_values: Sequence[float] = ()) -> ForwardKinematicsResult:
        """Pose with raw values and report axes outside their limits."""
        self.last_result = forward_kinematics(
            self.robot, internal_axis_values, external_axis_values, self.hide_mesh)
        return self.last_result

    def calculate_save(self, internal_axis_values: Sequence[float],
                       external_axis_values: Sequence[float] = ()) -> ForwardKinematicsResult:
        """Pose with every value clamped into its limits."""
        self.last_result = forward_kinematics_save(
            self.robot, internal_axis_values, external_axis_values, self.hide_mesh)
        return self.last_result

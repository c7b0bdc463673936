"""Tests for forward kinematics of robots with external axes."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from rapid_kinematics.chain import (
    ForwardKinematics,
    accumulate_chain,
    forward_kinematics,
    forward_kinematics_save,
)
from rapid_kinematics.core import (
    AxisLimits,
    ExternalLinearAxis,
    ExternalRotationalAxis,
    RobotModel,
    RobotTool,
    UNSET_AXIS_VALUE,
)
from rapid_kinematics.core.mesh import join
from rapid_kinematics.transforms import frames, se3

# Built once: hypothesis does not reset function-scoped fixtures between examples
BARE_ROBOT = RobotModel.create(
    "bare",
    [se3.translation(jnp.array([0.0, 0.0, 400.0 * i])) for i in range(6)],
    [AxisLimits(-180.0, 180.0)] * 6,
    se3.translation(jnp.array([0.0, 0.0, 2400.0])),
)


def with_axes(robot, *axes):
    return robot.create(
        name=robot.name,
        axis_planes=list(robot.axis_planes),
        axis_limits=robot.axis_limits,
        mounting_frame=robot.mounting_frame,
        base_plane=robot.base_plane,
        meshes=robot.meshes,
        tool=robot.tool,
        external_axes=axes,
    )


def make_track(triangle):
    plane = frames.from_origin_and_axes(jnp.zeros(3), jnp.array([0.0, 1.0, 0.0]), jnp.array([0.0, 0.0, 1.0]))
    return ExternalLinearAxis("track", plane, AxisLimits(0.0, 4000.0), triangle, triangle, moves_robot=True)


def make_positioner(triangle):
    plane = se3.translation(jnp.array([2000.0, 0.0, 0.0]))
    return ExternalRotationalAxis("positioner", plane, AxisLimits(-180.0, 180.0), triangle, triangle)


# Robot model
def test_zero_pose_tcp_is_tool_offset_on_base(aligned_robot):
    """Test TCP at zero pose."""
    result = forward_kinematics(aligned_robot, [0.0] * 6)

    expected = aligned_robot.base_plane @ aligned_robot.mounting_frame @ aligned_robot.tool.offset
    np.testing.assert_allclose(result.tcp_plane, expected, atol=1e-9)
    np.testing.assert_allclose(frames.origin(result.tcp_plane), jnp.array([100.0, 200.0, 2250.0]), atol=1e-9)
    assert result.error_text == ()
    assert result.axes_are_valid


def test_zero_pose_internal_axis_planes(aligned_robot):
    """Test internal axis planes at zero pose."""
    result = forward_kinematics(aligned_robot, [0.0] * 6)
    np.testing.assert_allclose(result.internal_axis_planes, aligned_robot.world_axis_planes, atol=1e-9)


def test_with_tool_moves_tcp_only(aligned_robot):
    """Test tool swap moves the TCP only."""
    bare = aligned_robot.with_tool(RobotTool.default())

    assert aligned_robot.tool.name == "gripper"
    assert bare.tool.name == "tool0"
    np.testing.assert_allclose(frames.origin(forward_kinematics(bare, [0.0] * 6).tcp_plane),
                               jnp.array([100.0, 200.0, 2100.0]), atol=1e-9)


def test_join_reindexes_faces(triangle):
    """Test joined mesh face indices."""
    joined = join([triangle, triangle.transform(se3.translation(jnp.array([0.0, 0.0, 5.0])))])

    assert joined.vertices.shape == (6, 3)
    np.testing.assert_array_equal(joined.faces, jnp.array([[0, 1, 2], [3, 4, 5]]))
    np.testing.assert_allclose(joined.vertices[3:, 2], jnp.full(3, 5.0))
    assert join([]).is_empty


# Axis limits
@given(st.lists(st.floats(min_value=-1.0e4, max_value=1.0e4, allow_nan=False), min_size=6, max_size=6))
@settings(deadline=None, max_examples=20)
def test_warning_count_equals_violated_axes(values):
    """Test one warning per violated axis."""
    result = forward_kinematics(BARE_ROBOT, values)

    violated = [i for i, v in enumerate(values) if not -180.0 <= v <= 180.0]
    assert len(result.error_text) == len(violated)
    assert [not flag for flag in result.internal_axis_in_limits].count(True) == len(violated)
    assert bool(jnp.all(jnp.isfinite(result.tcp_plane)))


def test_warning_texts(aligned_robot):
    """Test limit warning texts."""
    result = forward_kinematics(aligned_robot, [200.0, 0.0, 0.0, 0.0, 0.0, -190.0])
    assert result.error_text == ("Internal axis value 1 is not in range.",
                                 "Internal axis value 6 is not in range.")
    assert result.internal_axis_in_limits == (False, True, True, True, True, False)
    assert not result.axes_are_valid


def test_unset_internal_value_uses_zero(aligned_robot):
    """Test unset internal values use zero."""
    unset = forward_kinematics(aligned_robot, [UNSET_AXIS_VALUE] + [0.0] * 5)
    zero = forward_kinematics(aligned_robot, [0.0] * 6)
    np.testing.assert_allclose(unset.tcp_plane, zero.tcp_plane)
    assert unset.error_text == ()


# IRB 4600
def test_irb4600_zero_pose(irb4600):
    """Test IRB 4600 zero pose."""
    result = forward_kinematics(irb4600, [0.0] * 6)
    np.testing.assert_allclose(frames.origin(result.tcp_plane), jnp.array([1580.0, 0.0, 1765.0]), atol=1e-9)
    np.testing.assert_allclose(frames.z_axis(result.tcp_plane), jnp.array([1.0, 0.0, 0.0]), atol=1e-12)
    np.testing.assert_allclose(frames.x_axis(result.tcp_plane), jnp.array([0.0, 0.0, -1.0]), atol=1e-12)


def test_irb4600_first_axis(irb4600):
    """Test IRB 4600 first axis rotation."""
    result = forward_kinematics(irb4600, [90.0, 0.0, 0.0, 0.0, 0.0, 0.0])
    np.testing.assert_allclose(frames.origin(result.tcp_plane), jnp.array([0.0, 1580.0, 1765.0]), atol=1e-9)
    np.testing.assert_allclose(frames.z_axis(result.tcp_plane), jnp.array([0.0, 1.0, 0.0]), atol=1e-12)


def test_irb4600_second_axis(irb4600):
    """Test IRB 4600 second axis rotation."""
    result = forward_kinematics(irb4600, [0.0, 90.0, 0.0, 0.0, 0.0, 0.0])
    np.testing.assert_allclose(frames.origin(result.tcp_plane), jnp.array([1445.0, 0.0, -910.0]), atol=1e-9)


def test_wrist_roll_keeps_tcp_origin(irb4600):
    """Test that rolling the flange axis keeps the TCP origin."""
    result = forward_kinematics(irb4600, [0.0, 0.0, 0.0, 0.0, 0.0, 75.0])
    np.testing.assert_allclose(frames.origin(result.tcp_plane), jnp.array([1580.0, 0.0, 1765.0]), atol=1e-9)


def test_save_clamps_values(aligned_robot):
    """Test save mode clamps axis values."""
    clamped = forward_kinematics_save(aligned_robot, [200.0, 0.0, 0.0, 30.0, 0.0, 0.0])
    inside = forward_kinematics(aligned_robot, [180.0, 0.0, 0.0, 30.0, 0.0, 0.0])

    np.testing.assert_allclose(clamped.tcp_plane, inside.tcp_plane, atol=1e-12)
    assert clamped.error_text == ()
    assert all(clamped.in_limits)


# External axes
def test_track_moves_robot(aligned_robot, triangle):
    """Test track carries the robot."""
    robot = with_axes(aligned_robot, make_track(triangle))
    zero = forward_kinematics(robot, [0.0] * 6, [0.0])
    moved = forward_kinematics(robot, [0.0] * 6, [500.0])

    np.testing.assert_allclose(frames.origin(moved.tcp_plane) - frames.origin(zero.tcp_plane),
                               jnp.array([500.0, 0.0, 0.0]), atol=1e-9)
    np.testing.assert_allclose(moved.posed_internal_meshes[0].vertices,
                               zero.posed_internal_meshes[0].vertices + jnp.array([500.0, 0.0, 0.0]), atol=1e-9)
    assert moved.external_axis_in_limits == (True,)


def test_positioner_is_posed_independently(aligned_robot, triangle):
    """Test positioner pose."""
    robot = with_axes(aligned_robot, make_positioner(triangle))
    zero = forward_kinematics(robot, [0.0] * 6, [0.0])
    turned = forward_kinematics(robot, [0.0] * 6, [90.0])

    np.testing.assert_allclose(turned.tcp_plane, zero.tcp_plane, atol=1e-12)
    np.testing.assert_allclose(frames.x_axis(turned.external_axis_planes[0]), jnp.array([0.0, 1.0, 0.0]),
                               atol=1e-12)
    base, link = turned.posed_external_meshes[0]
    assert base.equals(triangle)
    np.testing.assert_allclose(link.vertices[1], jnp.array([2000.0, -1999.0, 0.0]), atol=1e-9)


def test_external_warning(aligned_robot, triangle):
    """Test external axis limit warning."""
    robot = with_axes(aligned_robot, make_track(triangle), make_positioner(triangle))
    result = forward_kinematics(robot, [0.0] * 6, [-10.0, 270.0, 5.0])

    assert result.error_text == ("External axis value 1 is not in range.",
                                 "External axis value 2 is not in range.")
    assert result.in_limits == (True,) * 6 + (False, False)


def test_mesh_outputs(aligned_robot):
    """Test posed mesh outputs."""
    result = forward_kinematics(aligned_robot, [10.0, 20.0, 30.0, 0.0, 0.0, 0.0])
    assert len(result.posed_internal_meshes) == 8
    assert result.posed_internal_meshes[-1].is_empty

    hidden = forward_kinematics(aligned_robot, [10.0, 20.0, 30.0, 0.0, 0.0, 0.0], hide_mesh=True)
    assert hidden.posed_internal_meshes == ()
    assert hidden.posed_external_meshes == ()
    np.testing.assert_allclose(hidden.tcp_plane, result.tcp_plane)


# Engine
def test_missing_values_raise(aligned_robot, triangle):
    """Test missing axis values raise."""
    with pytest.raises(ValueError):
        forward_kinematics(aligned_robot, [0.0] * 5)

    robot = with_axes(aligned_robot, make_track(triangle))
    with pytest.raises(ValueError):
        forward_kinematics(robot, [0.0] * 6, [])


def test_engine_keeps_last_result(aligned_robot):
    """Test engine keeps the last result."""
    engine = ForwardKinematics(aligned_robot, hide_mesh=True)
    assert engine.last_result is None

    first = engine.calculate([0.0] * 6)
    assert engine.last_result is first

    second = engine.calculate_save([400.0] + [0.0] * 5)
    assert engine.last_result is second
    assert second is not first
    assert second.error_text == ()


def test_accumulate_chain():
    """Test chain accumulation."""
    transforms = jnp.stack([se3.translation(jnp.array([float(i), 0.0, 0.0])) for i in range(1, 4)])
    chain = accumulate_chain(transforms)
    np.testing.assert_allclose(chain[:, 0, 3], jnp.array([1.0, 3.0, 6.0]))


def test_accumulate_chain_jit():
    """Test chain accumulation under jit."""
    transforms = jnp.stack([se3.rotation_about_axis(0.1 * i, jnp.array([0.0, 0.0, 1.0]), jnp.zeros(3))
                            for i in range(6)])
    np.testing.assert_allclose(jax.jit(accumulate_chain)(transforms), accumulate_chain(transforms), atol=1e-12)

"""Tests for linear and rotational external axes."""

import jax.numpy as jnp
import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from rapid_kinematics.core import (
    AxisLimits,
    AxisType,
    ExternalLinearAxis,
    ExternalRotationalAxis,
    Mesh,
    UNSET_AXIS_VALUE,
)
from rapid_kinematics.transforms import frames, se3


def make_positioner(triangle=None):
    plane = frames.from_origin_and_normal(jnp.array([1000.0, 0.0, 0.0]), jnp.array([0.0, 0.0, 1.0]))
    return ExternalRotationalAxis("positioner", plane, AxisLimits(-90.0, 90.0),
                                  base_mesh=triangle, link_mesh=triangle)


def make_track(triangle=None):
    plane = frames.from_origin_and_axes(jnp.zeros(3), jnp.array([0.0, 1.0, 0.0]), jnp.array([0.0, 0.0, 1.0]))
    attachment = se3.translation(jnp.array([0.0, 0.0, 250.0]))
    return ExternalLinearAxis("track", plane, AxisLimits(100.0, 4000.0), base_mesh=triangle,
                              link_mesh=triangle, attachment_plane=attachment, moves_robot=True)


finite_values = st.floats(min_value=-360.0, max_value=360.0, allow_nan=False)


# Transformations
@given(finite_values)
@settings(deadline=None, max_examples=25)
def test_rotational_transform_reports_limits_and_uses_raw_value(value):
    """Test rotational transform uses the raw value."""
    axis = make_positioner()
    transform, in_limits = axis.calculate_transformation_matrix(value)

    assert in_limits == (-90.0 <= value <= 90.0)
    expected = se3.rotation_about_axis(jnp.deg2rad(value), frames.z_axis(axis.axis_plane),
                                       frames.origin(axis.axis_plane))
    np.testing.assert_allclose(transform, expected, atol=1e-9)


@given(finite_values)
@settings(deadline=None, max_examples=25)
def test_rotational_save_transform_uses_clamped_value(value):
    """Test save transform clamps to the limits."""
    axis = make_positioner()
    transform = axis.calculate_transformation_matrix_save(value)

    clamped = min(max(value, -90.0), 90.0)
    expected, in_limits = axis.calculate_transformation_matrix(clamped)
    assert in_limits
    np.testing.assert_allclose(transform, expected, atol=1e-12)


def test_save_matches_raw_transform_inside_limits():
    """Test save and raw transforms agree inside the limits."""
    axis = make_positioner()
    raw, _ = axis.calculate_transformation_matrix(45.0)
    np.testing.assert_array_equal(axis.calculate_transformation_matrix_save(45.0), raw)


def test_linear_axis_translates_along_axis_plane_z():
    """Test linear axis translation."""
    axis = make_track()
    transform, in_limits = axis.calculate_transformation_matrix(1500.0)
    assert in_limits
    np.testing.assert_allclose(se3.get_position(transform), jnp.array([1500.0, 0.0, 0.0]), atol=1e-9)
    np.testing.assert_allclose(se3.get_rotation(transform), jnp.eye(3), atol=1e-12)

    position, _ = axis.calculate_position(1500.0)
    np.testing.assert_allclose(frames.origin(position), jnp.array([1500.0, 0.0, 250.0]), atol=1e-9)


def test_linear_axis_out_of_limits():
    """Test linear axis limit reporting."""
    axis = make_track()
    transform, in_limits = axis.calculate_transformation_matrix(5000.0)
    assert not in_limits
    np.testing.assert_allclose(se3.get_position(transform), jnp.array([5000.0, 0.0, 0.0]), atol=1e-9)

    position = axis.calculate_position_save(5000.0)
    np.testing.assert_allclose(frames.origin(position), jnp.array([4000.0, 0.0, 250.0]), atol=1e-9)


def test_unset_value_resolves_to_clamped_zero():
    """Test unset value resolves to zero."""
    axis = make_track()
    transform, in_limits = axis.calculate_transformation_matrix(UNSET_AXIS_VALUE)
    assert in_limits
    np.testing.assert_allclose(se3.get_position(transform), jnp.array([100.0, 0.0, 0.0]), atol=1e-9)


# Meshes and planes
def test_pose_meshes(triangle):
    """Test posed base and link meshes."""
    axis = make_positioner(triangle)
    base, link = axis.pose_meshes(90.0)

    assert base.equals(triangle)
    # (1, 0, 0) is 999 mm from the axis at x = 1000 and swings to y = -999
    np.testing.assert_allclose(link.vertices[1], jnp.array([1000.0, -999.0, 0.0]), atol=1e-9)
    assert len(axis.posed_meshes) == 2


def test_pose_meshes_uses_unclamped_transform(triangle):
    """Test posed link mesh uses the raw value."""
    axis = make_positioner(triangle)
    _, link = axis.pose_meshes(180.0)
    expected = se3.apply(axis.calculate_transformation_matrix(180.0)[0], triangle.vertices)
    np.testing.assert_allclose(link.vertices, expected, atol=1e-9)


@pytest.mark.parametrize("factory", [make_positioner, make_track])
def test_identity_transform_changes_nothing(factory, triangle):
    """Test identity transform."""
    axis = factory(triangle)
    axis.pose_meshes(30.0)
    before = axis.duplicate()

    axis.transform(jnp.eye(4))

    np.testing.assert_array_equal(axis.axis_plane, before.axis_plane)
    np.testing.assert_array_equal(axis.attachment_plane, before.attachment_plane)
    assert axis.base_mesh.equals(before.base_mesh)
    assert axis.link_mesh.equals(before.link_mesh)
    assert all(a.equals(b) for a, b in zip(axis.posed_meshes, before.posed_meshes))


def test_transform_moves_planes_and_meshes(triangle):
    """Test transform moves planes and meshes."""
    axis = make_track(triangle)
    axis.pose_meshes(200.0)
    offset = se3.translation(jnp.array([0.0, 0.0, 10.0]))

    axis.transform(offset)

    np.testing.assert_allclose(frames.origin(axis.attachment_plane), jnp.array([0.0, 0.0, 260.0]))
    np.testing.assert_allclose(axis.base_mesh.vertices[:, 2], jnp.full(3, 10.0))
    np.testing.assert_allclose(axis.posed_meshes[1].vertices[0], jnp.array([200.0, 0.0, 10.0]), atol=1e-9)


def test_setters_clear_posed_meshes(triangle):
    """Test setters clear posed meshes."""
    axis = make_positioner(triangle)
    axis.pose_meshes(10.0)
    axis.axis_limits = AxisLimits(-45.0, 45.0)
    assert axis.posed_meshes == []

    axis.pose_meshes(10.0)
    axis.link_mesh = Mesh.empty()
    assert axis.posed_meshes == []

    axis.pose_meshes(10.0)
    axis.reinitialize()
    assert axis.posed_meshes == []


def test_rotational_axis_couples_planes():
    """Test rotational axis keeps attachment plane on axis plane."""
    axis = make_positioner()
    plane = se3.translation(jnp.array([0.0, 500.0, 0.0]))

    axis.attachment_plane = plane
    np.testing.assert_array_equal(axis.axis_plane, plane)

    other = se3.translation(jnp.array([0.0, 0.0, 800.0]))
    axis.axis_plane = other
    np.testing.assert_array_equal(axis.attachment_plane, other)


def test_linear_axis_keeps_planes_independent():
    """Test linear axis planes are independent."""
    axis = make_track()
    axis_plane = jnp.array(axis.axis_plane)
    axis.attachment_plane = se3.translation(jnp.array([0.0, 0.0, 900.0]))
    np.testing.assert_array_equal(axis.axis_plane, axis_plane)


# Properties
def test_axis_number_and_logic():
    """Test axis number and logic letter."""
    axis = make_positioner()
    assert axis.axis_number == -1
    assert axis.axis_logic == "-"
    axis.axis_number = 2
    assert axis.axis_logic == "C"
    with pytest.raises(ValueError):
        axis.axis_number = 6


def test_axis_type_and_repr():
    """Test axis type and repr."""
    assert make_track().axis_type == AxisType.LINEAR
    assert make_positioner().axis_type == AxisType.ROTATIONAL
    assert repr(make_positioner()) == "External Rotational Axis (positioner)"
    assert repr(ExternalLinearAxis("broken")) == "Invalid External Linear Axis"


def test_duplicate_is_independent(triangle):
    """Test axis duplicate."""
    axis = make_track(triangle)
    copy = axis.duplicate()
    copy.transform(se3.translation(jnp.array([1.0, 0.0, 0.0])))
    copy.name = "other"

    assert axis.name == "track"
    np.testing.assert_array_equal(frames.origin(axis.axis_plane), jnp.zeros(3))
    assert copy.moves_robot

    bare = axis.duplicate(duplicate_mesh=False)
    assert bare.base_mesh.is_empty and bare.link_mesh.is_empty


def test_axis_limits_reject_inverted_interval():
    """Test inverted limits raise."""
    with pytest.raises(ValueError):
        AxisLimits(10.0, -10.0)


@pytest.mark.parametrize("axis_number", [-2, 6, 7])
def test_constructor_rejects_axis_number_out_of_range(axis_number):
    """Test out of range axis number raises."""
    plane = frames.from_origin_and_normal(jnp.zeros(3), jnp.array([0.0, 0.0, 1.0]))
    with pytest.raises(ValueError):
        ExternalRotationalAxis("positioner", plane, AxisLimits(-90.0, 90.0), axis_number=axis_number)

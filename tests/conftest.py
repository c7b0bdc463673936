"""Shared robots and meshes for the test suite."""

import jax.numpy as jnp
import pytest

from rapid_kinematics.core import AxisLimits, Mesh, RobotModel, RobotTool
from rapid_kinematics.presets import get_robot_preset
from rapid_kinematics.transforms import se3


def aligned_axis_planes():
    """Six world-aligned axis frames stacked along z."""
    heights = [0.0, 500.0, 1000.0, 1500.0, 1750.0, 2000.0]
    return [se3.translation(jnp.array([0.0, 0.0, h])) for h in heights]


@pytest.fixture
def triangle():
    return Mesh.from_lists([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]], [[0, 1, 2]])


@pytest.fixture
def gripper():
    return RobotTool.create("gripper", tool_plane=se3.translation(jnp.array([0.0, 0.0, 150.0])), mass=2.5)


@pytest.fixture
def aligned_robot(gripper, triangle):
    """Robot with world-aligned axis frames placed away from the origin."""
    return RobotModel.create(
        name="aligned",
        axis_planes=aligned_axis_planes(),
        axis_limits=[AxisLimits(-180.0, 180.0)] * 6,
        mounting_frame=se3.translation(jnp.array([0.0, 0.0, 2100.0])),
        base_plane=se3.translation(jnp.array([100.0, 200.0, 0.0])),
        meshes=[triangle] * 7,
        tool=gripper,
    )


@pytest.fixture
def irb4600():
    return get_robot_preset("IRB4600-20/2.50")

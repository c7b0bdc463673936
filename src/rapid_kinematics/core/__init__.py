"""Core robot data structures.

This module provides the robot, tool and external axis descriptions, the
mesh value type and the joint value helpers used by forward kinematics and
code generation.
"""

from .mesh import Mesh
from .joint_position import (
    AxisLimits,
    ExternalJointPosition,
    RobotJointPosition,
    UNSET_AXIS_VALUE,
    is_unset,
    pad_axis_values,
)
from .external_axis import AxisType, ExternalAxis, ExternalLinearAxis, ExternalRotationalAxis
from .robot_model import RobotModel, RobotTool

__all__ = [
    "Mesh",
    "AxisLimits",
    "ExternalJointPosition",
    "RobotJointPosition",
    "UNSET_AXIS_VALUE",
    "is_unset",
    "pad_axis_values",
    "AxisType",
    "ExternalAxis",
    "ExternalLinearAxis",
    "ExternalRotationalAxis",
    "RobotModel",
    "RobotTool",
]

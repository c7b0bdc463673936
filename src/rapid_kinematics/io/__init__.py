"""Loading robot definitions and persisting actions.

This module provides the robot definition parser and versioned JSON records
for actions, robot tools and external axes.
"""

from .robot_parser import load_robot, load_robot_from_string
from .serialization import (
    decode_action,
    decode_external_axis,
    decode_robot_tool,
    encode_action,
    encode_external_axis,
    encode_robot_tool,
    load_actions,
    save_actions,
)

__all__ = [
    "decode_action",
    "decode_external_axis",
    "decode_robot_tool",
    "encode_action",
    "encode_external_axis",
    "encode_robot_tool",
    "load_actions",
    "load_robot",
    "load_robot_from_string",
    "save_actions",
]

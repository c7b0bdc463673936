"""
JAX-based transforms for robot frames.

This module provides pure, JIT-compilable implementations of:
- SO(3) rotations and quaternions (so3 module)
- SE(3) rigid body transforms (se3 module)
- Frame (plane) construction helpers (frames module)
"""

from . import so3
from . import se3
from . import frames

__all__ = [
    "so3",
    "se3",
    "frames",
]

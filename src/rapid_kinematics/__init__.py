"""
RAPID Kinematics: forward kinematics and RAPID code generation for ABB robots.

This library provides JIT-compilable frame transforms and forward kinematics
for 6-axis robots with external axes, and writes RAPID program modules from
an ordered list of actions.
"""

import jax
jax.config.update("jax_enable_x64", True)

# Import core modules
from . import transforms
from . import core
from . import chain
from . import actions
from . import rapid
from . import io

__version__ = "0.1.0"
__all__ = ["transforms", "core", "chain", "actions", "rapid", "io"]

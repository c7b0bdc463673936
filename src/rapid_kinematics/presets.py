"""Robot definitions shipped with the package."""

from typing import Dict, List, Optional, Sequence

import jax

from .core import ExternalAxis, RobotModel, RobotTool
from .io.robot_parser import load_robot
from .util.logger import log_error
from .util.util_file import get_robot_configs_path, join_path

Array = jax.Array

ROBOT_PRESETS: Dict[str, str] = {
    "IRB4600-20/2.50": "irb4600_20_250.xml",
}


def list_robot_presets() -> List[str]:
    return sorted(ROBOT_PRESETS)


def get_robot_preset(name: str, position_plane: Optional[Array] = None, tool: Optional[RobotTool] = None,
                     external_axes: Sequence[ExternalAxis] = ()) -> RobotModel:
    """Load a preset robot at ``position_plane`` with a tool and external axes.

    Raises:
        ValueError: If ``name`` is not a preset.
    """
    if name not in ROBOT_PRESETS:
        log_error(f"Unknown robot preset '{name}', available presets: {list_robot_presets()}")
    path = join_path(get_robot_configs_path(), ROBOT_PRESETS[name])
    return load_robot(path, position_plane=position_plane, tool=tool, external_axes=external_axes)

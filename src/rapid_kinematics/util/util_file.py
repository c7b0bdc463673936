"""Helper functions for locating packaged content."""
# Standard Library
import os

from .logger import log_warn


def get_module_path() -> str:
    """Get absolute path of the rapid_kinematics package."""
    return os.path.dirname(os.path.dirname(__file__))


def get_content_path() -> str:
    """Get path to the content directory that ships static configuration data."""
    return os.path.join(get_module_path(), "content")


def get_robot_configs_path() -> str:
    """Get path to the preset robot definition files."""
    return os.path.join(get_content_path(), "robots")


def join_path(path1: str, path2: str) -> str:
    """Join two paths, considering OS specific path separators.

    Args:
        path1: Path prefix.
        path2: Path suffix. If path2 is an absolute path, path1 is ignored.

    Returns:
        str: Joined path.
    """
    if path1[-1] == os.sep:
        log_warn("path1 has trailing slash, removing it")
        path1 = path1.rstrip(os.sep)
    return os.path.join(path1, path2)

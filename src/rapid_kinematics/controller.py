"""Joint value snapshots read from a robot controller.

The controller connection itself is not part of this package: any object
that looks like a :py:class:`MechanicalUnit` can be read.
"""

from typing import List, Protocol, Sequence, Tuple

from .core.joint_position import replace_unset


class MechanicalUnit(Protocol):
    """A robot or an external axis unit of a controller motion system."""

    name: str
    is_tcp_robot: bool
    number_of_axes: int

    def get_position(self) -> Tuple[Sequence[float], Sequence[float]]:
        """Current joint target as ``(robax, extax)`` values."""
        ...


def get_axis_values(units: Sequence[MechanicalUnit]) -> Tuple[List[List[float]], List[List[float]]]:
    """Split the current joint targets of the units into internal and external values.

    Args:
        units: Mechanical units in controller order.

    Returns:
        One list of six internal values per TCP robot, and one list of
        ``number_of_axes`` external values per other unit. Values of axes
        that are not connected are replaced by 0.
    """
    internal_axis_values = []
    external_axis_values = []
    for unit in units:
        robax, extax = unit.get_position()
        if unit.is_tcp_robot:
            internal_axis_values.append(replace_unset(robax))
        else:
            external_axis_values.append(replace_unset(list(extax)[:unit.number_of_axes]))
    return internal_axis_values, external_axis_values

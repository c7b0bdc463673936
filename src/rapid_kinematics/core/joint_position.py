"""Joint values, axis limits and the "axis not connected" sentinel.

ABB controllers report 9E9 for an axis slot that is not connected. The same
value marks unspecified slots of user-supplied joint vectors.
"""

from typing import Iterable, List, Sequence, Tuple

from flax import struct

# Value of an unassigned axis slot, as written in RAPID data
UNSET_AXIS_VALUE = 9e9

# Anything above this magnitude is treated as the sentinel
UNSET_AXIS_THRESHOLD = 9.0e8

NUM_INTERNAL_AXES = 6
NUM_EXTERNAL_AXES = 6


def is_unset(value: float) -> bool:
    """True if ``value`` is the "axis not connected" sentinel."""
    return abs(value) > UNSET_AXIS_THRESHOLD


def pad_axis_values(values: Iterable[float], count: int = NUM_INTERNAL_AXES,
                    fill: float = 0.0) -> List[float]:
    """Pad a joint vector to ``count`` values with ``fill``. Longer input is kept as is."""
    values = [float(v) for v in values]
    return values + [fill] * (count - len(values))


def replace_unset(values: Iterable[float], fill: float = 0.0) -> List[float]:
    """Substitute ``fill`` for every sentinel value."""
    return [fill if is_unset(v) else float(v) for v in values]


@struct.dataclass
class AxisLimits:
    """Closed interval [min, max] in the native unit of an axis."""
    min: float = struct.field(pytree_node=False)
    max: float = struct.field(pytree_node=False)

    def __post_init__(self):
        if self.min > self.max:
            raise ValueError(f"Axis limits must satisfy min <= max, got [{self.min}, {self.max}]")

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def clamp(self, value: float) -> float:
        if value < self.min:
            return self.min
        if value > self.max:
            return self.max
        return value

    def as_tuple(self) -> Tuple[float, float]:
        return (self.min, self.max)


class _JointPosition:
    """Fixed-length joint vector; missing slots hold the sentinel."""

    size = NUM_INTERNAL_AXES

    def __init__(self, values: Sequence[float] = ()):
        values = [float(v) for v in values]
        if len(values) > self.size:
            raise ValueError(f"{type(self).__name__} takes at most {self.size} values, got {len(values)}")
        self._values = values + [UNSET_AXIS_VALUE] * (self.size - len(values))

    def __getitem__(self, index: int) -> float:
        return self._values[index]

    def __setitem__(self, index: int, value: float):
        self._values[index] = float(value)

    def __len__(self) -> int:
        return self.size

    def __iter__(self):
        return iter(self._values)

    def __eq__(self, other) -> bool:
        return type(other) is type(self) and other._values == self._values

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values})"

    def duplicate(self):
        return type(self)(self._values)

    def to_list(self) -> List[float]:
        return list(self._values)

    def to_rapid(self) -> str:
        """RAPID array text, with the sentinel written as 9E+09."""
        return "[" + ", ".join(format_axis_value(v) for v in self._values) + "]"


class RobotJointPosition(_JointPosition):
    """Values of the six internal robot axes, in degrees."""
    size = NUM_INTERNAL_AXES


class ExternalJointPosition(_JointPosition):
    """Values of the external axes eax_a .. eax_f, in degrees or millimeters."""
    size = NUM_EXTERNAL_AXES


def format_axis_value(value: float) -> str:
    if is_unset(value):
        return "9E+09"
    return format_number(value)


def format_number(value: float, decimals: int = 2) -> str:
    """Fixed-precision number text without a negative zero."""
    text = f"{value:.{decimals}f}"
    if text.startswith("-") and float(text) == 0.0:
        text = text[1:]
    return text


def format_value(value: float) -> str:
    """Shortest fixed-point text of a value: ``100``, ``1.5``, ``0.25``."""
    text = f"{float(value):.6f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text

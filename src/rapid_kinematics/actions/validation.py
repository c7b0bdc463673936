"""Value checks for RAPID data.

None of these checks is fatal: the generator turns failures into warnings
and still writes the program.
"""

from typing import List

VALID_PRECISIONS = (0, 1, 5, 10, 15, 20, 30, 40, 50, 60, 80, 100, 150, 200)

VALID_PREDEFINED_SPEEDS = (
    5, 10, 20, 30, 40, 50, 60, 80, 100, 150, 200, 300, 400, 500, 600, 800,
    1000, 1500, 2000, 2500, 3000, 4000, 5000, 6000, 7000,
)

MAX_IDENTIFIER_LENGTH = 32

MAX_AXIS_CONFIGURATION = 7


def precision_value_is_valid(precision: int) -> bool:
    """Negative values mean "fine"; others must be a predefined zone."""
    return precision < 0 or precision in VALID_PRECISIONS


def predefined_speed_value_is_valid(speed: float) -> bool:
    return speed in VALID_PREDEFINED_SPEEDS


def nearest_predefined_speed(speed: float) -> int:
    """Closest predefined speed; ties go to the slower value."""
    return min(VALID_PREDEFINED_SPEEDS, key=lambda valid: (abs(valid - speed), valid))


def variable_exceeds_character_limit(name: str, limit: int = MAX_IDENTIFIER_LENGTH) -> bool:
    return len(name) > limit


def variable_starts_with_number(name: str) -> bool:
    return len(name) > 0 and name[0].isdigit()


def axis_configuration_is_valid(axis_configuration: int) -> bool:
    return 0 <= axis_configuration <= MAX_AXIS_CONFIGURATION


def check_identifier(name: str, label: str) -> List[str]:
    """Warnings for a RAPID variable name; empty when the name is usable."""
    warnings = []
    if variable_exceeds_character_limit(name):
        warnings.append(f"{label} name <{name}> exceeds character limit of {MAX_IDENTIFIER_LENGTH} characters.")
    if variable_starts_with_number(name):
        warnings.append(f"{label} name <{name}> starts with a number which is not allowed in RAPID code.")
    return warnings

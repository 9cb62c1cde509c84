"""
Field and patient normalization.

The remote API returns deliberately messy records: ages as numbers or strings,
blood pressure as "120/80", "150/", "N/A" or a dict, temperatures with unit
markers. Each normalizer turns one raw value into a FieldResult; malformed input
is an ordinary invalid result, never an exception.
"""

import math
import re

from dataclasses import dataclass
from typing import Any, Optional

AGE_PATTERN = re.compile(r"^\d+(\.\d+)?$", re.ASCII)
# leading numeric prefix, read the way parseFloat reads it ("98.6abc" -> 98.6)
NUMERIC_PREFIX = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", re.ASCII)
TEMPERATURE_UNITS = re.compile(r"[°ºf℉]", re.IGNORECASE)

BP_INVALID_MARKERS = ("invalid", "n/a", "error")
TEMPERATURE_INVALID_MARKERS = ("temp_error", "invalid", "n/a", "error")

AGE_MIN, AGE_MAX = 0, 150  # exclusive
SYSTOLIC_RANGE = (70, 300)
DIASTOLIC_RANGE = (40, 200)
TEMPERATURE_RANGE = (90, 110)


class InvalidPatientId(ValueError):
    """Raised when a record has no usable patient_id."""


@dataclass(frozen=True)
class FieldResult:
    """
    Outcome of normalizing one raw field.

    Attributes:
        valid: whether the raw value passed parsing and range checks.
        value: the normalized value; only set when valid.
        original: the raw value as received, kept for audit.
    """

    valid: bool
    value: Any = None
    original: Any = None

    def __post_init__(self):
        if not self.valid and self.value is not None:
            raise ValueError("an invalid FieldResult cannot carry a value")

    @classmethod
    def ok(cls, value, original) -> "FieldResult":
        return cls(True, value, original)

    @classmethod
    def invalid(cls, original) -> "FieldResult":
        return cls(False, None, original)


@dataclass(frozen=True)
class BloodPressure:
    systolic: float
    diastolic: float

    def __str__(self):
        return f"{_fmt(self.systolic)}/{_fmt(self.diastolic)}"


@dataclass(frozen=True)
class NormalizedPatient:
    id: str
    age: FieldResult
    blood_pressure: FieldResult
    temperature: FieldResult

    @property
    def fully_valid(self) -> bool:
        return self.age.valid and self.blood_pressure.valid and self.temperature.valid


def _fmt(number) -> str:
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


def _is_number(value) -> bool:
    # bool is an int subclass; JSON true/false are not measurements
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_blank(value) -> bool:
    return value is None or value == ""


def _round_half_up(number: float) -> int:
    return int(math.floor(number + 0.5))


def parse_numeric(value) -> Optional[float]:
    """
    Permissive numeric parser shared by the blood pressure and temperature normalizers.

    Numbers pass through unchanged (NaN is rejected). Strings are trimmed and their
    leading numeric prefix is parsed, so "120 mmHg" reads as 120. Anything else is None.
    """
    if _is_number(value):
        return None if math.isnan(value) else value
    if isinstance(value, str):
        match = NUMERIC_PREFIX.match(value.strip())
        if match is None:
            return None
        number = float(match.group(0))
        return int(number) if number.is_integer() and "e" not in match.group(0).lower() else number
    return None


def normalize_age(value) -> FieldResult:
    if _is_blank(value):
        return FieldResult.invalid(value)

    if _is_number(value):
        if not math.isnan(value) and AGE_MIN < value < AGE_MAX:
            return FieldResult.ok(value, value)
        return FieldResult.invalid(value)

    if isinstance(value, str):
        trimmed = value.strip()
        if not AGE_PATTERN.match(trimmed):
            return FieldResult.invalid(value)
        age = float(trimmed)
        if AGE_MIN < age < AGE_MAX:
            return FieldResult.ok(_round_half_up(age), value)

    return FieldResult.invalid(value)


def _bp_in_range(systolic, diastolic) -> bool:
    return (
        SYSTOLIC_RANGE[0] <= systolic <= SYSTOLIC_RANGE[1]
        and DIASTOLIC_RANGE[0] <= diastolic <= DIASTOLIC_RANGE[1]
    )


def _bp_result(systolic, diastolic, original) -> FieldResult:
    if systolic is None or diastolic is None:
        return FieldResult.invalid(original)
    if not _bp_in_range(systolic, diastolic):
        return FieldResult.invalid(original)
    return FieldResult.ok(BloodPressure(systolic, diastolic), original)


def normalize_blood_pressure(value) -> FieldResult:
    """
    Accepts "systolic/diastolic" strings or a mapping with systolic and diastolic keys.

    A bare number is rejected: there is no way to tell which half of the reading it is.
    Both halves must be in range for the reading to count.
    """
    if _is_blank(value):
        return FieldResult.invalid(value)

    if isinstance(value, str):
        trimmed = value.strip()
        lowered = trimmed.lower()
        if any(marker in lowered for marker in BP_INVALID_MARKERS):
            return FieldResult.invalid(value)

        parts = trimmed.split("/")
        if len(parts) != 2:
            return FieldResult.invalid(value)

        systolic_str, diastolic_str = (part.strip() for part in parts)
        # "150/" and "/90"
        if not systolic_str or not diastolic_str:
            return FieldResult.invalid(value)

        return _bp_result(parse_numeric(systolic_str), parse_numeric(diastolic_str), value)

    if isinstance(value, dict):
        return _bp_result(
            parse_numeric(value.get("systolic")),
            parse_numeric(value.get("diastolic")),
            value,
        )

    return FieldResult.invalid(value)


def normalize_temperature(value) -> FieldResult:
    if _is_blank(value):
        return FieldResult.invalid(value)

    if _is_number(value):
        temperature = parse_numeric(value)
    elif isinstance(value, str):
        lowered = value.strip().lower()
        if any(marker in lowered for marker in TEMPERATURE_INVALID_MARKERS):
            return FieldResult.invalid(value)
        temperature = parse_numeric(TEMPERATURE_UNITS.sub("", value).strip())
    else:
        return FieldResult.invalid(value)

    if temperature is not None and TEMPERATURE_RANGE[0] <= temperature <= TEMPERATURE_RANGE[1]:
        return FieldResult.ok(temperature, value)
    return FieldResult.invalid(value)


def normalize_patient_id(value) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    if _is_number(value) and not math.isnan(value):
        return _fmt(value)
    raise InvalidPatientId(f"unusable patient_id: {value!r}")


def normalize_patient(record: dict) -> NormalizedPatient:
    """
    Normalize one raw API record.

    Raises InvalidPatientId when the record cannot be identified; every other
    problem is reported through the per-field FieldResult.
    """
    if not isinstance(record, dict):
        raise InvalidPatientId(f"record is not a mapping: {type(record).__name__}")

    return NormalizedPatient(
        id=normalize_patient_id(record.get("patient_id")),
        age=normalize_age(record.get("age")),
        blood_pressure=normalize_blood_pressure(record.get("blood_pressure")),
        temperature=normalize_temperature(record.get("temperature")),
    )

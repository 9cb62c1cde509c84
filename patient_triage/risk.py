"""
Risk scoring.

Each clinical dimension is classified by one ordered chain of thresholds
(blood_pressure_stage, temperature_category, age_category). The numeric scores
are looked up from those categories, so the reported labels and the scores
can never disagree.
"""

from dataclasses import dataclass
from enum import Enum

from .normalize import NormalizedPatient

HIGH_RISK_THRESHOLD = 4
FEVER_THRESHOLD = 99.6


class BloodPressureStage(Enum):
    NORMAL = "normal"
    ELEVATED = "elevated"
    STAGE_1 = "stage_1"
    STAGE_2 = "stage_2"
    INVALID = "invalid"


class TemperatureCategory(Enum):
    NORMAL = "normal"
    LOW_FEVER = "low_fever"
    HIGH_FEVER = "high_fever"
    INVALID = "invalid"


class AgeCategory(Enum):
    UNDER_40 = "under_40"
    MIDDLE_AGE = "middle_age"
    OVER_65 = "over_65"
    INVALID = "invalid"


BLOOD_PRESSURE_SCORES = {
    BloodPressureStage.NORMAL: 1,
    BloodPressureStage.ELEVATED: 2,
    BloodPressureStage.STAGE_1: 3,
    BloodPressureStage.STAGE_2: 4,
    BloodPressureStage.INVALID: 0,
}

TEMPERATURE_SCORES = {
    TemperatureCategory.NORMAL: 0,
    TemperatureCategory.LOW_FEVER: 1,
    TemperatureCategory.HIGH_FEVER: 2,
    TemperatureCategory.INVALID: 0,
}

AGE_SCORES = {
    AgeCategory.UNDER_40: 1,
    AgeCategory.MIDDLE_AGE: 1,
    AgeCategory.OVER_65: 2,
    AgeCategory.INVALID: 0,
}


@dataclass(frozen=True)
class RiskScores:
    blood_pressure: int
    temperature: int
    age: int

    @property
    def total(self) -> int:
        return self.blood_pressure + self.temperature + self.age


def blood_pressure_stage(patient: NormalizedPatient) -> BloodPressureStage:
    """
    First matching rule wins. Stage 1 and Stage 2 are OR conditions, so either
    the systolic or the diastolic reading alone can escalate the stage.
    """
    bp = patient.blood_pressure
    if not bp.valid:
        return BloodPressureStage.INVALID

    systolic, diastolic = bp.value.systolic, bp.value.diastolic

    if systolic < 120 and diastolic < 80:
        return BloodPressureStage.NORMAL
    elif 120 <= systolic <= 129 and diastolic < 80:
        return BloodPressureStage.ELEVATED
    elif 130 <= systolic <= 139 or 80 <= diastolic <= 89:
        return BloodPressureStage.STAGE_1
    elif systolic >= 140 or diastolic >= 90:
        return BloodPressureStage.STAGE_2
    # fractional readings between bands (e.g. 129.5/70)
    return BloodPressureStage.INVALID


def temperature_category(patient: NormalizedPatient) -> TemperatureCategory:
    temp = patient.temperature
    if not temp.valid:
        return TemperatureCategory.INVALID

    if temp.value <= 99.5:
        return TemperatureCategory.NORMAL
    elif 99.6 <= temp.value <= 100.9:
        return TemperatureCategory.LOW_FEVER
    elif temp.value >= 101.0:
        return TemperatureCategory.HIGH_FEVER
    return TemperatureCategory.INVALID


def age_category(patient: NormalizedPatient) -> AgeCategory:
    age = patient.age
    if not age.valid:
        return AgeCategory.INVALID

    if age.value < 40:
        return AgeCategory.UNDER_40
    elif 40 <= age.value <= 65:
        return AgeCategory.MIDDLE_AGE
    elif age.value > 65:
        return AgeCategory.OVER_65
    return AgeCategory.INVALID


def calculate_blood_pressure_risk(patient: NormalizedPatient) -> int:
    return BLOOD_PRESSURE_SCORES[blood_pressure_stage(patient)]


def calculate_temperature_risk(patient: NormalizedPatient) -> int:
    return TEMPERATURE_SCORES[temperature_category(patient)]


def calculate_age_risk(patient: NormalizedPatient) -> int:
    return AGE_SCORES[age_category(patient)]


def risk_scores(patient: NormalizedPatient) -> RiskScores:
    return RiskScores(
        blood_pressure=calculate_blood_pressure_risk(patient),
        temperature=calculate_temperature_risk(patient),
        age=calculate_age_risk(patient),
    )


def calculate_total_risk(patient: NormalizedPatient) -> int:
    return risk_scores(patient).total


def is_high_risk(patient: NormalizedPatient) -> bool:
    return calculate_total_risk(patient) >= HIGH_RISK_THRESHOLD


def has_fever(patient: NormalizedPatient) -> bool:
    """Any valid temperature at or above 99.6°F, regardless of the fever score."""
    temp = patient.temperature
    return temp.valid and temp.value >= FEVER_THRESHOLD

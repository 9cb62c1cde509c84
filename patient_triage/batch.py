"""
Batch assessment: turns a list of raw patient records into the three alert lists
submitted to the assessment API, plus summary statistics.

Nothing here logs or raises for bad data. Records without a usable patient_id
are returned in BatchResult.skipped so the caller can report them.
"""

from dataclasses import dataclass, field
from typing import Iterable, List

from .normalize import InvalidPatientId, NormalizedPatient, normalize_patient
from .risk import (
    HIGH_RISK_THRESHOLD,
    AgeCategory,
    BloodPressureStage,
    RiskScores,
    TemperatureCategory,
    age_category,
    blood_pressure_stage,
    has_fever,
    risk_scores,
    temperature_category,
)


@dataclass(frozen=True)
class PatientAssessment:
    patient: NormalizedPatient
    scores: RiskScores
    blood_pressure_stage: BloodPressureStage
    temperature_category: TemperatureCategory
    age_category: AgeCategory

    @property
    def id(self) -> str:
        return self.patient.id

    @property
    def high_risk(self) -> bool:
        return self.scores.total >= HIGH_RISK_THRESHOLD

    @property
    def fever(self) -> bool:
        return has_fever(self.patient)

    @property
    def data_quality_issue(self) -> bool:
        return not self.patient.fully_valid

    def data_quality_issues(self) -> List[str]:
        issues = []
        if not self.patient.age.valid:
            issues.append("Invalid/missing age data")
        if not self.patient.blood_pressure.valid:
            issues.append("Invalid/missing blood pressure data")
        if not self.patient.temperature.valid:
            issues.append("Invalid/missing temperature data")
        return issues


@dataclass(frozen=True)
class SkippedRecord:
    index: int
    reason: str


@dataclass
class BatchStats:
    total: int = 0
    valid_age: int = 0
    valid_blood_pressure: int = 0
    valid_temperature: int = 0
    fully_valid: int = 0
    data_quality_issues: int = 0
    skipped: int = 0


@dataclass
class BatchResult:
    high_risk_ids: List[str] = field(default_factory=list)
    fever_ids: List[str] = field(default_factory=list)
    data_quality_issue_ids: List[str] = field(default_factory=list)
    stats: BatchStats = field(default_factory=BatchStats)
    assessments: List[PatientAssessment] = field(default_factory=list)
    skipped: List[SkippedRecord] = field(default_factory=list)

    def to_submission(self) -> dict:
        """Payload for POST /submit-assessment."""
        return {
            "high_risk_patients": list(self.high_risk_ids),
            "fever_patients": list(self.fever_ids),
            "data_quality_issues": list(self.data_quality_issue_ids),
        }


def assess_patient(record: dict) -> PatientAssessment:
    """
    Normalize and score a single raw record.

    Raises InvalidPatientId if the record has no usable patient_id.
    """
    patient = normalize_patient(record)
    return PatientAssessment(
        patient=patient,
        scores=risk_scores(patient),
        blood_pressure_stage=blood_pressure_stage(patient),
        temperature_category=temperature_category(patient),
        age_category=age_category(patient),
    )


def process_patients(records: Iterable[dict]) -> BatchResult:
    result = BatchResult()
    stats = result.stats

    for i, record in enumerate(records):
        try:
            assessment = assess_patient(record)
        except InvalidPatientId as e:
            result.skipped.append(SkippedRecord(index=i, reason=str(e)))
            stats.skipped += 1
            continue

        patient = assessment.patient
        result.assessments.append(assessment)
        stats.total += 1
        stats.valid_age += patient.age.valid
        stats.valid_blood_pressure += patient.blood_pressure.valid
        stats.valid_temperature += patient.temperature.valid

        if assessment.high_risk:
            result.high_risk_ids.append(patient.id)
        if assessment.fever:
            result.fever_ids.append(patient.id)
        if assessment.data_quality_issue:
            result.data_quality_issue_ids.append(patient.id)
            stats.data_quality_issues += 1
        else:
            stats.fully_valid += 1

    return result

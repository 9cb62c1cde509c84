from .batch import (
    BatchResult,
    BatchStats,
    PatientAssessment,
    SkippedRecord,
    assess_patient,
    process_patients,
)
from .normalize import (
    BloodPressure,
    FieldResult,
    InvalidPatientId,
    NormalizedPatient,
    normalize_age,
    normalize_blood_pressure,
    normalize_patient,
    normalize_patient_id,
    normalize_temperature,
    parse_numeric,
)
from .risk import (
    AgeCategory,
    BloodPressureStage,
    RiskScores,
    TemperatureCategory,
    calculate_age_risk,
    calculate_blood_pressure_risk,
    calculate_temperature_risk,
    calculate_total_risk,
    has_fever,
    is_high_risk,
    risk_scores,
)

import pytest

from patient_triage.batch import assess_patient, process_patients
from patient_triage.normalize import InvalidPatientId
from patient_triage.risk import AgeCategory, BloodPressureStage, TemperatureCategory


def test_sample_batch(sample_records):
    result = process_patients(sample_records)

    # A scores 4 (Stage 1 via diastolic 80, plus age), B scores 6
    assert result.high_risk_ids == ["A", "B"]
    assert result.fever_ids == ["C"]
    assert result.data_quality_issue_ids == ["C"]

    stats = result.stats
    assert stats.total == 3
    assert stats.valid_age == 2
    assert stats.valid_blood_pressure == 2
    assert stats.valid_temperature == 3
    assert stats.fully_valid == 2
    assert stats.data_quality_issues == 1
    assert stats.skipped == 0


def test_scores_in_sample_batch(sample_records):
    by_id = {a.id: a for a in process_patients(sample_records).assessments}
    assert by_id["B"].scores.total == 6
    assert by_id["B"].blood_pressure_stage == BloodPressureStage.STAGE_2
    assert by_id["C"].scores.total == 2


def test_record_without_id_is_skipped(sample_records):
    records = [{"age": 80, "blood_pressure": "180/110", "temperature": 103}] + sample_records
    records.append({"patient_id": "   ", "temperature": 104})

    result = process_patients(records)

    assert result.stats.total == 3
    assert result.stats.skipped == 2
    assert [s.index for s in result.skipped] == [0, 4]
    assert result.high_risk_ids == ["A", "B"]
    assert result.fever_ids == ["C"]
    assert result.data_quality_issue_ids == ["C"]


def test_non_mapping_record_is_skipped():
    result = process_patients([None, "DEMO001", {"patient_id": "X", "age": 30}])
    assert result.stats.skipped == 2
    assert result.stats.total == 1


def test_patient_can_be_in_every_list():
    result = process_patients(
        [{"patient_id": "Z", "age": "unknown", "blood_pressure": "150/95", "temperature": "102°F"}]
    )
    assert result.high_risk_ids == ["Z"]
    assert result.fever_ids == ["Z"]
    assert result.data_quality_issue_ids == ["Z"]


def test_patient_can_be_in_no_list():
    result = process_patients([{"patient_id": "OK", "age": 30, "blood_pressure": "115/75", "temperature": 98.2}])
    assert result.to_submission() == {
        "high_risk_patients": [],
        "fever_patients": [],
        "data_quality_issues": [],
    }
    assert result.stats.fully_valid == 1


def test_output_follows_input_order():
    records = [
        {"patient_id": f"P{i}", "age": 70, "blood_pressure": "150/95", "temperature": 100}
        for i in (3, 1, 2)
    ]
    result = process_patients(records)
    assert result.high_risk_ids == ["P3", "P1", "P2"]
    assert [a.id for a in result.assessments] == ["P3", "P1", "P2"]


def test_to_submission(sample_records):
    payload = process_patients(sample_records).to_submission()
    assert payload == {
        "high_risk_patients": ["A", "B"],
        "fever_patients": ["C"],
        "data_quality_issues": ["C"],
    }


def test_empty_batch():
    result = process_patients([])
    assert result.stats.total == 0
    assert result.to_submission()["high_risk_patients"] == []


def test_assess_patient():
    assessment = assess_patient({"patient_id": "C", "age": None, "blood_pressure": "invalid", "temperature": 101.8})

    assert assessment.id == "C"
    assert assessment.fever
    assert not assessment.high_risk
    assert assessment.temperature_category == TemperatureCategory.HIGH_FEVER
    assert assessment.age_category == AgeCategory.INVALID
    assert assessment.data_quality_issues() == [
        "Invalid/missing age data",
        "Invalid/missing blood pressure data",
    ]


def test_assess_patient_without_id():
    with pytest.raises(InvalidPatientId):
        assess_patient({"age": 40})

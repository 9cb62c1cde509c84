import pytest

from patient_triage.normalize import BloodPressure, FieldResult, NormalizedPatient


@pytest.fixture
def sample_records() -> list:
    """
    Three patients covering a clean reading, a hypertensive senior and a
    feverish patient with broken age and blood pressure fields.
    """
    return [
        {"patient_id": "A", "age": 45, "blood_pressure": "120/80", "temperature": 98.6},
        {"patient_id": "B", "age": 67, "blood_pressure": "140/90", "temperature": 99.2},
        {"patient_id": "C", "age": None, "blood_pressure": "invalid", "temperature": 101.8},
    ]


@pytest.fixture
def make_patient():
    """
    Build a NormalizedPatient directly from clean values; None means the field is invalid.
    """

    def _make(age=None, bp=None, temp=None, pid="P1"):
        return NormalizedPatient(
            id=pid,
            age=FieldResult.ok(age, age) if age is not None else FieldResult.invalid(None),
            blood_pressure=(
                FieldResult.ok(BloodPressure(*bp), bp) if bp is not None else FieldResult.invalid(None)
            ),
            temperature=FieldResult.ok(temp, temp) if temp is not None else FieldResult.invalid(None),
        )

    return _make

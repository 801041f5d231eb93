import pytest

from triage.safety.red_flag_rules import check_emergency_symptoms
from triage.schemas import SymptomEntry


def _s(name, severity="severe", description=""):
    return SymptomEntry(name=name, severity=severity, duration="1 hour", description=description)


def test_empty_list_no_hit():
    r = check_emergency_symptoms([])
    assert r.hit is False
    assert r.matched_terms == []


def test_chest_pain_severe_hit():
    r = check_emergency_symptoms([_s("Chest pain")])
    assert r.hit is True
    assert "chest pain" in r.matched_terms


def test_no_severe_symptom_never_hits():
    """Emergency keywords on mild/moderate symptoms are left to the analysis."""
    r = check_emergency_symptoms([_s("chest pain", "moderate"), _s("shortness of breath", "mild")])
    assert r.hit is False


def test_keyword_on_other_symptom_counts_once_any_is_severe():
    r = check_emergency_symptoms([_s("back ache"), _s("shortness of breath", "mild")])
    assert r.hit is True
    assert "shortness of breath" in r.matched_terms


def test_description_is_scanned():
    r = check_emergency_symptoms([_s("dizziness", description="I think I'm having a stroke")])
    assert r.hit is True
    assert "stroke" in r.matched_terms


@pytest.mark.parametrize(
    "name",
    [
        "Trouble breathing",
        "can't breathe",
        "coughing up blood",
        "pressure in my chest",
        "seizures",
        "suicidal thoughts",
        "self-harm",
        "overdosed on pills",
        "severe bleeding",
    ],
)
def test_variants_hit(name):
    assert check_emergency_symptoms([_s(name)]).hit is True


@pytest.mark.parametrize("name", ["back pain", "sore throat", "runny nose", "headache", "high blood pressure reading"])
def test_generic_severe_symptoms_do_not_hit(name):
    assert check_emergency_symptoms([_s(name)]).hit is False


def test_matched_terms_deduplicated():
    r = check_emergency_symptoms([_s("chest pain"), _s("chest pain", description="chest pain at rest")])
    assert r.matched_terms.count("chest pain") == 1

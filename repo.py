import json

from db import SymptomCheck, get_session_factory
from triage.schemas import AnalysisResult, SymptomEntry


def save_symptom_check(symptoms: list[SymptomEntry], analysis: AnalysisResult) -> int:
    """Store one analyzed symptom list. Returns symptom check id."""
    SessionLocal = get_session_factory()
    with SessionLocal() as session:
        check = SymptomCheck(
            symptoms_json=json.dumps([s.to_wire() for s in symptoms]),
            analysis_json=json.dumps(analysis.to_wire()),
            risk_level=analysis.risk_level,
            urgency=analysis.urgency,
            status="pending",
        )
        session.add(check)
        session.commit()
        session.refresh(check)
        return check.id


def get_symptom_check(check_id: int) -> dict | None:
    """Return a stored symptom check as a JSON-ready dict, or None if unknown."""
    SessionLocal = get_session_factory()
    with SessionLocal() as session:
        check = session.get(SymptomCheck, check_id)
        if check is None:
            return None
        return {
            "id": check.id,
            "symptoms": json.loads(check.symptoms_json),
            "analysis": json.loads(check.analysis_json),
            "riskLevel": check.risk_level,
            "urgency": check.urgency,
            "status": check.status,
            "createdAt": check.created_at.isoformat() if check.created_at else None,
        }

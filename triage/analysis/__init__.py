from triage.analysis.fallback import create_emergency_response, generate_fallback_analysis
from triage.analysis.llm_client import extract_json_from_text, invoke_llm
from triage.analysis.symptom_analyzer import analyze_symptoms

__all__ = [
    "analyze_symptoms",
    "create_emergency_response",
    "generate_fallback_analysis",
    "extract_json_from_text",
    "invoke_llm",
]

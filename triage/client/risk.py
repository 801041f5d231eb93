"""
Risk interpretation of a received analysis: the notable-risk predicate that gates the
emergency-contact control, the auto-open rule, and display captions.
"""

from triage.schemas import AnalysisResult

MEDICAL_DISCLAIMER = (
    "This AI analysis is for informational purposes only and should not replace professional medical advice. "
    "Please consult with a healthcare provider for proper diagnosis and treatment."
)
FALLBACK_CAPTION = (
    "The AI service was unavailable, so this assessment was produced by our rule-based backup analysis."
)
CACHED_CAPTION = "This assessment was reused from a recent analysis of the same symptoms."


def is_notable_risk(analysis: AnalysisResult | None) -> bool:
    """Critical risk OR emergency urgency. High risk alone is not notable."""
    if analysis is None:
        return False
    return analysis.risk_level == "critical" or analysis.urgency == "emergency"


def should_auto_open(analysis: AnalysisResult | None) -> bool:
    """Whether a freshly stored analysis forces the emergency-contact form open. Checked once per analysis."""
    return is_notable_risk(analysis)


def risk_label(analysis: AnalysisResult) -> str:
    return f"{analysis.risk_level.capitalize()} Risk"


def urgency_label(analysis: AnalysisResult) -> str:
    return analysis.urgency.capitalize()


def disclaimer_caption(analysis: AnalysisResult) -> str:
    """Medical disclaimer, extended when telemetry says the result came from the fallback or the cache."""
    parts = [MEDICAL_DISCLAIMER]
    telemetry = analysis.telemetry
    if telemetry is not None:
        if telemetry.fallback_used:
            parts.append(FALLBACK_CAPTION)
        if telemetry.cached:
            parts.append(CACHED_CAPTION)
    return " ".join(parts)

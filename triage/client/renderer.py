"""
Render an analysis result to markdown, in the order the results card shows it.
Deterministic section order; telemetry only changes the disclaimer caption.
"""

from triage.client.risk import disclaimer_caption, is_notable_risk, risk_label, urgency_label
from triage.schemas import AnalysisResult

EMERGENCY_BANNER = (
    "Your results suggest you may need urgent help. Call emergency services if you are in danger, "
    "and consider notifying an emergency contact."
)


def _section(title: str, lines: list[str]) -> str:
    if not lines:
        return ""
    return f"## {title}\n\n" + "\n".join(f"- {line}" for line in lines) + "\n\n"


def render_analysis_markdown(analysis: AnalysisResult) -> str:
    parts: list[str] = []

    if is_notable_risk(analysis):
        parts.append(f"## Emergency warning\n\n{EMERGENCY_BANNER}\n\n")

    parts.append(f"## Risk assessment\n\n**{risk_label(analysis)}**\n\n")
    parts.append(f"## Urgency level\n\n**{urgency_label(analysis)}**\n\n")

    parts.append(_section("Recommendations", analysis.recommendations))

    conditions = [
        f"**{c.condition}** ({c.probability}%)" + (f": {c.description}" if c.description else "")
        for c in analysis.possible_conditions
    ]
    parts.append(_section("Possible conditions", conditions))

    if analysis.follow_up_in:
        parts.append(f"## Follow-up\n\n{analysis.follow_up_in}\n\n")

    parts.append(f"## Medical disclaimer\n\n{disclaimer_caption(analysis)}\n")
    return "".join(parts).strip()

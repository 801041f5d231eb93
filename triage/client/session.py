"""
Symptom checker session: what the symptom checker page does between user events.
Collect symptoms -> analyze -> interpret risk -> (maybe) force the emergency-contact form open.
All failures end up in `error` for inline display; nothing propagates out of analyze().
"""

from triage.client.analysis_client import AnalysisClient
from triage.client.collector import SymptomCollector
from triage.client.errors import (
    AnalysisError,
    AnalysisHTTPError,
    AnalysisResponseFormatError,
    AnalysisTimeoutError,
    AnalysisTransportError,
)
from triage.client.escalation import EmergencyEscalation
from triage.client.notifications import LoggingNotifier, Notifier
from triage.client.renderer import render_analysis_markdown
from triage.client.risk import should_auto_open
from triage.logging_structured import log_client_event
from triage.schemas import AnalysisResult

TIMEOUT_MESSAGE = "Analysis is taking longer than expected. Please try again with fewer symptoms."
TRANSPORT_MESSAGE = "Unable to reach the analysis service. Please check your connection and try again."
UNEXPECTED_MESSAGE = "An unexpected error occurred. Please try again."


def error_message_for(error: Exception) -> str:
    """Map an analysis failure to the text shown next to the Analyze button."""
    if isinstance(error, AnalysisTimeoutError):
        return TIMEOUT_MESSAGE
    if isinstance(error, AnalysisHTTPError):
        return error.message
    if isinstance(error, AnalysisResponseFormatError):
        return str(error)
    if isinstance(error, AnalysisTransportError):
        return TRANSPORT_MESSAGE
    return UNEXPECTED_MESSAGE


class SymptomCheckerSession:
    def __init__(
        self,
        client: AnalysisClient | None = None,
        *,
        escalation: EmergencyEscalation | None = None,
        notifier: Notifier | None = None,
    ):
        self.notifier = notifier or LoggingNotifier()
        self.client = client or AnalysisClient()
        self.collector = SymptomCollector()
        self.escalation = escalation or EmergencyEscalation(notifier=self.notifier)
        # keep a caller-supplied close callback; ours runs first
        self._outer_on_close = self.escalation.on_close
        self.escalation.on_close = self._on_escalation_closed
        self.analysis: AnalysisResult | None = None
        self.error: str | None = None
        self.is_analyzing = False
        self.auto_open_escalation = False

    @property
    def can_analyze(self) -> bool:
        """The Analyze trigger is offered only with symptoms and while no analysis is in flight."""
        return self.collector.has_symptoms and not self.is_analyzing

    def analyze(self) -> AnalysisResult | None:
        """
        Submit the current symptoms. On success the result replaces the previous one and the
        auto-open rule runs once. On failure `error` is set and any previous result is kept.
        """
        if not self.can_analyze:
            return None

        symptoms = self.collector.symptoms
        self.is_analyzing = True
        self.error = None
        try:
            result = self.client.analyze(symptoms)
        except AnalysisError as e:
            self.error = error_message_for(e)
            log_client_event("analysis_failed", kind=type(e).__name__, message=str(e))
            return None
        except Exception as e:
            self.error = UNEXPECTED_MESSAGE
            log_client_event("analysis_failed", kind=type(e).__name__, message=str(e))
            return None
        finally:
            self.is_analyzing = False

        self.analysis = result
        self.auto_open_escalation = should_auto_open(result)
        self.escalation.update(result, self.collector.symptom_names, show_form=self.auto_open_escalation)
        log_client_event(
            "analysis_completed",
            risk_level=result.risk_level,
            urgency=result.urgency,
            symptom_count=len(symptoms),
            escalation_auto_opened=self.auto_open_escalation,
        )
        self.notifier.notify("Analysis complete", f"{result.risk_level.capitalize()} risk", variant="default")
        return result

    def submit_emergency_contact(self) -> bool:
        # the alert lists the symptoms entered at submit time, not at analysis time
        self.escalation.symptom_names = self.collector.symptom_names
        return self.escalation.submit()

    def _on_escalation_closed(self) -> None:
        self.auto_open_escalation = False
        if self._outer_on_close is not None:
            self._outer_on_close()

    def render_result(self) -> str | None:
        """Markdown for the results card, or None before the first successful analysis."""
        if self.analysis is None:
            return None
        return render_analysis_markdown(self.analysis)

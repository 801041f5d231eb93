"""
Analysis client: submits the current symptom list to the analysis endpoint.
One POST per call, bounded at ANALYSIS_TIMEOUT_SEC; transport status and body shape are checked separately.
"""

import os

import httpx
from pydantic import ValidationError

from triage.client.errors import (
    AnalysisHTTPError,
    AnalysisResponseFormatError,
    AnalysisTimeoutError,
    AnalysisTransportError,
)
from triage.schemas import AnalysisResult, SymptomEntry

TRIAGE_API_BASE_URL = (os.getenv("TRIAGE_API_BASE_URL") or "http://localhost:8000").rstrip("/")
ANALYSIS_PATH = "/api/symptom-check"
ANALYSIS_TIMEOUT_SEC = float(os.getenv("TRIAGE_ANALYSIS_TIMEOUT_SEC", "30"))

DEFAULT_FAILURE_MESSAGE = "Failed to analyze symptoms"
INVALID_FORMAT_MESSAGE = "Invalid response format"


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return DEFAULT_FAILURE_MESSAGE
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, str) and error.strip():
            return error.strip()
    return DEFAULT_FAILURE_MESSAGE


def parse_analysis_response(payload: object) -> AnalysisResult:
    """
    Validate a 2xx body. It must be an object whose "analysis" is an object carrying "riskLevel";
    anything else is a format error even though the HTTP layer reported success.
    """
    if not isinstance(payload, dict):
        raise AnalysisResponseFormatError(INVALID_FORMAT_MESSAGE)
    analysis = payload.get("analysis")
    if not isinstance(analysis, dict) or not analysis.get("riskLevel"):
        raise AnalysisResponseFormatError(INVALID_FORMAT_MESSAGE)
    try:
        return AnalysisResult.model_validate(analysis)
    except ValidationError as e:
        raise AnalysisResponseFormatError(INVALID_FORMAT_MESSAGE) from e


class AnalysisClient:
    """
    Does not queue or reject concurrent calls; the caller gates the trigger while a call is in flight.
    transport is injectable (httpx.MockTransport in tests).
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout_sec: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = (base_url or TRIAGE_API_BASE_URL).rstrip("/")
        self.timeout_sec = timeout_sec if timeout_sec is not None else ANALYSIS_TIMEOUT_SEC
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout_sec),
            transport=self._transport,
        )

    def analyze(self, symptoms: list[SymptomEntry]) -> AnalysisResult:
        body = {"symptoms": [s.to_wire() for s in symptoms]}
        try:
            with self._client() as client:
                response = client.post(ANALYSIS_PATH, json=body)
        except httpx.TimeoutException as e:
            raise AnalysisTimeoutError(f"No analysis response within {self.timeout_sec:g}s") from e
        except httpx.HTTPError as e:
            raise AnalysisTransportError(str(e)) from e

        if not response.is_success:
            raise AnalysisHTTPError(response.status_code, _error_message(response))

        try:
            payload = response.json()
        except ValueError as e:
            raise AnalysisResponseFormatError(INVALID_FORMAT_MESSAGE) from e
        return parse_analysis_response(payload)

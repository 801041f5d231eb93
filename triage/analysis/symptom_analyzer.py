"""
Symptom analysis behind POST /api/symptom-check.

Order: red-flag short-circuit (bypasses the cache) -> cache -> LLM -> rule-based fallback.
Never raises for LLM problems: the fallback analysis is returned with telemetry.fallbackUsed.
"""

import json
import time

from pydantic import Field

from triage.analysis.fallback import create_emergency_response, generate_fallback_analysis
from triage.analysis.llm_client import (
    LLM_FAST_MODEL,
    LLM_STRONG_MODEL,
    invoke_llm,
    is_llm_configured,
    parse_llm_json,
)
from triage.analysis.prompts import REPAIR_SYSTEM, SYSTEM_ANALYZER, build_analysis_prompt, build_repair_message
from triage.logging_structured import (
    log_analysis_cache_hit,
    log_analysis_fallback,
    log_emergency_short_circuit,
    log_llm_model_failed,
    log_llm_parse_repaired,
)
from triage.safety.red_flag_rules import check_emergency_symptoms
from triage.schemas import AnalysisResult, PossibleCondition, SymptomEntry, Telemetry, Urgency

CACHE_TTL_SEC = 60 * 60

# cache key -> (stored_at, analysis)
_cache: dict[str, tuple[float, AnalysisResult]] = {}


class LlmAnalysis(AnalysisResult):
    """What the LLM must return: every list and the urgency are required."""

    urgency: Urgency
    recommendations: list[str]
    possible_conditions: list[PossibleCondition] = Field(..., alias="possibleConditions")


def cache_key(symptoms: list[SymptomEntry]) -> str:
    """Order-insensitive key: symptoms sorted by name."""
    ordered = sorted(symptoms, key=lambda s: s.name)
    return json.dumps([s.to_wire() for s in ordered], sort_keys=True)


def clear_cache() -> None:
    _cache.clear()


def evict_expired(now: float | None = None) -> int:
    """Drop entries older than CACHE_TTL_SEC. Returns how many were removed."""
    now = time.time() if now is None else now
    stale = [key for key, (stored_at, _) in _cache.items() if now - stored_at >= CACHE_TTL_SEC]
    for key in stale:
        del _cache[key]
    return len(stale)


def describe_symptoms(symptoms: list[SymptomEntry]) -> str:
    """Compact one-line description to keep the prompt short."""
    parts = []
    for s in symptoms:
        part = f"{s.name} ({s.severity} severity, duration: {s.duration})"
        if s.description:
            part += f": {s.description}"
        parts.append(part)
    return "; ".join(parts)


def choose_model(symptoms: list[SymptomEntry]) -> str:
    """The stronger model for longer or severe lists."""
    if len(symptoms) > 3 or any(s.severity == "severe" for s in symptoms):
        return LLM_STRONG_MODEL
    return LLM_FAST_MODEL


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _repair_analysis(raw: str, description: str, model: str, telemetry: Telemetry) -> LlmAnalysis:
    """One repair call on the same model after the first answer failed to parse."""
    try:
        reply = invoke_llm(
            [{"role": "user", "content": build_repair_message(raw, description)}],
            REPAIR_SYSTEM,
            model=model,
            temperature=0,
            response_format={"type": "json_object"},
        )
    except Exception as e:
        log_llm_model_failed(model=model, error=str(e))
        raise ValueError(f"LLM repair call failed: {e}") from e
    if reply.tokens_used is not None:
        telemetry.tokens_used = (telemetry.tokens_used or 0) + reply.tokens_used
    try:
        repaired = parse_llm_json(reply.text, LlmAnalysis)
    except ValueError as e:
        raise ValueError(f"LLM response did not match schema after repair: {e}") from e
    log_llm_parse_repaired(model=model)
    return repaired


def _llm_analysis(symptoms: list[SymptomEntry], telemetry: Telemetry) -> AnalysisResult:
    """
    Preferred model first, one retry on the fast model when the preferred one was the strong model.
    An answer that does not parse gets one repair call. Raises ValueError when no usable JSON came back.
    """
    description = describe_symptoms(symptoms)
    messages = [{"role": "user", "content": build_analysis_prompt(description)}]
    preferred = choose_model(symptoms)
    attempts = [(preferred, 0.2)]
    if preferred != LLM_FAST_MODEL:
        attempts.append((LLM_FAST_MODEL, 0.3))

    errors: list[str] = []
    for model, temperature in attempts:
        try:
            reply = invoke_llm(
                messages,
                SYSTEM_ANALYZER,
                model=model,
                temperature=temperature,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            log_llm_model_failed(model=model, error=str(e))
            errors.append(str(e))
            continue
        telemetry.model_used = reply.model
        telemetry.tokens_used = reply.tokens_used
        try:
            parsed = parse_llm_json(reply.text, LlmAnalysis)
        except ValueError:
            parsed = _repair_analysis(reply.text, description, model, telemetry)
        return AnalysisResult.model_validate(parsed.model_dump())

    raise ValueError("; ".join(errors) or "All AI models failed")


def analyze_symptoms(symptoms: list[SymptomEntry]) -> AnalysisResult:
    start = time.perf_counter()
    telemetry = Telemetry(fallback_used=False)

    red_flags = check_emergency_symptoms(symptoms)
    if red_flags.hit:
        log_emergency_short_circuit(matched_terms=red_flags.matched_terms)
        telemetry.response_time = _elapsed_ms(start)
        return create_emergency_response(symptoms, telemetry)

    key = cache_key(symptoms)
    cached = _cache.get(key)
    if cached is not None and time.time() - cached[0] < CACHE_TTL_SEC:
        log_analysis_cache_hit()
        base = cached[1].telemetry or Telemetry()
        return cached[1].model_copy(
            deep=True,
            update={"telemetry": base.model_copy(update={"cached": True, "response_time": _elapsed_ms(start)})},
        )

    try:
        if not is_llm_configured():
            raise ValueError("LLM client not configured")
        analysis = _llm_analysis(symptoms, telemetry)
    except ValueError as e:
        log_analysis_fallback(reason=str(e))
        telemetry.fallback_used = True
        telemetry.error = str(e)
        analysis = generate_fallback_analysis(symptoms)

    telemetry.response_time = _elapsed_ms(start)
    analysis = analysis.model_copy(update={"telemetry": telemetry})
    # fallback answers are cached too so repeated failures stay cheap
    now = time.time()
    evict_expired(now)
    _cache[key] = (now, analysis)
    return analysis

"""Prompt templates for symptom analysis. English only."""

SYSTEM_ANALYZER = "You are a medical AI assistant. Provide symptom analysis in valid JSON only."

ANALYSIS_JSON_FORMAT = """
{
  "riskLevel": "low|medium|high|critical",
  "recommendations": ["recommendation1", "recommendation2", ...],
  "possibleConditions": [
    {
      "condition": "condition name",
      "probability": number_between_0_and_100,
      "description": "brief description"
    }
  ],
  "urgency": "routine|urgent|emergency",
  "followUpIn": "specific timeframe recommendation"
}
"""

PROMPT_ANALYZE_SYMPTOMS = """Analyze these symptoms: {symptom_description}

Return ONLY JSON with this structure:
{json_format}
Remember: This is for informational purposes only, not professional medical advice."""


def build_analysis_prompt(symptom_description: str) -> str:
    return PROMPT_ANALYZE_SYMPTOMS.format(
        symptom_description=symptom_description,
        json_format=ANALYSIS_JSON_FORMAT,
    )

REPAIR_SYSTEM = (
    "You are a medical AI assistant. Output JSON only. No markdown, no code fences, no explanation."
)


def build_repair_message(original_model_output: str, symptom_description: str) -> str:
    """One-shot repair: convert the previous output, or regenerate from the symptoms if it is unusable."""
    return "\n".join(
        [
            "Required JSON structure:",
            ANALYSIS_JSON_FORMAT,
            "If the previous model output is empty, generic or incomplete, regenerate a full analysis from "
            "scratch based on the symptoms. Otherwise convert the output below to valid JSON with this structure.",
            "",
            "Symptoms:",
            symptom_description,
            "",
            "Previous model output:",
            original_model_output,
        ]
    )

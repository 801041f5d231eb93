"""
Deterministic analyses used without the LLM: the emergency response for red-flag symptom lists
and the keyword fallback used when the LLM is unavailable or returns unusable output.
"""

from triage.schemas import AnalysisResult, PossibleCondition, SymptomEntry, Telemetry

_SEVERITY_RANK = {"mild": 1, "moderate": 2, "severe": 3}

EMERGENCY_RECOMMENDATIONS = [
    "Seek immediate medical attention or call emergency services",
    "Do not delay seeking professional medical help",
    "Inform emergency responders about all your symptoms and their duration",
    "If possible, have someone stay with you until medical help arrives",
]


def _names(symptoms: list[SymptomEntry]) -> list[str]:
    return [s.name.lower() for s in symptoms]


def create_emergency_response(symptoms: list[SymptomEntry], telemetry: Telemetry | None = None) -> AnalysisResult:
    """critical / emergency analysis with symptom-specific first-aid guidance."""
    names = _names(symptoms)
    chest_pain = any("chest" in n and "pain" in n for n in names)
    breathing = any("breath" in n for n in names)
    bleeding = any("bleed" in n for n in names)
    headache = any("head" in n and ("pain" in n or "ache" in n) for n in names)

    recommendations = list(EMERGENCY_RECOMMENDATIONS)
    if chest_pain:
        recommendations.append("Sit down, rest, and try to remain calm while awaiting emergency services")
        recommendations.append("If available and prescribed to you, consider taking aspirin unless allergic")
    if breathing:
        recommendations.append("Try to remain calm and take slow, steady breaths if possible")
        recommendations.append("Sit upright to help ease breathing if possible")
    if bleeding:
        recommendations.append("Apply direct pressure to any visible bleeding sites using a clean cloth")
        recommendations.append("Elevate the injured area if possible")

    conditions: list[PossibleCondition] = []
    if chest_pain:
        conditions.append(
            PossibleCondition(
                condition="Possible Cardiac Event",
                probability=70,
                description="Chest pain can indicate serious cardiac conditions requiring immediate medical attention",
            )
        )
    if breathing:
        conditions.append(
            PossibleCondition(
                condition="Respiratory Distress",
                probability=75,
                description="Difficulty breathing may indicate several serious conditions requiring immediate medical care",
            )
        )
    if headache:
        conditions.append(
            PossibleCondition(
                condition="Severe Headache Condition",
                probability=65,
                description="Sudden severe headache could indicate serious neurological issues requiring immediate evaluation",
            )
        )
    if not conditions:
        conditions.append(
            PossibleCondition(
                condition="Acute Medical Condition",
                probability=80,
                description="Your symptoms suggest a potentially serious medical condition requiring immediate evaluation",
            )
        )

    return AnalysisResult(
        risk_level="critical",
        urgency="emergency",
        recommendations=recommendations,
        possible_conditions=conditions,
        follow_up_in="immediate medical attention required",
        telemetry=telemetry,
    )


# (keywords, recommendation, conditions)
_KEYWORD_RULES: list[tuple[tuple[str, ...], str, list[tuple[str, int, str]]]] = [
    (
        ("fever", "temperature"),
        "Stay hydrated and monitor temperature",
        [("Common Viral Infection", 40, "Viral infection that causes fever, fatigue, and general discomfort.")],
    ),
    (
        ("head", "migraine"),
        "Rest in a quiet, dark room if experiencing headache",
        [
            (
                "Tension Headache",
                35,
                "Common headache with mild to moderate pain, often described as a tight band around the head.",
            ),
            (
                "Migraine",
                25,
                "Recurring headache disorder causing moderate to severe pain, often with sensitivity to light and sound.",
            ),
        ],
    ),
    (
        ("cough",),
        "Stay hydrated and consider using a humidifier",
        [
            (
                "Upper Respiratory Infection",
                30,
                "Infection affecting the nasal passages, throat, and airways, causing cough and congestion.",
            )
        ],
    ),
    (
        ("stomach", "nausea", "vomit"),
        "Stick to a bland diet and stay hydrated",
        [("Gastroenteritis", 25, "Inflammation of the stomach and intestines, causing nausea, vomiting, and abdominal pain.")],
    ),
    (
        ("joint", "pain", "ache"),
        "Rest the affected area and consider over-the-counter pain relievers if appropriate",
        [("Musculoskeletal Strain", 20, "Injury to muscles or tendons causing pain and inflammation.")],
    ),
    (
        ("rash", "itch", "skin"),
        "Avoid scratching and irritating the affected area",
        [("Contact Dermatitis", 25, "Skin inflammation caused by contact with allergens or irritants.")],
    ),
    (
        ("throat", "swallow"),
        "Stay hydrated and consider soothing lozenges if appropriate",
        [("Pharyngitis", 30, "Inflammation of the pharynx, causing sore throat and discomfort when swallowing.")],
    ),
    (
        ("eye", "vision"),
        "Avoid straining your eyes and consider using artificial tears if appropriate",
        [("Conjunctivitis", 25, "Inflammation of the conjunctiva, causing redness, itching, and discharge.")],
    ),
]

_GENERAL_CONDITIONS = [
    ("Common Cold", 30, "Viral infection causing nasal congestion, sore throat, and mild fever."),
    (
        "Stress-Related Condition",
        25,
        "Physical symptoms triggered by psychological stress, including headaches and fatigue.",
    ),
    ("Seasonal Allergies", 20, "Immune response to environmental triggers causing various symptoms."),
]


def generate_fallback_analysis(symptoms: list[SymptomEntry], telemetry: Telemetry | None = None) -> AnalysisResult:
    """
    Rule-based analysis. Risk follows the highest severity (severe -> high, moderate -> medium, else low);
    recommendations and conditions follow symptom keywords.
    """
    names = _names(symptoms)
    highest = max((_SEVERITY_RANK.get(s.severity, 1) for s in symptoms), default=1)
    risk_level = "high" if highest == 3 else "medium" if highest == 2 else "low"

    recommendations = [
        "Consult with a healthcare professional for proper diagnosis",
        "Monitor your symptoms and note any changes",
    ]
    if highest >= 2:
        recommendations.append("Seek medical attention if symptoms worsen")

    conditions: list[PossibleCondition] = []
    for keywords, recommendation, rule_conditions in _KEYWORD_RULES:
        if any(k in n for k in keywords for n in names):
            recommendations.append(recommendation)
            conditions.extend(PossibleCondition(condition=c, probability=p, description=d) for c, p, d in rule_conditions)
    if not conditions:
        conditions = [PossibleCondition(condition=c, probability=p, description=d) for c, p, d in _GENERAL_CONDITIONS]

    urgency = "routine"
    if highest == 3:
        urgency = "urgent"
    if any("week" in s.duration or "month" in s.duration for s in symptoms):
        urgency = "urgent"
    if any(s.severity == "severe" and ("breath" in s.name.lower() or "chest pain" in s.name.lower()) for s in symptoms):
        urgency = "emergency"

    if urgency == "emergency":
        follow_up_in = "immediate medical attention required"
    elif urgency == "urgent":
        follow_up_in = "within 24-48 hours"
    elif risk_level == "low":
        follow_up_in = "within 2-3 weeks if symptoms persist"
    else:
        follow_up_in = "within 1-2 weeks"

    return AnalysisResult(
        risk_level=risk_level,
        urgency=urgency,
        recommendations=recommendations,
        possible_conditions=conditions,
        follow_up_in=follow_up_in,
        telemetry=telemetry,
    )

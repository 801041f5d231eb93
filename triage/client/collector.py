"""
Symptom input collector: one draft entry being composed plus the ordered list of added symptoms.
Pure local state; no network access.
"""

from triage.schemas import SymptomEntry

DRAFT_FIELDS = ("name", "severity", "duration", "description")


def _empty_draft() -> dict[str, str]:
    return {"name": "", "severity": "mild", "duration": "", "description": ""}


class SymptomCollector:
    def __init__(self, symptoms: list[SymptomEntry] | None = None):
        self._symptoms: list[SymptomEntry] = list(symptoms or [])
        self._draft = _empty_draft()

    @property
    def draft(self) -> dict[str, str]:
        return dict(self._draft)

    @property
    def symptoms(self) -> list[SymptomEntry]:
        return list(self._symptoms)

    @property
    def symptom_names(self) -> list[str]:
        return [s.name for s in self._symptoms]

    @property
    def has_symptoms(self) -> bool:
        return bool(self._symptoms)

    def __len__(self) -> int:
        return len(self._symptoms)

    def set_draft_field(self, field: str, value: str) -> None:
        """Free mutation of the draft. No validation happens here."""
        if field not in DRAFT_FIELDS:
            raise KeyError(field)
        self._draft[field] = value

    def add_symptom(self) -> bool:
        """
        Append a copy of the draft when name and duration are both filled in, then reset the draft.
        Returns False (and changes nothing) otherwise.
        """
        name = (self._draft["name"] or "").strip()
        duration = (self._draft["duration"] or "").strip()
        if not name or not duration:
            return False
        self._symptoms.append(SymptomEntry.model_validate(dict(self._draft)))
        self._draft = _empty_draft()
        return True

    def remove_symptom(self, index: int) -> None:
        """Drop the entry at index; any index that matches no position leaves the list as is."""
        self._symptoms = [s for i, s in enumerate(self._symptoms) if i != index]

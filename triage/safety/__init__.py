from triage.safety.red_flag_rules import RedFlagMatch, check_emergency_symptoms

__all__ = ["check_emergency_symptoms", "RedFlagMatch"]

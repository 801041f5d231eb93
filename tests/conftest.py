# Test environment: throwaway SQLite file, no LLM key, SMS sending on (sender is patched per test)
import os
import tempfile

os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(tempfile.mkdtemp(), 'test.db')}"
os.environ["LLM_API_KEY"] = ""
os.environ["GROQ_API_KEY"] = ""
os.environ["SMS_ENABLED"] = "1"

import pytest


@pytest.fixture(autouse=True)
def _clear_analysis_cache():
    from triage.analysis.symptom_analyzer import clear_cache

    clear_cache()
    yield
    clear_cache()

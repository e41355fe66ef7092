"""
Configuration
=============
Loads environment variables from a .env file using python-dotenv.

Environment Variables:
    SECRET_KEY: Flask session secret
    OPENAI_API_KEY: Key for the grading endpoint (required for /api/evaluate)
    OPENAI_API_URL: OpenAI-compatible chat completions URL
    OPENAI_MODEL: Model used for grading (default: gpt-4o-mini)
    EVALUATION_TIMEOUT: Seconds to wait for the grading endpoint (default: 30)
    EXECUTION_TIMEOUT: Seconds a learner program may run (default: 10)
    PYTHON_EXECUTABLE: Interpreter used to run learner code (default: current one)
    SUSPICION_PROFILE: Copy-paste scoring profile: standard | strict
    LOG_LEVEL: Root log level (default: INFO)
"""
import os
from dotenv import load_dotenv

load_dotenv()

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_API_URL = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
EVALUATION_TIMEOUT = int(os.getenv("EVALUATION_TIMEOUT", 30))

EXECUTION_TIMEOUT = int(os.getenv("EXECUTION_TIMEOUT", 10))
PYTHON_EXECUTABLE = os.getenv("PYTHON_EXECUTABLE")

SUSPICION_PROFILE = os.getenv("SUSPICION_PROFILE", "standard")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class Config:
    """Flask settings, loaded with app.config.from_object()."""

    SECRET_KEY = SECRET_KEY
    SUSPICION_PROFILE = SUSPICION_PROFILE
    LOG_LEVEL = LOG_LEVEL

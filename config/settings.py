import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")


def _int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


# Storage
USE_DB = os.getenv("USE_DB", "0") == "1"
DB_URL = os.getenv("DB_URL", "sqlite:///./care.db")

# LLM providers
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
DEEPSEEK_API_KEY = os.getenv("DEEPSEEK_API_KEY")
DEEPSEEK_MODEL = os.getenv("DEEPSEEK_MODEL", "deepseek-chat")
DEEPSEEK_BASE_URL = os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com")
DEFAULT_PROVIDER = os.getenv("DEFAULT_PROVIDER")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")

# Generation
LLM_MAX_TOKENS = _int("LLM_MAX_TOKENS", 300)
LLM_TEMPERATURE = _float("LLM_TEMPERATURE", 0.4)
LLM_TIMEOUT_SECONDS = _float("LLM_TIMEOUT_SECONDS", 20.0)
HISTORY_TURNS = _int("HISTORY_TURNS", 6)

# Retrieval
RETRIEVAL_TIMEOUT_SECONDS = _float("RETRIEVAL_TIMEOUT_SECONDS", 5.0)
RETRIEVAL_TOP_K = _int("RETRIEVAL_TOP_K", 3)

# Widget scheduling
FOLLOW_UP_DELAY_SECONDS = _float("FOLLOW_UP_DELAY_SECONDS", 30.0)
BREATHING_TIMER_SECONDS = _int("BREATHING_TIMER_SECONDS", 120)

# Channels
WHATSAPP_VERIFY_TOKEN = os.getenv("WHATSAPP_VERIFY_TOKEN", "bepawa_whatsapp_verify")
COUNSELOR_WHATSAPP_URL = os.getenv("COUNSELOR_WHATSAPP_URL", "https://wa.me/255713434625")
ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv("ALLOWED_ORIGINS", "http://127.0.0.1:8081,http://localhost:8081").split(",")
    if o.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

import os
from dotenv import load_dotenv
load_dotenv()


def _flag(name, default="0"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///callpipe.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # set by alembic so migrations, not create_all, own the schema
    SKIP_CREATE_ALL = _flag("SKIP_CREATE_ALL")

    # watch directory and processed directory
    RECORDS_PATH = os.getenv("RECORDS_PATH", "")
    RECORDS_PATH_MAPPED = os.getenv("RECORDS_PATH_MAPPED", "")

    # speech-to-text
    STT_BACKEND = os.getenv("STT_BACKEND", "openai")
    STT_MODEL = os.getenv("STT_MODEL", "whisper-1")
    STT_LANGUAGE = os.getenv("STT_LANGUAGE", "es")
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    DEEPGRAM_API_KEY = os.getenv("DEEPGRAM_API_KEY")

    # sale-outcome analysis
    ANALYSIS_BACKEND = os.getenv("ANALYSIS_BACKEND", "remote")
    ANALYSIS_FALLBACK = _flag("ANALYSIS_FALLBACK", "1")
    OPENAI_CHAT_MODEL = os.getenv("OPENAI_CHAT_MODEL", "gpt-4")
    OLLAMA_HOST = os.getenv("OLLAMA_HOST", "http://localhost:11434")
    OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "deepseek-llm")
    LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.1"))
    LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "500"))
    HTTP_TIMEOUT_SEC = float(os.getenv("HTTP_TIMEOUT_SEC", "120"))
    HEURISTIC_POSITIVE_INDICATORS = os.getenv(
        "HEURISTIC_POSITIVE_INDICATORS",
        "sí,si,acepto,perfecto,de acuerdo,está bien,comprar,pagar,comprobante,enviar,confirmar",
    )
    HEURISTIC_NEGATIVE_INDICATORS = os.getenv(
        "HEURISTIC_NEGATIVE_INDICATORS",
        "no,no gracias,no estoy interesado,no me interesa,no quiero,no puedo,no tengo,no necesito",
    )

    # periodic sweeps
    SCHEDULER_ENABLED = _flag("SCHEDULER_ENABLED")
    MAP_INTERVAL_SEC = float(os.getenv("MAP_INTERVAL_SEC", "10"))
    MAP_BATCH_LIMIT = int(os.getenv("MAP_BATCH_LIMIT", "50"))
    TRANSCRIBE_INTERVAL_SEC = float(os.getenv("TRANSCRIBE_INTERVAL_SEC", "600"))
    TRANSCRIBE_BATCH_LIMIT = int(os.getenv("TRANSCRIBE_BATCH_LIMIT", "20"))

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv("config.env")


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "y", "on"}


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    return float(val)


@dataclass
class Settings:
    intent_threshold: float = _as_float(os.getenv("INTENT_THRESHOLD"), 0.5)
    site_url: str = os.getenv("SITE_URL", "https://tablebot.example")
    # Classifier: keyword | luis
    recognizer: str = os.getenv("RECOGNIZER", "keyword")
    luis_endpoint: str = os.getenv("LUIS_ENDPOINT", "")
    luis_app_id: str = os.getenv("LUIS_APP_ID", "")
    luis_key: str = os.getenv("LUIS_KEY", "")
    # Knowledge base: tfidf | qnamaker
    knowledge_base: str = os.getenv("KNOWLEDGE_BASE", "tfidf")
    knowledge_base_path: str = os.getenv("KNOWLEDGE_BASE_PATH", "")
    knowledge_min_score: float = _as_float(os.getenv("KNOWLEDGE_MIN_SCORE"), 0.1)
    qna_host: str = os.getenv("QNA_HOST", "")
    qna_kb_id: str = os.getenv("QNA_KB_ID", "")
    qna_endpoint_key: str = os.getenv("QNA_ENDPOINT_KEY", "")
    # State storage: memory | sql
    storage: str = os.getenv("STORAGE", "memory")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./tablebot_state.db")
    echo_sql: bool = _as_bool(os.getenv("ECHO_SQL"), False)
    http_timeout: float = _as_float(os.getenv("HTTP_TIMEOUT"), 10.0)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()

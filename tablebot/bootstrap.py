"""Builds the dispatcher and its collaborators from Settings."""
import logging

from .config import Settings
from .database import create_db_engine, create_session_factory, init_db
from .dispatcher import TurnDispatcher
from .nlp_service import KeywordRecognizer
from .rag import TfidfKnowledgeBase, load_faqs
from .services.knowledge import KnowledgeBase, QnAMakerClient
from .services.recognizer import IntentRecognizer, LuisRecognizer
from .state import StateStore
from .storage import MemoryStorage, SqlStorage, Storage
from .transport import Transport

logger = logging.getLogger(__name__)


def build_recognizer(settings: Settings) -> IntentRecognizer:
    mode = settings.recognizer.lower()
    if mode == "luis":
        logger.info("Recognizer: LUIS app %s", settings.luis_app_id)
        return LuisRecognizer(
            settings.luis_endpoint, settings.luis_app_id, settings.luis_key,
            timeout=settings.http_timeout,
        )
    if mode != "keyword":
        raise ValueError(f"Unknown RECOGNIZER {settings.recognizer!r}")
    logger.info("Recognizer: keyword")
    return KeywordRecognizer()


def build_knowledge_base(settings: Settings) -> KnowledgeBase:
    mode = settings.knowledge_base.lower()
    if mode == "qnamaker":
        logger.info("Knowledge base: QnA Maker %s", settings.qna_kb_id)
        return QnAMakerClient(
            settings.qna_host, settings.qna_kb_id, settings.qna_endpoint_key,
            timeout=settings.http_timeout,
        )
    if mode != "tfidf":
        raise ValueError(f"Unknown KNOWLEDGE_BASE {settings.knowledge_base!r}")
    faqs = load_faqs(settings.knowledge_base_path) if settings.knowledge_base_path else None
    logger.info("Knowledge base: tf-idf (%s)", settings.knowledge_base_path or "built-in FAQs")
    return TfidfKnowledgeBase(faqs, min_score=settings.knowledge_min_score)


def build_storage(settings: Settings) -> Storage:
    mode = settings.storage.lower()
    if mode == "sql":
        engine = create_db_engine(settings.database_url, echo=settings.echo_sql)
        init_db(engine)
        logger.info("Storage: SQL (%s)", engine.url.render_as_string(hide_password=True))
        return SqlStorage(create_session_factory(engine))
    if mode != "memory":
        raise ValueError(f"Unknown STORAGE {settings.storage!r}")
    logger.info("Storage: memory")
    return MemoryStorage()


def build_dispatcher(settings: Settings, transport: Transport) -> TurnDispatcher:
    return TurnDispatcher(
        recognizer=build_recognizer(settings),
        knowledge_base=build_knowledge_base(settings),
        state=StateStore(build_storage(settings)),
        transport=transport,
        site_url=settings.site_url,
        intent_threshold=settings.intent_threshold,
    )

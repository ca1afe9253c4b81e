"""Controller / Orchestrator for incoming chat messages.

Wires the session store, documentation retrieval, prompt building and the
generation client together for each message.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .config import Config, LLMSettings
from .cache import ResponseCache
from .docs import DocumentStore
from .errors import ProviderError, ServiceUnavailableError
from .generate import GenerationClient
from .prompt_builder import PromptBuilder, REFUSAL_PHRASE
from .session import SessionManager
from .similarity import find_relevant_docs
from ..utils.logger import get_logger

logger = get_logger(__name__)

NO_DOCUMENTATION = "No specific documentation found for this query."
NO_INFORMATION_MARKERS = ("i don't have information", "i don't have enough information")


def format_history(messages: List[Dict[str, Any]]) -> str:
    if not messages:
        return ""
    lines = ["Previous conversation:"]
    for msg in messages:
        speaker = "User" if msg["role"] == "user" else "Assistant"
        lines.append(f"{speaker}: {msg['content']}")
    return "\n".join(lines) + "\n"


def format_documentation(documents) -> str:
    if not documents:
        return NO_DOCUMENTATION
    return "\n\n".join(f"{doc.title}: {doc.content}" for doc in documents)


class Controller:
    def __init__(
        self,
        session_manager: SessionManager,
        document_store: DocumentStore,
        generator: GenerationClient,
        prompt_builder: Optional[PromptBuilder] = None,
        relevance_threshold: float = 0.5,
        history_limit: int = 6,
    ):
        self.session_manager = session_manager
        self.document_store = document_store
        self.generator = generator
        self.builder = prompt_builder or PromptBuilder()
        self.relevance_threshold = relevance_threshold
        self.history_limit = history_limit

    def handle_message(self, session_id: str, message: str) -> Dict[str, Any]:
        logger.info(f"Handling message for session {session_id}")

        # 1. make sure the session exists and store the user turn
        self.session_manager.ensure_session(session_id)
        self.session_manager.add_message(session_id, "user", message.strip())

        # 2. recent history, including the message just stored
        history = self.session_manager.get_recent_messages(session_id, self.history_limit)
        context = format_history(history)

        # 3. relevant documentation
        relevant = find_relevant_docs(
            message, self.document_store.get_documents(), self.relevance_threshold
        )
        logger.info(f"Retrieved {len(relevant)} relevant documents")

        prompt = self.builder.build_prompt(message, format_documentation(relevant), context)

        try:
            result = self.generator.complete(prompt)
        except ProviderError as e:
            logger.error(f"LLM error for session {session_id}: {e.message}")
            raise ServiceUnavailableError(f"Failed to get response from AI: {e.message}") from e

        reply = result.reply
        if not reply or any(marker in reply.lower() for marker in NO_INFORMATION_MARKERS):
            reply = REFUSAL_PHRASE

        self.session_manager.add_message(session_id, "assistant", reply)

        return {
            "reply": reply,
            "tokens_used": result.tokens_used,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


def build_controller(session_manager: Optional[SessionManager] = None) -> Controller:
    """Build the production controller from the environment.

    Raises ConfigurationError when the provider credential is missing.
    """
    settings = LLMSettings.from_env()
    cache = ResponseCache(ttl_seconds=Config.CACHE_TTL_SECONDS, max_entries=Config.CACHE_MAX_ENTRIES)
    return Controller(
        session_manager=session_manager or SessionManager(),
        document_store=DocumentStore(),
        generator=GenerationClient(settings, cache=cache),
        relevance_threshold=Config.RELEVANCE_THRESHOLD,
        history_limit=Config.CONTEXT_MESSAGES,
    )

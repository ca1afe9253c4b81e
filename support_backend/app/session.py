#!/usr/bin/env python3
"""
Session management module for the support assistant.

This module stores chat sessions and their messages in the relational store
through SQLAlchemy.
"""

import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..data.database import SessionLocal
from ..data.models import ChatSession, Message, utcnow
from ..utils.logger import get_logger

logger = get_logger(__name__)


def generate_session_id() -> str:
    """Timestamp plus a random suffix, e.g. ``session_1718000000000_k3j9x0a2b``."""
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _message_dict(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "session_id": message.session_id,
        "role": message.role,
        "content": message.content,
        "created_at": message.created_at,
    }


class SessionManager:
    """Manages chat sessions and conversation history."""

    def __init__(self, session_factory=None):
        """
        Args:
            session_factory: SQLAlchemy sessionmaker; defaults to the app database
        """
        self.session_factory = session_factory or SessionLocal

    @contextmanager
    def _scope(self):
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _count_query(self, db):
        message_count = func.count(Message.id).label("message_count")
        return (
            db.query(ChatSession, message_count)
            .outerjoin(Message, Message.session_id == ChatSession.id)
            .group_by(ChatSession.id)
        )

    @staticmethod
    def _session_dict(chat_session: ChatSession, message_count: int) -> Dict[str, Any]:
        return {
            "id": chat_session.id,
            "created_at": chat_session.created_at,
            "updated_at": chat_session.updated_at,
            "message_count": message_count,
        }

    def create_session(self, session_id: Optional[str] = None) -> Tuple[str, bool]:
        """
        Create a new session.

        Args:
            session_id: Requested id; one is generated when omitted

        Returns:
            (session_id, created) where created is False if it already existed
        """
        session_id = session_id or generate_session_id()
        with self._scope() as db:
            if db.get(ChatSession, session_id) is not None:
                return session_id, False
            db.add(ChatSession(id=session_id))
        logger.info(f"Created session {session_id}")
        return session_id, True

    def ensure_session(self, session_id: str) -> bool:
        """
        Create the session if missing, otherwise bump its updated_at.

        Returns:
            True if the session was created
        """
        try:
            with self._scope() as db:
                chat_session = db.get(ChatSession, session_id)
                if chat_session is not None:
                    chat_session.updated_at = utcnow()
                    return False
                db.add(ChatSession(id=session_id))
        except IntegrityError:
            # created concurrently by another request
            self.touch(session_id)
            return False
        logger.info(f"Created session {session_id}")
        return True

    def touch(self, session_id: str) -> bool:
        with self._scope() as db:
            chat_session = db.get(ChatSession, session_id)
            if chat_session is None:
                return False
            chat_session.updated_at = utcnow()
            return True

    def session_exists(self, session_id: str) -> bool:
        with self._scope() as db:
            return db.get(ChatSession, session_id) is not None

    def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve session data with its message count.

        Returns:
            Session data or None if not found
        """
        with self._scope() as db:
            row = self._count_query(db).filter(ChatSession.id == session_id).first()
            if row is None:
                return None
            return self._session_dict(*row)

    def list_sessions(self) -> List[Dict[str, Any]]:
        """All sessions, most recently updated first."""
        with self._scope() as db:
            rows = self._count_query(db).order_by(
                ChatSession.updated_at.desc(), ChatSession.id
            ).all()
            return [self._session_dict(*row) for row in rows]

    def delete_session(self, session_id: str) -> bool:
        """Delete a session; its messages go with it."""
        with self._scope() as db:
            chat_session = db.get(ChatSession, session_id)
            if chat_session is None:
                return False
            db.delete(chat_session)
        logger.info(f"Deleted session {session_id}")
        return True

    def clear_session(self, session_id: str) -> bool:
        """Delete a session's messages but keep the session."""
        with self._scope() as db:
            chat_session = db.get(ChatSession, session_id)
            if chat_session is None:
                return False
            deleted = db.query(Message).filter(Message.session_id == session_id).delete(
                synchronize_session=False
            )
            chat_session.updated_at = utcnow()
        logger.info(f"Cleared {deleted} messages from session {session_id}")
        return True

    def add_message(self, session_id: str, role: str, content: str) -> Dict[str, Any]:
        """
        Add a message to the session conversation history.

        Args:
            session_id: Existing session id
            role: "user" or "assistant"
            content: Message text

        Returns:
            The stored message
        """
        with self._scope() as db:
            message = Message(session_id=session_id, role=role, content=content)
            db.add(message)
            db.flush()
            return _message_dict(message)

    def get_recent_messages(self, session_id: str, limit: int = 6) -> List[Dict[str, Any]]:
        """
        Get the most recent messages in chronological order.

        Args:
            session_id: Session id
            limit: Maximum number of messages to return
        """
        with self._scope() as db:
            messages = (
                db.query(Message)
                .filter(Message.session_id == session_id)
                .order_by(Message.created_at.desc(), Message.id.desc())
                .limit(limit)
                .all()
            )
            return [_message_dict(m) for m in reversed(messages)]

    def get_messages(self, session_id: str) -> List[Dict[str, Any]]:
        """All messages of a session, oldest first."""
        with self._scope() as db:
            messages = (
                db.query(Message)
                .filter(Message.session_id == session_id)
                .order_by(Message.created_at.asc(), Message.id.asc())
                .all()
            )
            return [_message_dict(m) for m in messages]

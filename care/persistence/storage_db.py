import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from care.errors import StorageError
from care.storage_memory import ConversationContext, ConversationRecord, MessageRecord, new_context

from .db import SessionLocal
from .models import Conversation, Message


def _conversation_record(row: Conversation) -> ConversationRecord:
    context = new_context()
    context.update(row.context or {})
    return {
        "id": row.id,
        "session_id": row.session_id,
        "channel": row.channel,
        "user_id": row.user_id,
        "language": row.language,
        "context": context,
        "created_at": row.created_at,
        "updated_at": row.updated_at,
    }


def _message_record(row: Message) -> MessageRecord:
    return {
        "id": str(row.id),
        "conversation_id": row.conversation_id,
        "role": row.role,
        "content": row.content,
        "metadata": dict(row.meta or {}),
        "created_at": row.created_at,
    }


class DBConversationStore:
    def __init__(self, session_factory=SessionLocal) -> None:
        self.Session = session_factory

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def _lookup(self, session, session_id: str, channel: str) -> Optional[Conversation]:
        stmt = select(Conversation).where(Conversation.session_id == session_id, Conversation.channel == channel)
        return session.scalars(stmt).first()

    def find_or_create(self, session_id: str, channel: str, user_id: Optional[str] = None,
                       language: str = "en") -> ConversationRecord:
        session = self.Session()
        try:
            row = self._lookup(session, session_id, channel)
            if row is None:
                row = Conversation(
                    id=self.new_id(),
                    session_id=session_id,
                    channel=channel,
                    user_id=user_id,
                    language=language,
                    context=dict(new_context()),
                )
                session.add(row)
                try:
                    session.commit()
                except IntegrityError:
                    # another caller created it first; use theirs
                    session.rollback()
                    row = self._lookup(session, session_id, channel)
                    if row is None:
                        raise
            return _conversation_record(row)
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"find_or_create failed for {channel}:{session_id}") from e
        finally:
            session.close()

    def get(self, session_id: str, channel: str) -> Optional[ConversationRecord]:
        session = self.Session()
        try:
            row = self._lookup(session, session_id, channel)
            return _conversation_record(row) if row else None
        except SQLAlchemyError as e:
            raise StorageError(f"lookup failed for {channel}:{session_id}") from e
        finally:
            session.close()

    def append_message(self, conversation_id: str, role: str, content: str,
                       metadata: Optional[Dict[str, Any]] = None) -> MessageRecord:
        session = self.Session()
        try:
            row = Message(conversation_id=conversation_id, role=role, content=content, meta=dict(metadata or {}))
            session.add(row)
            session.commit()
            return _message_record(row)
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"append_message failed for {conversation_id}") from e
        finally:
            session.close()

    def update_context(self, conversation_id: str, context: ConversationContext,
                       language: Optional[str] = None) -> None:
        session = self.Session()
        try:
            row = session.get(Conversation, conversation_id)
            if row is None:
                raise KeyError(conversation_id)
            row.context = dict(context)
            if language:
                row.language = language
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"update_context failed for {conversation_id}") from e
        finally:
            session.close()

    def recent_messages(self, conversation_id: str, limit: int = 10) -> List[MessageRecord]:
        if limit <= 0:
            return []
        session = self.Session()
        try:
            stmt = (
                select(Message)
                .where(Message.conversation_id == conversation_id)
                .order_by(Message.id.desc())
                .limit(limit)
            )
            rows = list(session.scalars(stmt))
            return [_message_record(r) for r in reversed(rows)]
        except SQLAlchemyError as e:
            raise StorageError(f"recent_messages failed for {conversation_id}") from e
        finally:
            session.close()

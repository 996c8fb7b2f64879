import copy
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, TypedDict


class ConversationContext(TypedDict):
    topics_discussed: List[str]
    emotional_state: str
    risk_level: str
    session_count: int
    language_preference: Optional[str]


class ConversationRecord(TypedDict):
    id: str
    session_id: str
    channel: str
    user_id: Optional[str]
    language: str
    context: ConversationContext
    created_at: datetime
    updated_at: datetime


class MessageRecord(TypedDict):
    id: str
    conversation_id: str
    role: str
    content: str
    metadata: Dict[str, Any]
    created_at: datetime


def new_context() -> ConversationContext:
    return {
        "topics_discussed": [],
        "emotional_state": "neutral",
        "risk_level": "low",
        "session_count": 0,
        "language_preference": None,
    }


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryConversationStore:
    """Process-local store; (session_id, channel) is the uniqueness key."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_key: Dict[Tuple[str, str], str] = {}
        self._db: Dict[str, ConversationRecord] = {}
        self._messages: Dict[str, List[MessageRecord]] = {}

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def find_or_create(self, session_id: str, channel: str, user_id: Optional[str] = None,
                       language: str = "en") -> ConversationRecord:
        with self._lock:
            cid = self._by_key.get((session_id, channel))
            if cid is None:
                cid = self.new_id()
                now = _now()
                self._db[cid] = {
                    "id": cid,
                    "session_id": session_id,
                    "channel": channel,
                    "user_id": user_id,
                    "language": language,
                    "context": new_context(),
                    "created_at": now,
                    "updated_at": now,
                }
                self._messages[cid] = []
                self._by_key[(session_id, channel)] = cid
            return copy.deepcopy(self._db[cid])

    def get(self, session_id: str, channel: str) -> Optional[ConversationRecord]:
        with self._lock:
            cid = self._by_key.get((session_id, channel))
            return copy.deepcopy(self._db[cid]) if cid else None

    def append_message(self, conversation_id: str, role: str, content: str,
                       metadata: Optional[Dict[str, Any]] = None) -> MessageRecord:
        with self._lock:
            if conversation_id not in self._db:
                raise KeyError(conversation_id)
            msg: MessageRecord = {
                "id": self.new_id(),
                "conversation_id": conversation_id,
                "role": role,
                "content": content,
                "metadata": dict(metadata or {}),
                "created_at": _now(),
            }
            self._messages[conversation_id].append(msg)
            return copy.deepcopy(msg)

    def update_context(self, conversation_id: str, context: ConversationContext,
                       language: Optional[str] = None) -> None:
        with self._lock:
            row = self._db[conversation_id]
            row["context"] = copy.deepcopy(context)
            if language:
                row["language"] = language
            row["updated_at"] = _now()

    def recent_messages(self, conversation_id: str, limit: int = 10) -> List[MessageRecord]:
        with self._lock:
            msgs = self._messages.get(conversation_id, [])
            return copy.deepcopy(msgs[-limit:]) if limit > 0 else []

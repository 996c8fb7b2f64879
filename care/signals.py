from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

from loguru import logger


@dataclass(frozen=True)
class IntentCompleted:
    """Emitted when a scripted flow ends in a booking or order outcome.

    Delivery (email, SMS, staff dashboard) belongs to the surrounding app.
    """
    kind: str
    session_id: str
    channel: str
    conversation_id: Optional[str] = None
    answers: Dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationSink(Protocol):
    def emit(self, signal: IntentCompleted) -> None: ...


class LoggingSink:
    def emit(self, signal: IntentCompleted) -> None:
        logger.bind(channel="signals").info(
            f"intent completed kind={signal.kind} session={signal.session_id} "
            f"channel={signal.channel} fields={sorted(signal.answers)}"
        )

"""WhatsApp Cloud API webhook helpers: verification handshake and inbound text extraction."""
from typing import Any, Dict, List, NamedTuple, Optional, Tuple


class InboundMessage(NamedTuple):
    phone: str
    text: str
    message_id: Optional[str] = None


def verify_webhook(mode: Optional[str], token: Optional[str], challenge: Optional[str],
                   expected_token: str, ping: Optional[str] = None) -> Tuple[int, str]:
    """Return (status_code, body) for Meta's GET subscription check."""
    if mode == "subscribe" and token and challenge:
        if token == expected_token:
            return 200, challenge
        return 403, "Forbidden: invalid verify token"
    if ping:
        return 200, "ok"
    return 400, "Bad Request"


def _dicts(items: Any) -> List[Dict[str, Any]]:
    return [i for i in items if isinstance(i, dict)] if isinstance(items, list) else []


def extract_whatsapp_messages(payload: Dict[str, Any]) -> List[InboundMessage]:
    """Pull text messages out of an inbound webhook payload; other message types are skipped.

    Meta payloads are untrusted: any entry, change, value or text field of the wrong
    shape is skipped rather than raised on.
    """
    found: List[InboundMessage] = []
    if not isinstance(payload, dict):
        return found
    for entry in _dicts(payload.get("entry")):
        for change in _dicts(entry.get("changes")):
            value = change.get("value")
            if not isinstance(value, dict):
                continue
            for msg in _dicts(value.get("messages")):
                text = msg.get("text")
                if msg.get("type") != "text" or not isinstance(text, dict):
                    continue
                body = text.get("body")
                sender = msg.get("from")
                if isinstance(body, str) and body.strip() and sender:
                    found.append(InboundMessage(str(sender), body.strip(), msg.get("id")))
    return found

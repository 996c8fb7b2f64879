"""Closed set of reply variants produced by one turn."""
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .flows import FlowState

FOLLOW_UP_CATEGORIES = frozenset({"medication", "symptom"})


@dataclass(frozen=True)
class CrisisReply:
    content: str
    suggestions: Tuple[str, ...]
    language: str
    category: str = "crisis"
    priority: str = "crisis"


@dataclass(frozen=True)
class ScriptedFlowReply:
    content: str
    suggestions: Tuple[str, ...]
    language: str
    category: str = "general"
    priority: str = "normal"
    flow: Optional[FlowState] = None
    action: Optional[str] = None
    intent: Optional[str] = None
    translated: bool = False


@dataclass(frozen=True)
class GeneratedReply:
    content: str
    suggestions: Tuple[str, ...]
    language: str
    knowledge_used: int = 0
    degraded: bool = False  # grounded on machine-translated passages
    category: str = "general"
    priority: str = "normal"


@dataclass(frozen=True)
class FallbackReply:
    content: str
    suggestions: Tuple[str, ...]
    language: str
    reason: str = ""
    category: str = "fallback"
    priority: str = "normal"


Reply = Union[CrisisReply, ScriptedFlowReply, GeneratedReply, FallbackReply]


def reply_kind(reply: Reply) -> str:
    if isinstance(reply, CrisisReply):
        return "crisis"
    if isinstance(reply, ScriptedFlowReply):
        return "scripted"
    if isinstance(reply, GeneratedReply):
        return "generated"
    if isinstance(reply, FallbackReply):
        return "fallback"
    raise TypeError(f"unknown reply type: {type(reply).__name__}")


def wants_follow_up(reply: Reply) -> bool:
    return reply_kind(reply) in ("scripted", "generated") and reply.category in FOLLOW_UP_CATEGORIES


def reply_metadata(reply: Reply) -> dict:
    """Message metadata persisted alongside the assistant turn."""
    meta = {"kind": reply_kind(reply), "category": reply.category, "language": reply.language}
    if isinstance(reply, GeneratedReply):
        meta["knowledge_used"] = reply.knowledge_used
        if reply.degraded:
            meta["translated"] = True
    elif isinstance(reply, ScriptedFlowReply):
        if reply.intent:
            meta["intent"] = reply.intent
        if reply.flow is not None:
            meta["flow"] = reply.flow.mode
            meta["flow_step"] = reply.flow.step
            meta["flow_status"] = reply.flow.status
        if reply.translated:
            meta["translated"] = True
    elif isinstance(reply, FallbackReply):
        meta["reason"] = reply.reason
    return meta

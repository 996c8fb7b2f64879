from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FlowStateModel(_CamelModel):
    mode: Literal["hiv_self_test", "circumcision", "self_check"]
    step: int = 0
    answers: Dict[str, str] = Field(default_factory=dict)
    status: Literal["active", "completed", "referred", "cancelled"] = "active"


class TurnIn(_CamelModel):
    message: str
    session_id: str = Field(min_length=1)
    user_id: Optional[str] = None
    channel: Literal["web", "whatsapp"] = "web"
    phone_number: Optional[str] = None
    language: Optional[Literal["en", "sw"]] = None
    assistant: Literal["care", "pharmacy"] = "care"
    flow: Optional[FlowStateModel] = None


class TurnOut(BaseModel):
    content: str
    suggestions: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    priority: Literal["crisis", "normal"] = "normal"
    conversation_id: Optional[str] = None
    language: Literal["en", "sw"] = "en"
    flow: Optional[FlowStateModel] = None
    action: Optional[str] = None
    follow_up: bool = False


class MessageItem(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    metadata: Dict = Field(default_factory=dict)
    created_at: Optional[datetime] = None


class ConversationOut(BaseModel):
    session_id: str
    channel: str
    messages: List[MessageItem]

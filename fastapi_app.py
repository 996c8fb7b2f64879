from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from loguru import logger

from config import settings
from care.channels import extract_whatsapp_messages, verify_webhook
from care.errors import EmptyMessage
from care.flows import FlowState
from care.generator import ResponseGenerator
from care.knowledge import HashingEmbedder, InMemoryKnowledgeIndex, OpenAIEmbedder
from care.log import configure_logging
from care.replies import ScriptedFlowReply
from care.retriever import KnowledgeRetriever
from care.schemas import ConversationOut, FlowStateModel, MessageItem, TurnIn, TurnOut
from care.services import CareService
from care.translate import LLMTranslator, PassthroughTranslator

configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="Bepawa Care API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

use_db = settings.USE_DB

if use_db:
    from care.persistence.db_setup import create_db_tables
    from care.persistence.knowledge_db import DBKnowledgeIndex
    from care.persistence.storage_db import DBConversationStore

    create_db_tables()
    _store = DBConversationStore()
else:
    from care.storage_memory import InMemoryConversationStore
    _store = InMemoryConversationStore()


_llms = {}

# Gemini
if settings.GEMINI_API_KEY:
    from care.llm_gemini import GeminiLLM
    _llms["gemini"] = GeminiLLM(api_key=settings.GEMINI_API_KEY, model=settings.GEMINI_MODEL)

# OpenAI
if settings.OPENAI_API_KEY:
    from care.llm_openai import OpenAILLM
    _llms["openai"] = OpenAILLM(api_key=settings.OPENAI_API_KEY, model=settings.OPENAI_MODEL)

# DeepSeek
if settings.DEEPSEEK_API_KEY:
    from care.llm_deepseek import DeepSeekLLM
    _llms["deepseek"] = DeepSeekLLM(api_key=settings.DEEPSEEK_API_KEY, model=settings.DEEPSEEK_MODEL)

if not _llms:
    from care.llm_dummy import DummyLLM
    logger.warning("No LLM providers configured; replies come from the offline dummy backend. "
                   "Set GEMINI_API_KEY, OPENAI_API_KEY or DEEPSEEK_API_KEY.")
    _llms["dummy"] = DummyLLM()

default_provider = settings.DEFAULT_PROVIDER if settings.DEFAULT_PROVIDER in _llms else next(iter(_llms))
_llm = _llms[default_provider]

_embedder = (OpenAIEmbedder(settings.OPENAI_API_KEY, settings.EMBEDDING_MODEL)
             if settings.OPENAI_API_KEY else HashingEmbedder())
_index = DBKnowledgeIndex(_embedder) if use_db else InMemoryKnowledgeIndex(_embedder)
_translator = PassthroughTranslator() if default_provider == "dummy" else LLMTranslator(_llm)

_service = CareService(
    store=_store,
    generator=ResponseGenerator(_llm),
    retriever=KnowledgeRetriever(_index, _translator),
)


def _turn_out(result) -> TurnOut:
    reply = result.reply
    flow = getattr(reply, "flow", None)
    return TurnOut(
        content=reply.content,
        suggestions=list(reply.suggestions),
        category=reply.category,
        priority=reply.priority,
        conversation_id=result.conversation_id,
        language=result.language,
        flow=FlowStateModel(mode=flow.mode, step=flow.step, answers=dict(flow.answers), status=flow.status) if flow else None,
        action=reply.action if isinstance(reply, ScriptedFlowReply) else None,
        follow_up=result.follow_up,
    )


@app.post("/chat", response_model=TurnOut)
def chat(payload: TurnIn):
    flow = None
    if payload.flow is not None:
        flow = FlowState(mode=payload.flow.mode, step=payload.flow.step,
                         answers=dict(payload.flow.answers), status=payload.flow.status)
    session_id = payload.phone_number if payload.channel == "whatsapp" and payload.phone_number else payload.session_id
    try:
        result = _service.handle(
            payload.message,
            session_id,
            channel=payload.channel,
            user_id=payload.user_id,
            language=payload.language,
            assistant=payload.assistant,
            flow=flow,
        )
    except EmptyMessage as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _turn_out(result)


@app.get("/conversation/{session_id}", response_model=ConversationOut)
def get_conversation(session_id: str, channel: str = "web"):
    msgs = _service.history(session_id, channel, limit=10)
    if not msgs:
        raise HTTPException(status_code=404, detail="conversation not found")
    return ConversationOut(
        session_id=session_id,
        channel=channel,
        messages=[MessageItem(role=m["role"], content=m["content"], metadata=m["metadata"],
                              created_at=m["created_at"]) for m in msgs],
    )


@app.get("/health")
def health():
    storage = "db" if use_db else "memory"
    return {
        "status": "ok",
        "providers": list(_llms.keys()),
        "default": default_provider,
        "storage": storage,
        "persistence_failures": _service.persistence_failures,
    }


@app.get("/whatsapp/webhook", response_class=PlainTextResponse)
def whatsapp_verify(
    mode: str | None = Query(default=None, alias="hub.mode"),
    token: str | None = Query(default=None, alias="hub.verify_token"),
    challenge: str | None = Query(default=None, alias="hub.challenge"),
    ping: str | None = None,
):
    status, body = verify_webhook(mode, token, challenge, settings.WHATSAPP_VERIFY_TOKEN, ping)
    return PlainTextResponse(body, status_code=status)


@app.post("/whatsapp/webhook")
async def whatsapp_inbound(request: Request):
    # always 200: Meta retries on any other status
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("WhatsApp webhook received a non-JSON body")
        return {"ok": True, "processed": 0}

    try:
        inbound_messages = extract_whatsapp_messages(payload)
    except Exception:
        logger.exception("WhatsApp webhook payload could not be parsed")
        return {"ok": True, "processed": 0}

    processed = 0
    for inbound in inbound_messages:
        try:
            result = await run_in_threadpool(_service.handle, inbound.text, inbound.phone, channel="whatsapp")
        except Exception:
            logger.exception(f"WhatsApp turn failed for message {inbound.message_id}")
            continue
        processed += 1
        logger.bind(channel="whatsapp").info(
            f"reply ready for {inbound.phone} kind={type(result.reply).__name__} chars={len(result.reply.content)}"
        )
    return {"ok": True, "processed": processed}

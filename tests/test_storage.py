from concurrent.futures import ThreadPoolExecutor

import pytest

from care.errors import StorageError
from care.persistence.db import make_engine, make_session_factory
from care.persistence.models import Base
from care.persistence.storage_db import DBConversationStore
from care.storage_memory import InMemoryConversationStore, new_context


@pytest.fixture
def db_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'care.db'}")
    Base.metadata.create_all(bind=engine)
    factory = make_session_factory(engine)
    yield factory
    factory.remove()
    engine.dispose()


@pytest.fixture(params=["memory", "db"])
def any_store(request, db_factory):
    if request.param == "memory":
        return InMemoryConversationStore()
    return DBConversationStore(db_factory)


def test_find_or_create_is_idempotent(any_store):
    first = any_store.find_or_create("s1", "web")
    again = any_store.find_or_create("s1", "web")
    assert first["id"] == again["id"]
    assert any_store.find_or_create("s1", "whatsapp")["id"] != first["id"]


def test_messages_come_back_in_append_order(any_store):
    cid = any_store.find_or_create("s1", "web")["id"]
    for i in range(5):
        any_store.append_message(cid, "user" if i % 2 == 0 else "assistant", f"m{i}", {"i": i})
    msgs = any_store.recent_messages(cid, 5)
    assert [m["content"] for m in msgs] == ["m0", "m1", "m2", "m3", "m4"]
    assert msgs[2]["metadata"] == {"i": 2}
    assert [m["content"] for m in any_store.recent_messages(cid, 2)] == ["m3", "m4"]


def test_context_update_replaces_whole_object(any_store):
    cid = any_store.find_or_create("s1", "web")["id"]
    ctx = new_context()
    ctx.update(topics_discussed=["stress"], risk_level="high", session_count=3, language_preference="sw")
    any_store.update_context(cid, ctx, language="sw")
    row = any_store.get("s1", "web")
    assert row["context"] == ctx
    assert row["language"] == "sw"


def test_concurrent_first_turns_share_one_conversation():
    store = InMemoryConversationStore()
    with ThreadPoolExecutor(max_workers=16) as pool:
        ids = set(pool.map(lambda _: store.find_or_create("dup", "web")["id"], range(64)))
    assert len(ids) == 1


class LosesTheRace(DBConversationStore):
    """First lookup misses, as if another worker inserted between select and insert."""

    def __init__(self, factory):
        super().__init__(factory)
        self.lookups = 0

    def _lookup(self, session, session_id, channel):
        self.lookups += 1
        if self.lookups == 1:
            return None
        return super()._lookup(session, session_id, channel)


def test_unique_constraint_resolves_insert_race(db_factory):
    existing = DBConversationStore(db_factory).find_or_create("race", "web")
    racer = LosesTheRace(db_factory)
    assert racer.find_or_create("race", "web")["id"] == existing["id"]
    assert racer.lookups == 2


def test_sqlalchemy_errors_surface_as_storage_error(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    store = DBConversationStore(make_session_factory(engine))
    with pytest.raises(StorageError):
        store.find_or_create("s1", "web")
    engine.dispose()

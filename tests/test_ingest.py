from care.knowledge import HashingEmbedder
from care.persistence.db import make_engine, make_session_factory
from care.persistence.ingest import chunk_text, describe, main, prepare
from care.persistence.knowledge_db import DBKnowledgeIndex
from care.persistence.models import Base


def test_chunks_overlap_and_prefer_paragraph_breaks():
    text = ("a" * 600) + "\n\n" + ("b" * 600)
    chunks = chunk_text(text, size=800, overlap=120)
    assert chunks[0] == "a" * 600
    assert chunks[-1].endswith("b" * 10)
    assert all(len(c) <= 800 for c in chunks)


def test_short_text_is_one_chunk_and_blank_is_none():
    assert chunk_text("hello world") == ["hello world"]
    assert chunk_text("\n\n  ") == []


def test_layout_gives_topic_and_language(tmp_path):
    doc = tmp_path / "stress" / "sw" / "kupumua-kwa-sanduku.md"
    doc.parent.mkdir(parents=True)
    doc.write_text("Vuta pumzi kwa sekunde nne.", encoding="utf-8")
    (tmp_path / "notes.pdf").write_text("skip me", encoding="utf-8")

    info = describe(doc, tmp_path)
    assert (info.topic, info.lang, info.title) == ("stress", "sw", "kupumua kwa sanduku")
    chunks = prepare(tmp_path)
    assert len(chunks) == 1 and chunks[0].language == "sw"


def test_dry_run_writes_nothing(tmp_path):
    (tmp_path / "sleep" / "en").mkdir(parents=True)
    (tmp_path / "sleep" / "en" / "hygiene.md").write_text("Keep a regular bedtime.", encoding="utf-8")
    assert main(["--dir", str(tmp_path), "--dry-run"]) == 0
    assert main(["--dir", str(tmp_path / "missing")]) == 1


def test_db_index_round_trip(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'kb.db'}")
    Base.metadata.create_all(bind=engine)
    index = DBKnowledgeIndex(HashingEmbedder(), make_session_factory(engine))
    (tmp_path / "docs" / "sleep" / "en").mkdir(parents=True)
    (tmp_path / "docs" / "sleep" / "en" / "tips.md").write_text("sleep hygiene at night", encoding="utf-8")
    (tmp_path / "docs" / "grief" / "en").mkdir(parents=True)
    (tmp_path / "docs" / "grief" / "en" / "loss.md").write_text("coping with the loss of a loved one", encoding="utf-8")

    assert index.add(prepare(tmp_path / "docs")) == 2
    found = index.search("trouble sleeping at night", "en", k=1)
    assert found[0].topic == "sleep"
    assert index.search("anything", "sw") == []
    engine.dispose()


def test_db_index_reuses_loaded_embeddings_until_rows_change(tmp_path, monkeypatch):
    from care.knowledge import KnowledgeChunk

    engine = make_engine(f"sqlite:///{tmp_path / 'kb.db'}")
    Base.metadata.create_all(bind=engine)
    index = DBKnowledgeIndex(HashingEmbedder(), make_session_factory(engine))
    index.add([KnowledgeChunk("sleep", "en", "sleep hygiene at night")])

    loads = []
    real_load = index._load
    monkeypatch.setattr(index, "_load", lambda *a: loads.append(a) or real_load(*a))

    assert index.search("sleeping at night", "en")[0].topic == "sleep"
    assert index.search("sleeping at night", "en")[0].topic == "sleep"
    assert len(loads) == 1

    index.add([KnowledgeChunk("grief", "en", "coping with the loss of a loved one")])
    found = index.search("loss of a loved one", "en", k=2)
    assert [c.topic for c in found] == ["grief", "sleep"]
    assert len(loads) == 2
    engine.dispose()

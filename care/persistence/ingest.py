"""Ingest psychoeducation files into the ``care_knowledge`` table.

Layout: ``<dir>/<topic>/<lang>/<file>.md`` (``.mdx`` and ``.txt`` also accepted).
Files outside that layout get topic ``general`` and the ``--lang`` default.

    python -m care.persistence.ingest --dir knowledge/psychoeducation --lang sw --dry-run
"""
import argparse
import re
import sys
from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional

from loguru import logger

from config import settings
from care.knowledge import HashingEmbedder, KnowledgeChunk, OpenAIEmbedder

SUFFIXES = {".md", ".mdx", ".txt"}
LANGS = {"en", "sw"}


class Document(NamedTuple):
    path: Path
    topic: str
    lang: Optional[str]
    title: str


def chunk_text(text: str, size: int = 800, overlap: int = 120) -> List[str]:
    """Fixed-size windows with overlap, cut back to a paragraph break when one is near the end."""
    clean = re.sub(r"\n{3,}", "\n\n", text.replace("\r\n", "\n")).strip()
    chunks: List[str] = []
    i = 0
    while i < len(clean):
        end = min(len(clean), i + size)
        piece = clean[i:end]
        last_break = piece.rfind("\n\n")
        if end < len(clean) and last_break > size * 0.6:
            piece = piece[:last_break + 2]
        if piece.strip():
            chunks.append(piece.strip())
        if end >= len(clean):
            break
        i += max(1, len(piece) - overlap)
    return chunks


def describe(path: Path, root: Path) -> Document:
    parts = path.relative_to(root).parts
    title = re.sub(r"[-_]", " ", path.stem)
    topic, lang = "general", None
    if len(parts) >= 3:
        topic = parts[0]
        if parts[1].lower() in LANGS:
            lang = parts[1].lower()
    elif len(parts) == 2:
        topic = parts[0]
    return Document(path, topic, lang, title)


def iter_documents(root: Path, topic: Optional[str] = None) -> Iterator[Document]:
    for path in sorted(root.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in SUFFIXES:
            continue
        doc = describe(path, root)
        if topic and doc.topic != topic:
            continue
        yield doc


def prepare(root: Path, topic: Optional[str] = None, lang: Optional[str] = None,
            size: int = 800, overlap: int = 120) -> List[KnowledgeChunk]:
    chunks: List[KnowledgeChunk] = []
    for doc in iter_documents(root, topic):
        language = lang or doc.lang or "en"
        for piece in chunk_text(doc.path.read_text(encoding="utf-8"), size, overlap):
            chunks.append(KnowledgeChunk(doc.topic, language, piece, source=doc.title))
    return chunks


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Ingest care knowledge files with embeddings.")
    parser.add_argument("--dir", default="knowledge/psychoeducation")
    parser.add_argument("--topic")
    parser.add_argument("--lang", choices=sorted(LANGS))
    parser.add_argument("--chunk-size", type=int, default=800)
    parser.add_argument("--overlap", type=int, default=120)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)

    root = Path(args.dir).resolve()
    if not root.is_dir():
        logger.error(f"Directory not found: {root}")
        return 1

    chunks = prepare(root, args.topic, args.lang, args.chunk_size, args.overlap)
    if not chunks:
        logger.info("No chunks prepared. Check your --dir/--topic/--lang filters.")
        return 0
    logger.info(f"Prepared {len(chunks)} chunks from {root}")

    if args.dry_run:
        logger.info(f"[DRY RUN] First chunk preview: {chunks[0]}")
        return 0

    from care.persistence.db_setup import create_db_tables
    from care.persistence.knowledge_db import DBKnowledgeIndex

    if settings.OPENAI_API_KEY:
        embedder = OpenAIEmbedder(settings.OPENAI_API_KEY, settings.EMBEDDING_MODEL)
    else:
        logger.warning("OPENAI_API_KEY not set, using local hashing embeddings")
        embedder = HashingEmbedder()

    create_db_tables()
    index = DBKnowledgeIndex(embedder)
    batch = 100
    for i in range(0, len(chunks), batch):
        index.add(chunks[i:i + batch])
        logger.info(f"Inserted {min(i + batch, len(chunks))} / {len(chunks)}")
    logger.info("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

import threading
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from care.errors import RetrievalError
from care.knowledge import KnowledgeChunk, nearest

from .db import SessionLocal
from .models import KnowledgeRow


class _Scope(NamedTuple):
    version: Tuple[int, Optional[int]]  # (row count, max id) when loaded
    rows: List[Tuple[Optional[str], Optional[str], str]]
    matrix: np.ndarray


class DBKnowledgeIndex:
    """Similarity search over ``care_knowledge`` rows.

    Embeddings of a (language, topic) scope are loaded once into a numpy matrix and
    reused until the scope's row count or newest id changes.
    """

    def __init__(self, embedder, session_factory=SessionLocal):
        self.embedder = embedder
        self.Session = session_factory
        self._scopes: Dict[Tuple[str, Optional[str], int], _Scope] = {}
        self._lock = threading.Lock()

    def add(self, chunks: Sequence[KnowledgeChunk], title: Optional[str] = None) -> int:
        vectors = self.embedder.embed([c.text for c in chunks]) if chunks else []
        session = self.Session()
        try:
            for c, vec in zip(chunks, vectors):
                session.add(KnowledgeRow(topic=c.topic, lang=c.language, title=title or c.source,
                                         chunk_text=c.text, embedding=list(vec)))
            session.commit()
            return len(vectors)
        except SQLAlchemyError as e:
            session.rollback()
            raise RetrievalError("failed to store knowledge chunks") from e
        finally:
            session.close()

    @staticmethod
    def _where(language: str, topic: Optional[str]):
        clauses = [KnowledgeRow.lang == language]
        if topic:
            clauses.append(KnowledgeRow.topic == topic)
        return clauses

    def _version(self, language: str, topic: Optional[str]) -> Tuple[int, Optional[int]]:
        session = self.Session()
        try:
            count, newest = session.execute(
                select(func.count(KnowledgeRow.id), func.max(KnowledgeRow.id)).where(*self._where(language, topic))
            ).one()
        except SQLAlchemyError as e:
            raise RetrievalError("knowledge query failed") from e
        finally:
            session.close()
        return int(count or 0), newest

    def _load(self, language: str, topic: Optional[str], dims: int, version) -> _Scope:
        session = self.Session()
        try:
            result = session.execute(
                select(KnowledgeRow.topic, KnowledgeRow.title, KnowledgeRow.chunk_text, KnowledgeRow.embedding)
                .where(*self._where(language, topic))
                .order_by(KnowledgeRow.id)
            ).all()
        except SQLAlchemyError as e:
            raise RetrievalError("knowledge query failed") from e
        finally:
            session.close()
        # rows embedded by a different model cannot be compared with this query
        kept = [r for r in result if r.embedding and len(r.embedding) == dims]
        matrix = np.array([r.embedding for r in kept], dtype=float).reshape(len(kept), dims)
        return _Scope(version, [(r.topic, r.title, r.chunk_text) for r in kept], matrix)

    def search(self, query: str, language: str, topic: Optional[str] = None, k: int = 3) -> List[KnowledgeChunk]:
        version = self._version(language, topic)
        if not version[0]:
            return []
        qvec = self.embedder.embed([query])[0]
        key = (language, topic, len(qvec))
        with self._lock:
            scope = self._scopes.get(key)
        if scope is None or scope.version != version:
            scope = self._load(language, topic, len(qvec), version)
            with self._lock:
                self._scopes[key] = scope
        if not scope.rows:
            return []
        return [
            KnowledgeChunk(scope.rows[i][0], language, scope.rows[i][2], source=scope.rows[i][1], distance=d)
            for i, d in nearest(qvec, scope.matrix, k)
        ]

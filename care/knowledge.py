"""Knowledge chunks, embedders and the in-memory similarity index."""
from dataclasses import dataclass, replace
from typing import List, Optional, Protocol, Sequence, Tuple

import numpy as np
from openai import OpenAI
from sklearn.feature_extraction.text import HashingVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from .errors import RetrievalError


@dataclass(frozen=True)
class KnowledgeChunk:
    topic: Optional[str]
    language: str
    text: str
    embedding: Optional[Sequence[float]] = None
    source: Optional[str] = None
    distance: Optional[float] = None
    translated: bool = False  # machine-translated substitute for missing localized content


class Embedder(Protocol):
    def embed(self, texts: Sequence[str]) -> List[List[float]]: ...


class OpenAIEmbedder:
    def __init__(self, api_key: str, model: str = "text-embedding-3-small"):
        self.client = OpenAI(api_key=api_key)
        self.model = model

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        try:
            resp = self.client.embeddings.create(model=self.model, input=list(texts))
        except Exception as e:
            raise RetrievalError(f"embedding request failed: {e}") from e
        return [list(item.embedding) for item in resp.data]


_TOKEN_PATTERN = r"(?u)\b\w+\b"


class HashingEmbedder:
    """Bag-of-words feature hashing. Needs no network, used offline and in tests."""

    def __init__(self, dims: int = 256):
        self.dims = dims
        self._vectorizer = HashingVectorizer(n_features=dims, alternate_sign=False, norm=None,
                                             token_pattern=_TOKEN_PATTERN)

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        return self._vectorizer.transform([t or "" for t in texts]).toarray().tolist()


def cosine_distances(query: Sequence[float], matrix) -> np.ndarray:
    """1 - cosine similarity of ``query`` against each row of ``matrix``. Zero vectors sit at distance 1."""
    q = np.asarray(query, dtype=float).reshape(1, -1)
    return 1.0 - cosine_similarity(q, np.asarray(matrix, dtype=float))[0]


def nearest(query: Sequence[float], matrix, k: int) -> List[Tuple[int, float]]:
    """Row indices of the ``k`` closest rows with their distances, closest first."""
    distances = cosine_distances(query, matrix)
    order = np.argsort(distances, kind="stable")[:k]
    return [(int(i), float(distances[i])) for i in order]


class InMemoryKnowledgeIndex:
    def __init__(self, embedder: Embedder):
        self.embedder = embedder
        self._chunks: List[KnowledgeChunk] = []

    def add(self, chunks: Sequence[KnowledgeChunk]) -> None:
        missing = [c for c in chunks if c.embedding is None]
        vectors = iter(self.embedder.embed([c.text for c in missing])) if missing else iter(())
        for c in chunks:
            self._chunks.append(c if c.embedding is not None else replace(c, embedding=next(vectors)))

    def search(self, query: str, language: str, topic: Optional[str] = None, k: int = 3) -> List[KnowledgeChunk]:
        candidates = [
            c for c in self._chunks
            if c.language == language and (topic is None or c.topic == topic)
        ]
        if not candidates:
            return []
        qvec = self.embedder.embed([query])[0]
        candidates = [c for c in candidates if len(c.embedding) == len(qvec)]
        if not candidates:
            return []
        matrix = np.array([c.embedding for c in candidates], dtype=float)
        return [replace(candidates[i], distance=d) for i, d in nearest(qvec, matrix, k)]

"""Knowledge retrieval: static FAQ packs first, similarity search for open questions.

Retrieval never fails a turn. Index errors and timeouts degrade to an empty
result and a warning in the log.
"""
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import List, Optional

from loguru import logger

from config import settings

from .knowledge import KnowledgeChunk
from .packs import FAQItem, faqs_for
from .translate import PassthroughTranslator

TRANSLATED_FAQ_LIMIT = 3


def _faq_text(item: FAQItem) -> str:
    return f"• {item.q}\n  {item.a}"


class KnowledgeRetriever:
    def __init__(self, index=None, translator=None,
                 timeout: float = settings.RETRIEVAL_TIMEOUT_SECONDS,
                 top_k: int = settings.RETRIEVAL_TOP_K,
                 source_language: str = "en"):
        self.index = index
        self.translator = translator or PassthroughTranslator()
        self.timeout = timeout
        self.top_k = top_k
        self.source_language = source_language
        self._pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix="retrieval")

    def _bounded(self, what: str, fn, *args) -> List[KnowledgeChunk]:
        """Run ``fn`` on the pool and give up after ``timeout`` seconds; a late result is discarded."""
        future = self._pool.submit(fn, *args)
        try:
            return list(future.result(timeout=self.timeout))
        except FutureTimeout:
            future.cancel()
            logger.warning(f"{what} timed out after {self.timeout}s, continuing without context")
        except Exception as e:
            logger.warning(f"{what} failed, continuing without context: {e}")
        return []

    def _translated_pack(self, topic: str, language: str) -> List[KnowledgeChunk]:
        source_items = faqs_for(topic, self.source_language)[:TRANSLATED_FAQ_LIMIT]
        if not source_items:
            return []
        logger.warning(f"no {language} FAQs for topic={topic}, translating from {self.source_language}")
        try:
            return [
                KnowledgeChunk(topic, language, self.translator.translate(
                    _faq_text(i), target=language, source=self.source_language, hint="therapy", safe=True,
                ), source="pack", translated=True)
                for i in source_items
            ]
        except Exception as e:
            logger.warning(f"FAQ translation failed for topic={topic}: {e}")
            return []

    def _pack(self, topic: str, language: str) -> List[KnowledgeChunk]:
        items = faqs_for(topic, language)
        if items:
            return [KnowledgeChunk(topic, language, _faq_text(i), source="pack") for i in items]
        if language == self.source_language:
            return []
        return self._translated_pack(topic, language)

    def from_pack(self, topic: str, language: str) -> List[KnowledgeChunk]:
        if faqs_for(topic, language) or language == self.source_language:
            return self._pack(topic, language)
        return self._bounded("FAQ translation", self._translated_pack, topic, language)

    def _search(self, query: str, language: str, topic: Optional[str], k: int) -> List[KnowledgeChunk]:
        if topic:
            pack = self._pack(topic, language)
            if pack:
                return pack[:k]
        if self.index is None:
            return []
        return self.index.search(query, language, topic, k)

    def search(self, query: str, language: str, topic: Optional[str] = None,
               k: Optional[int] = None) -> List[KnowledgeChunk]:
        # pack translation and the index share one deadline
        return self._bounded("knowledge search", self._search, query, language, topic, k or self.top_k)

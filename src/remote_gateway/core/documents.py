# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""In-memory document store used by the tool handlers.

Documents live for the lifetime of the process. Search is a linear scan
ranked by how often the query occurs in each document; it stands in for a
real index and is not meant to scale.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .exceptions import ValidationException

SNIPPET_LENGTH = 300


@dataclass
class Document:
    """A stored text document."""

    id: str
    text: str
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "meta": dict(self.meta)}


@dataclass
class SearchHit:
    """A ranked search result."""

    id: str
    score: int
    snippet: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "score": self.score, "snippet": self.snippet}


def count_occurrences(text: str, query: str) -> int:
    """Case-insensitive, non-overlapping count of ``query`` in ``text``.

    The query is matched literally. An empty query never matches.
    """
    if not query:
        return 0
    return text.lower().count(query.lower())


class DocumentStore:
    """Key-value store of documents, safe to share between threads.

    Example:
        store = DocumentStore()
        store.put("d1", "Alpha beta Alpha", {"source": "notes"})
        store.search("alpha", 5)  # [SearchHit(id="d1", score=2, ...)]
    """

    def __init__(self) -> None:
        self._docs: dict[str, Document] = {}
        self._lock = threading.Lock()

    def put(self, doc_id: str, text: str, meta: dict[str, Any] | None = None) -> Document:
        """Insert or overwrite the document stored under ``doc_id``."""
        if not doc_id:
            raise ValidationException("Document id must be non-empty", field="id")
        doc = Document(id=doc_id, text=text, meta=dict(meta or {}))
        with self._lock:
            self._docs[doc_id] = doc
        return doc

    def get(self, ids: Iterable[str]) -> list[Document]:
        """Return the documents found for ``ids``, in request order.

        Missing ids are skipped; callers compare lengths if they care.
        """
        with self._lock:
            return [self._docs[doc_id] for doc_id in ids if doc_id in self._docs]

    def search(self, query: str, limit: int = 5) -> list[SearchHit]:
        """Rank documents by occurrence count of ``query``, highest first.

        Ties keep insertion order (``sorted`` is stable).
        """
        if limit <= 0:
            return []
        with self._lock:
            docs = list(self._docs.values())
        hits = [
            SearchHit(id=doc.id, score=count_occurrences(doc.text, query), snippet=doc.text[:SNIPPET_LENGTH])
            for doc in docs
        ]
        hits.sort(key=lambda hit: hit.score, reverse=True)
        return hits[:limit]

    def __len__(self) -> int:
        with self._lock:
            return len(self._docs)

    def __contains__(self, doc_id: object) -> bool:
        with self._lock:
            return doc_id in self._docs

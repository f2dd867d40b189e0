# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Search tool handler."""

from __future__ import annotations

from remote_gateway.core.documents import DocumentStore

from ..schemas import SearchInput, SearchResult

DEFAULT_TOP_K = 5


def search(params: SearchInput, store: DocumentStore) -> list[SearchResult]:
    """Rank stored documents by how often ``query`` occurs in them."""
    top_k = DEFAULT_TOP_K if params.top_k is None else params.top_k
    return [SearchResult(**hit.to_dict()) for hit in store.search(params.query, top_k)]

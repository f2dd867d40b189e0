# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Gateway tool definitions.

Tool list:
    search      Search stored transcripts and notes; returns ids and snippets
    fetch       Fetch full documents by id
    summarize   Summarize a stored document or direct text
    transcribe  Transcribe an audio URL into a stored document
"""

from __future__ import annotations

from functools import partial

from remote_gateway.core.documents import DocumentStore

from .handlers import fetch, search, summarize, transcribe
from .registry import ToolRegistry
from .schemas import (
    FetchInput,
    FetchOutput,
    SearchInput,
    SearchOutput,
    SummarizeInput,
    SummarizeOutput,
    TranscribeInput,
    TranscribeOutput,
)


def build_registry(store: DocumentStore) -> ToolRegistry:
    """Register the gateway tools against ``store``."""
    registry = ToolRegistry()
    registry.register(
        "search",
        SearchInput,
        SearchOutput,
        partial(search, store=store),
        title="Search",
        description="Search indexed transcripts and notes. Returns ids and snippets.",
    )
    registry.register(
        "fetch",
        FetchInput,
        FetchOutput,
        partial(fetch, store=store),
        title="Fetch",
        description="Fetch full documents by id.",
    )
    registry.register(
        "summarize",
        SummarizeInput,
        SummarizeOutput,
        partial(summarize, store=store),
        title="Summarize",
        description=(
            "Summarize a transcript by id or direct text. Returns a structured summary.\n\n"
            "Use style='actions' to include suggested next actions."
        ),
    )
    registry.register(
        "transcribe",
        TranscribeInput,
        TranscribeOutput,
        partial(transcribe, store=store),
        title="Transcribe",
        description="Transcribe an audio file via an upstream STT. Returns a document id.",
    )
    return registry

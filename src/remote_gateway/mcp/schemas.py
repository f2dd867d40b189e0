# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Request and response models for the gateway tools.

Each tool has one input model and one output type. The registry validates
arguments against the input model and publishes both as JSON Schema in
``tools/list``.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

# ============================================================================
# search
# ============================================================================


class SearchInput(BaseModel):
    query: str = Field(description="Text to look for (case-insensitive)")
    top_k: int | None = Field(default=None, ge=0, description="Maximum number of results (default 5)")


class SearchResult(BaseModel):
    id: str
    score: int
    snippet: str


SearchOutput = list[SearchResult]


# ============================================================================
# fetch
# ============================================================================


class FetchInput(BaseModel):
    ids: list[str] = Field(description="Document ids to fetch")


class FetchedDocument(BaseModel):
    id: str
    text: str
    meta: dict[str, Any] | None = None


FetchOutput = list[FetchedDocument]


# ============================================================================
# summarize
# ============================================================================


class SummarizeInput(BaseModel):
    id: str | None = Field(default=None, description="Stored document id to summarize")
    text: str | None = Field(default=None, description="Text to summarize directly (wins over id)")
    style: Literal["exec", "actions"] | None = Field(default=None, description="Summary style")


class SummarizeOutput(BaseModel):
    bullets: list[str]
    decisions: list[str] | None = None
    next_actions: list[str] | None = None


# ============================================================================
# transcribe
# ============================================================================


class TranscribeInput(BaseModel):
    audio_url: str = Field(description="Public or signed URL to audio")
    upload_id: str | None = Field(default=None, description="Id to store the transcript under")
    meta: dict[str, Any] | None = Field(default=None, description="Metadata stored with the transcript")


class TranscribeOutput(BaseModel):
    id: str
    status: str
    text_preview: str | None = None

# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Summarize tool handler.

Produces an extractive summary: a one-line preview followed by the first
few sentences. There is no model behind it.
"""

from __future__ import annotations

import re

from remote_gateway.core.documents import DocumentStore
from remote_gateway.core.exceptions import NotFoundError, ValidationException

from ..schemas import SummarizeInput, SummarizeOutput

PREVIEW_LENGTH = 120
MAX_SENTENCES = 3

ACTION_ITEMS = [
    "Identify owners and due dates for key items.",
    "Share summary with attendees and track follow-ups.",
]

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
_WHITESPACE = re.compile(r"\s+")


def split_sentences(content: str) -> list[str]:
    """Collapse whitespace, then split after '.', '!' or '?'."""
    collapsed = _WHITESPACE.sub(" ", content)
    return [s.strip() for s in _SENTENCE_BOUNDARY.split(collapsed) if s.strip()]


def _resolve_content(params: SummarizeInput, store: DocumentStore) -> str:
    content = (params.text or "").strip()
    if not content and params.id:
        docs = store.get([params.id])
        if not docs or not docs[0].text:
            raise NotFoundError("Document", params.id)
        content = docs[0].text.strip()
    if not content:
        raise ValidationException("id or text is required", field="text")
    return content


def summarize(params: SummarizeInput, store: DocumentStore) -> SummarizeOutput:
    """Summarize direct ``text``, or the stored document ``id`` when no text is given."""
    content = _resolve_content(params, store)

    first_line = next((line for line in content.split("\n") if line.strip()), content[:PREVIEW_LENGTH])
    preview = first_line[:PREVIEW_LENGTH]

    bullets = [f"Summary preview: {preview}"]
    bullets.extend(f"• {sentence}" for sentence in split_sentences(content)[:MAX_SENTENCES])

    next_actions = list(ACTION_ITEMS) if params.style == "actions" else []
    return SummarizeOutput(bullets=bullets, decisions=[], next_actions=next_actions)

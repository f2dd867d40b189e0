# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Transcribe tool handler.

No speech-to-text backend is wired in yet; the handler stores a placeholder
transcript so the rest of the pipeline (fetch, search, summarize) can be
exercised end to end.
"""

from __future__ import annotations

import logging
import uuid

from remote_gateway.core.documents import DocumentStore
from remote_gateway.core.exceptions import ValidationException

from ..schemas import TranscribeInput, TranscribeOutput

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 120


def placeholder_transcript(audio_url: str) -> str:
    return f"TRANSCRIPT for {audio_url} (no speech-to-text backend configured)"


def transcribe(params: TranscribeInput, store: DocumentStore) -> TranscribeOutput:
    """Store a transcript for ``audio_url`` and return its document id."""
    audio_url = params.audio_url.strip()
    if not audio_url:
        raise ValidationException("audio_url is required", field="audio_url")

    transcript = placeholder_transcript(audio_url)
    doc_id = params.upload_id or str(uuid.uuid4())
    store.put(doc_id, transcript, params.meta or {})
    logger.info(f"Stored transcript {doc_id} for {audio_url}")

    return TranscribeOutput(id=doc_id, status="ok", text_preview=transcript[:PREVIEW_LENGTH])

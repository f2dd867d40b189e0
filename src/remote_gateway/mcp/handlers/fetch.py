# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Fetch tool handler."""

from __future__ import annotations

from remote_gateway.core.documents import DocumentStore

from ..schemas import FetchedDocument, FetchInput


def fetch(params: FetchInput, store: DocumentStore) -> list[FetchedDocument]:
    """Return full documents for the requested ids. Unknown ids are left out."""
    return [FetchedDocument(**doc.to_dict()) for doc in store.get(params.ids)]

# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Tool handler bodies. Each takes validated input and the document store."""

from .fetch import fetch
from .search import search
from .summarize import summarize
from .transcribe import transcribe

__all__ = ["fetch", "search", "summarize", "transcribe"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Upstream backend registry.

Upstreams are external backends the gateway is configured to know about.
They are collected from two sources and merged by simple append:

- ``UPSTREAM_URLS``: comma-separated URLs, labelled ``upstream_1``, ``upstream_2``, ...
- an optional JSON file: ``{"servers": [{"label": "...", "url": "..."}]}``

Duplicates are kept. The registry is read-only once the server has booted.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .exceptions import ConfigException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Upstream:
    """An external backend."""

    label: str
    url: str


class UpstreamRegistry:
    """Ordered collection of configured upstreams."""

    def __init__(self) -> None:
        self._upstreams: list[Upstream] = []

    def load_from_env(self, csv: str) -> int:
        """Append upstreams from a comma-separated URL list.

        Labels are numbered by position among the non-empty entries.

        Returns:
            Number of upstreams added.
        """
        if not csv:
            return 0
        urls = [part.strip() for part in csv.split(",") if part.strip()]
        for i, url in enumerate(urls, start=1):
            self._upstreams.append(Upstream(label=f"upstream_{i}", url=url))
        return len(urls)

    def load_from_file(self, path: str | Path) -> int:
        """Append upstreams from a JSON file. A missing file is not an error.

        Entries without a ``url`` are skipped; ``label`` defaults to the url.

        Returns:
            Number of upstreams added.

        Raises:
            ConfigException: If the file exists but cannot be read or parsed.
        """
        path = Path(path)
        if not path.exists():
            logger.debug(f"Upstream file {path} not found, skipping")
            return 0

        try:
            data: Any = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigException(f"Failed to load upstreams: {e}", path=str(path)) from e

        servers = data.get("servers") if isinstance(data, dict) else None
        if not isinstance(servers, list):
            return 0

        added = 0
        for server in servers:
            if not isinstance(server, dict) or not server.get("url"):
                continue
            url = str(server["url"])
            self._upstreams.append(Upstream(label=str(server.get("label") or url), url=url))
            added += 1
        logger.info(f"Loaded {added} upstreams from {path}")
        return added

    @property
    def upstreams(self) -> list[Upstream]:
        return list(self._upstreams)

    @property
    def labels(self) -> list[str]:
        return [u.label for u in self._upstreams]

    def __len__(self) -> int:
        return len(self._upstreams)


def load_upstreams(csv: str, path: str | Path | None) -> UpstreamRegistry:
    """Build a registry from the environment list, then the optional file.

    A broken file is logged and ignored so the server still boots with the
    environment upstreams.
    """
    registry = UpstreamRegistry()
    registry.load_from_env(csv)
    if path:
        try:
            registry.load_from_file(path)
        except ConfigException as e:
            logger.warning(f"Upstreams file not loaded: {e.message}")
    return registry

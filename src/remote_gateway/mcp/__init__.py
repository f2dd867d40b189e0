# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""MCP tool layer: typed tool registry and the gateway's tools."""

from .registry import ToolOutput, ToolRegistry, ToolSpec, validate
from .tools import build_registry

__all__ = ["ToolOutput", "ToolRegistry", "ToolSpec", "build_registry", "validate"]

"""
inkmatch.tools - Tool registry and the InkMatch tools
"""

from .registry import (
    FieldSpec,
    FieldType,
    InvocationError,
    InvocationErrorKind,
    ToolDescriptor,
    ToolRegistry,
    ToolResult,
)
from .tattoo import build_tool_registry

__all__ = [
    "FieldSpec",
    "FieldType",
    "InvocationError",
    "InvocationErrorKind",
    "ToolDescriptor",
    "ToolRegistry",
    "ToolResult",
    "build_tool_registry",
]

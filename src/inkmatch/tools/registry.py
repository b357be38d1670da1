"""
registry.py - Declarative tool registry

A tool is a frozen `ToolDescriptor`: a name, a declared input shape made of
`FieldSpec`s, display metadata and an async handler. `ToolRegistry.dispatch`
validates raw arguments against the declared shape before the handler runs;
the handler never sees input that violates it.

The registry is populated once per server instance and only read afterwards,
so concurrent dispatches need no locking.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from jsonschema import Draft202012Validator
from pydantic import BaseModel, ConfigDict, Field

from inkmatch.config.logging import get_logger

logger = get_logger("inkmatch.tools")


class FieldType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class FieldSpec:
    """One named input field of a tool."""

    name: str
    type: FieldType = FieldType.STRING
    required: bool = False
    enum: tuple[Any, ...] | None = None
    description: str = ""

    def to_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type.value}
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.description:
            schema["description"] = self.description
        return schema


class ToolResult(BaseModel):
    """Outcome of one tool invocation."""

    model_config = ConfigDict(frozen=True)

    narration: str = Field(..., description="Human-readable summary for the model")
    structured: dict[str, Any] | None = Field(None, description="Machine-consumable fields")
    meta: dict[str, Any] = Field(default_factory=dict)


ToolHandler = Callable[[dict[str, Any]], Awaitable[ToolResult]]


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    handler: ToolHandler
    fields: tuple[FieldSpec, ...] = ()
    title: str = ""
    description: str = ""
    annotations: Mapping[str, Any] = field(default_factory=dict)
    meta: Mapping[str, Any] = field(default_factory=dict)

    @property
    def input_schema(self) -> dict[str, Any]:
        """JSON Schema (object) for the declared input shape."""
        return {
            "type": "object",
            "properties": {f.name: f.to_schema() for f in self.fields},
            "required": [f.name for f in self.fields if f.required],
        }


class InvocationErrorKind(str, Enum):
    VALIDATION = "validation"
    UNKNOWN_TOOL = "unknown_tool"
    HANDLER = "handler"


class InvocationError(Exception):
    """A tool invocation failed before or while running its handler."""

    def __init__(
        self,
        kind: InvocationErrorKind,
        message: str,
        errors: list[str] | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.errors = errors or []


class ToolRegistry:
    """Named tools with validated dispatch."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self._validators: dict[str, Draft202012Validator] = {}

    def register(self, descriptor: ToolDescriptor) -> None:
        """Register a tool. Names are unique."""
        if not descriptor.name:
            raise ValueError("Tool descriptor has no name")
        if descriptor.name in self._tools:
            raise ValueError(f"Tool already registered: {descriptor.name}")
        schema = descriptor.input_schema
        Draft202012Validator.check_schema(schema)
        self._tools[descriptor.name] = descriptor
        self._validators[descriptor.name] = Draft202012Validator(schema)
        logger.debug("Registered tool", tool=descriptor.name)

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def validate(self, name: str, raw_input: Mapping[str, Any] | None) -> dict[str, Any]:
        """Check raw arguments against the tool's declared shape.

        Absent or null optional fields are dropped; fields the tool does not
        declare are ignored.

        Raises:
            InvocationError: unknown tool, or input violating the shape
        """
        descriptor = self._tools.get(name)
        if descriptor is None:
            raise InvocationError(
                InvocationErrorKind.UNKNOWN_TOOL,
                f"Unknown tool: '{name}'. Available: {self.names}",
            )
        if raw_input is not None and not isinstance(raw_input, Mapping):
            raise InvocationError(
                InvocationErrorKind.VALIDATION,
                f"Arguments for '{name}' must be an object",
            )

        declared = {f.name for f in descriptor.fields}
        arguments = {
            k: v for k, v in (raw_input or {}).items() if k in declared and v is not None
        }

        errors = sorted(
            self._validators[name].iter_errors(arguments),
            key=lambda e: list(e.path),
        )
        if errors:
            messages = [
                f"{'.'.join(str(p) for p in e.path) or '<root>'}: {e.message}" for e in errors
            ]
            raise InvocationError(
                InvocationErrorKind.VALIDATION,
                f"Invalid arguments for '{name}': {'; '.join(messages)}",
                errors=messages,
            )
        return arguments

    async def dispatch(self, name: str, raw_input: Mapping[str, Any] | None) -> ToolResult:
        """Validate the input, then run the tool's handler to completion."""
        arguments = self.validate(name, raw_input)
        descriptor = self._tools[name]

        logger.info("Dispatching tool", tool=name, fields=sorted(arguments))
        try:
            return await descriptor.handler(arguments)
        except InvocationError:
            raise
        except Exception as e:
            logger.exception("Tool handler failed", tool=name)
            raise InvocationError(InvocationErrorKind.HANDLER, f"Error executing {name}: {e}") from e


__all__ = [
    "FieldSpec",
    "FieldType",
    "InvocationError",
    "InvocationErrorKind",
    "ToolDescriptor",
    "ToolHandler",
    "ToolRegistry",
    "ToolResult",
]

"""Tool contract: a named capability with a typed parameter schema."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

PropertyType = Literal["string", "number", "integer", "boolean", "array", "object"]
ToolResult = dict[str, Any]
ToolFn = Callable[[dict[str, Any]], Awaitable[ToolResult]]


class StrictModel(BaseModel):
    """Base model for strict schema validation."""

    model_config = ConfigDict(extra="forbid")


class ToolProperty(StrictModel):
    type: PropertyType
    description: str = ""


class ToolParameters(StrictModel):
    type: Literal["object"] = "object"
    properties: dict[str, ToolProperty] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _required_are_declared(self) -> ToolParameters:
        undeclared = [name for name in self.required if name not in self.properties]
        if undeclared:
            raise ValueError(f"required names missing from properties: {undeclared}")
        return self

    def validate_params(self, params: Any) -> str | None:
        """Return the first structural problem with ``params``, or None when valid.

        Only presence of required names and the primitive tags ``string`` and
        ``number`` are checked. Keys the schema does not declare pass through.
        """
        if not isinstance(params, dict):
            return "Parameters must be an object"

        for name in self.required:
            if name not in params:
                return f"Missing required field: {name}"

        for key, value in params.items():
            declared = self.properties.get(key)
            if declared is None:
                continue
            if declared.type == "string" and not isinstance(value, str):
                return f"{key} must be a string"
            if declared.type == "number" and not _is_number(value):
                return f"{key} must be a number"
        return None


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    execute: ToolFn
    parameters: ToolParameters = field(default_factory=ToolParameters)

    def function_schema(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters.model_dump(mode="json"),
            },
        }


def string_params(required: bool = True, **descriptions: str) -> ToolParameters:
    """Build a schema whose properties are all strings."""
    return ToolParameters(
        properties={
            name: ToolProperty(type="string", description=text)
            for name, text in descriptions.items()
        },
        required=list(descriptions) if required else [],
    )


def failure(error: str) -> ToolResult:
    return {"success": False, "error": error}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

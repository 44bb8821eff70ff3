"""Validate tool-call arguments against a tool's JSON Schema.

The schema is compiled once, at registration, into a pydantic model whose
scalar fields are strict (no "5" for an integer, no 1 for a boolean).
Supported keywords: ``type`` (including type lists), ``properties``,
``required``, ``enum``, ``items`` and ``additionalProperties: false``.
Anything else is accepted without checking.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    create_model,
)

from baton.exceptions import SchemaValidationError

_JSON_TO_PYTHON: dict[str, Any] = {
    "string": StrictStr,
    "integer": StrictInt,
    "number": Union[StrictInt, StrictFloat],
    "boolean": StrictBool,
    "object": dict,
    "array": list,
    "null": type(None),
}

# key the message parser uses for argument text that was not valid JSON
_RAW_ARGUMENTS_KEY = "_raw"


def _annotation_for(schema: dict, model_name: str) -> Any:
    if "enum" in schema:
        return Literal[tuple(schema["enum"])]

    json_type = schema.get("type")
    if isinstance(json_type, list):
        members = [_annotation_for({**schema, "type": t}, model_name) for t in json_type]
        return Union[tuple(members)]

    if json_type == "array":
        items = schema.get("items")
        if isinstance(items, dict) and items:
            return list[_annotation_for(items, f"{model_name}Item")]
        return list
    if json_type == "object" and schema.get("properties"):
        return build_model(schema, model_name)
    return _JSON_TO_PYTHON.get(json_type, Any)


def build_model(schema: dict, model_name: str) -> type[BaseModel]:
    """Compile an ``object`` JSON Schema into a pydantic model class.

    Property names are carried as aliases so any JSON key (including ones
    that are not Python identifiers or that shadow BaseModel attributes)
    validates correctly.
    """
    properties: dict[str, dict] = schema.get("properties") or {}
    required = set(schema.get("required") or [])
    extra = "forbid" if schema.get("additionalProperties") is False else "allow"

    fields: dict[str, Any] = {}
    for index, (prop_name, prop_schema) in enumerate(properties.items()):
        annotation = _annotation_for(prop_schema or {}, f"{model_name}_{index}")
        if prop_name in required:
            fields[f"field_{index}"] = (annotation, Field(..., alias=prop_name))
        else:
            fields[f"field_{index}"] = (Optional[annotation], Field(None, alias=prop_name))

    return create_model(
        model_name,
        __config__=ConfigDict(extra=extra),
        **fields,
    )


class ArgumentValidator:
    """Checks argument dicts for one tool.

    Usage::

        validator = ArgumentValidator("get_weather", schema)
        validator.validate({"location": "Paris"})  # raises SchemaValidationError
    """

    def __init__(self, tool_name: str, schema: dict | None) -> None:
        self.tool_name = tool_name
        self._schema = schema or {"type": "object", "properties": {}}
        safe = "".join(ch if ch.isalnum() else "_" for ch in tool_name)
        self._model = build_model(self._schema, f"{safe}_arguments")

    def validate(self, arguments: Any) -> None:
        """Raise SchemaValidationError if ``arguments`` do not match the schema."""
        if not isinstance(arguments, dict):
            raise SchemaValidationError(
                self.tool_name,
                f"Arguments for {self.tool_name} must be a JSON object, "
                f"got {type(arguments).__name__}",
            )
        declared = self._schema.get("properties") or {}
        if _RAW_ARGUMENTS_KEY in arguments and _RAW_ARGUMENTS_KEY not in declared:
            raise SchemaValidationError(
                self.tool_name,
                f"Arguments for {self.tool_name} are not valid JSON: "
                f"{arguments[_RAW_ARGUMENTS_KEY]!r}",
            )
        try:
            self._model.model_validate(arguments)
        except ValidationError as e:
            raise SchemaValidationError(
                self.tool_name,
                f"Invalid arguments for {self.tool_name}: {e}",
            ) from e

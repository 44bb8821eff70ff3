"""Derive JSON Schema tool parameters from a Python function signature.

Reads type hints, docstrings, and parameter defaults so plain functions can
be registered as tools without a hand-written schema.
"""

from __future__ import annotations

import inspect
import types
from typing import Any, Union, get_args, get_origin, get_type_hints

from baton.toolkit.models import CONTEXT_VARIABLES_PARAM

_UNION_ORIGINS = (Union, types.UnionType)

# Mapping from Python types to JSON Schema types
_PYTHON_TO_JSON_SCHEMA: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    dict: "object",
    list: "array",
}


def _python_type_to_json_schema(annotation: Any) -> dict:
    """Convert a Python type annotation to a JSON Schema type descriptor.

    Falls back to {"type": "string"} for unrecognized types.
    """
    if annotation is inspect.Parameter.empty or annotation is None:
        return {"type": "string"}

    if annotation in _PYTHON_TO_JSON_SCHEMA:
        return {"type": _PYTHON_TO_JSON_SCHEMA[annotation]}

    # Optional[X], Union[X, Y], X | None
    if get_origin(annotation) in _UNION_ORIGINS:
        return _union_to_json_schema(get_args(annotation))

    # typing generics (e.g. list[str], dict[str, Any])
    origin = getattr(annotation, "__origin__", None)
    if origin is list:
        args = getattr(annotation, "__args__", ())
        if args and args[0] in _PYTHON_TO_JSON_SCHEMA:
            return {"type": "array", "items": {"type": _PYTHON_TO_JSON_SCHEMA[args[0]]}}
        return {"type": "array"}
    if origin is dict:
        return {"type": "object"}

    return {"type": "string"}


def _union_to_json_schema(members: tuple) -> dict:
    """Collapse union members into one schema with a ``type`` list.

    ``NoneType`` becomes ``"null"``. Extra keywords of the members (such as
    ``items``) are merged into the result.
    """
    json_types: list[str] = []
    merged: dict[str, Any] = {}
    for member in members:
        if member is type(None):
            json_type = "null"
        else:
            member_schema = _python_type_to_json_schema(member)
            json_type = member_schema.pop("type")
            merged.update(member_schema)
        if json_type not in json_types:
            json_types.append(json_type)

    if len(json_types) == 1:
        return {"type": json_types[0], **merged}
    return {"type": json_types, **merged}


def _extract_param_description(docstring: str, param_name: str) -> str:
    """Find ``param_name: text`` inside a Google-style ``Args:`` section."""
    in_args = False
    for line in docstring.split("\n"):
        stripped = line.strip()
        if stripped.lower().startswith("args:"):
            in_args = True
            continue
        if in_args and stripped.endswith(":") and " " not in stripped.rstrip(":"):
            # next section header (Returns:, Raises:, ...)
            in_args = False
            continue
        if in_args and stripped.startswith(f"{param_name}:"):
            return stripped[len(param_name) + 1 :].strip()
    return ""


def describe_function(func: Any) -> str:
    """First docstring line, or a generic sentence naming the function."""
    docstring = inspect.getdoc(func) or ""
    if docstring:
        return docstring.split("\n")[0].strip()
    return f"Call {func.__name__}."


def function_to_parameters(func: Any) -> dict:
    """Build a JSON Schema ``object`` describing ``func``'s parameters.

    ``self``, ``*args``, ``**kwargs`` and ``context_variables`` are skipped.
    Parameters without defaults are required.

    Returns:
        A dict like::

            {
                "type": "object",
                "properties": {"location": {"type": "string"}},
                "required": ["location"],
            }
    """
    sig = inspect.signature(func)
    docstring = inspect.getdoc(func) or ""
    try:
        hints = get_type_hints(func)
    except Exception:
        hints = {}

    properties: dict[str, Any] = {}
    required: list[str] = []

    for param_name, param in sig.parameters.items():
        if param_name in ("self", CONTEXT_VARIABLES_PARAM):
            continue
        if param.kind in (
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        ):
            continue

        prop = _python_type_to_json_schema(hints.get(param_name, param.annotation))
        param_desc = _extract_param_description(docstring, param_name)
        if param_desc:
            prop["description"] = param_desc
        properties[param_name] = prop

        if param.default is inspect.Parameter.empty:
            required.append(param_name)

    parameters: dict[str, Any] = {
        "type": "object",
        "properties": properties,
    }
    if required:
        parameters["required"] = required
    return parameters

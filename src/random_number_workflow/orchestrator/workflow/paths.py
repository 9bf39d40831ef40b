"""Reference paths over the workflow payload.

Supported forms:
- ``$`` (the whole payload) and ``$.a.b`` (nested object fields)
- ``$$.State.EnteredTime`` style paths into the execution context
- ``States.JsonToString(<path>)`` as an intrinsic expression
- parameter templates where keys ending in ``.$`` hold a path
"""

from __future__ import annotations

import copy
import json
import re
from collections.abc import Mapping

_INTRINSIC_RE = re.compile(r"^States\.JsonToString\((?P<path>[^)]+)\)$")


class InvalidPathError(ValueError):
    pass


class PathNotFoundError(LookupError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Path not found: {path}")
        self.path = path


def _split(path: str) -> tuple[str, list[str]]:
    if path.startswith("$$"):
        root, rest = "$$", path[2:]
    elif path.startswith("$"):
        root, rest = "$", path[1:]
    else:
        raise InvalidPathError(f"Path must start with '$': {path!r}")

    if not rest:
        return root, []
    if not rest.startswith("."):
        raise InvalidPathError(f"Malformed path: {path!r}")
    parts = rest[1:].split(".")
    if any(not p for p in parts):
        raise InvalidPathError(f"Malformed path: {path!r}")
    return root, parts


def resolve_path(
    data: object, path: str, *, context: Mapping[str, object] | None = None
) -> object:
    """Return the value at ``path``.

    Raises:
        PathNotFoundError: if a segment is missing or traverses a non-object.
    """

    root, parts = _split(path)
    current: object = data
    if root == "$$":
        if context is None:
            raise PathNotFoundError(path)
        current = context

    for part in parts:
        if not isinstance(current, Mapping) or part not in current:
            raise PathNotFoundError(path)
        current = current[part]
    return current


def evaluate_expression(
    expression: str, data: object, *, context: Mapping[str, object] | None = None
) -> object:
    """Evaluate a path or a ``States.JsonToString`` intrinsic."""

    match = _INTRINSIC_RE.match(expression.strip())
    if match is None:
        return resolve_path(data, expression, context=context)
    value = resolve_path(data, match.group("path").strip(), context=context)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def apply_parameters(
    template: Mapping[str, object],
    data: object,
    *,
    context: Mapping[str, object] | None = None,
) -> dict[str, object]:
    out: dict[str, object] = {}
    for key, value in template.items():
        if key.endswith(".$"):
            if not isinstance(value, str):
                raise InvalidPathError(f"Parameter {key!r} must hold a path string")
            out[key[:-2]] = copy.deepcopy(evaluate_expression(value, data, context=context))
        elif isinstance(value, Mapping):
            out[key] = apply_parameters(value, data, context=context)
        else:
            out[key] = copy.deepcopy(value)
    return out


def place_result(data: object, result: object, result_path: str | None) -> object:
    """Combine a state result with its input according to ``result_path``.

    ``None`` discards the result and keeps the input, ``$`` replaces the input,
    and ``$.a.b`` writes the result into a copy of the input.
    """

    if result_path is None:
        return data
    root, parts = _split(result_path)
    if root != "$":
        raise InvalidPathError(f"Result path cannot target the context: {result_path!r}")
    if not parts:
        return result

    if not isinstance(data, Mapping):
        raise InvalidPathError(f"Cannot place a result into a non-object input: {result_path!r}")
    out: dict[str, object] = copy.deepcopy(dict(data))
    cursor = out
    for part in parts[:-1]:
        nxt = cursor.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            cursor[part] = nxt
        cursor = nxt
    cursor[parts[-1]] = result
    return out

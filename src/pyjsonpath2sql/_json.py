"""JSON text encoding of operands and SQL/JSON path rendering."""

from __future__ import annotations

import datetime
import json
import re
import uuid
from collections.abc import Sequence
from typing import Any

from pyjsonpath2sql._errors import ERR_MSG_UNSUPPORTED_TYPE, UnsupportedTypeError
from pyjsonpath2sql._operand import JSON_NULL, NullMarker
from pyjsonpath2sql._path import Index, Member, PathSegment

# Member names written without quotes inside a $-path
_PLAIN_PATH_MEMBER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def _default(value: Any) -> Any:
    if isinstance(value, NullMarker):
        if value is JSON_NULL:
            return None
        raise UnsupportedTypeError(
            ERR_MSG_UNSUPPORTED_TYPE,
            "SQL_NULL cannot appear inside a JSON document; use None or JSON_NULL",
        )
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def stringify(value: Any) -> str:
    """Encode a literal operand as compact, strict JSON text.

    ``None`` anywhere inside a composite value encodes as JSON ``null``.

    Raises:
        UnsupportedTypeError: If the value cannot be encoded.
    """
    if value is JSON_NULL:
        return "null"
    try:
        return json.dumps(
            value,
            default=_default,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        )
    except (TypeError, ValueError) as e:
        raise UnsupportedTypeError(
            ERR_MSG_UNSUPPORTED_TYPE,
            f"cannot encode {type(value).__name__} value as JSON: {e}",
            wrapped=e,
        ) from e


def is_composite(value: Any) -> bool:
    """Whether the literal encodes as a JSON object or array."""
    if isinstance(value, (str, bytes)):
        return False
    return isinstance(value, (dict, Sequence, set, frozenset))


def to_json_path(segments: Sequence[PathSegment]) -> str:
    """Render segments as a ``$``-rooted SQL/JSON path, e.g. ``$.a."b.c"[0]``."""
    parts = ["$"]
    for seg in segments:
        if isinstance(seg, Index):
            parts.append(f"[{seg.n}]")
        elif _PLAIN_PATH_MEMBER_RE.match(seg.name):
            parts.append(f".{seg.name}")
        else:
            escaped = seg.name.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'."{escaped}"')
    return "".join(parts)


def path_array(segments: Sequence[PathSegment]) -> list[str]:
    """Segments as text steps for path-array operators (``#>``)."""
    return [seg.name if isinstance(seg, Member) else str(seg.n) for seg in segments]

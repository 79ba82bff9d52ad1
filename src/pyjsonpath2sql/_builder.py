"""Build ParsedPath values from key parse trees and flatten nested conditions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from lark import Token, Transformer

from pyjsonpath2sql._constants import DEFAULT_MAX_NESTING_DEPTH
from pyjsonpath2sql._errors import (
    ERR_MSG_MALFORMED_PATH,
    MalformedPathError,
    MaxDepthExceededError,
)
from pyjsonpath2sql._lexer import parse_tree
from pyjsonpath2sql._operators import Op
from pyjsonpath2sql._path import AttributeKey, Index, Member, ParsedPath, PathSegment

logger = logging.getLogger(__name__)

# Cast tags known across the supported dialects. Tags outside this
# vocabulary are passed through; the dialect's cast table has the final say.
KNOWN_CAST_TAGS: frozenset[str] = frozenset({
    "bigint", "binary", "bit", "blob", "bool", "boolean", "char", "date",
    "datetime", "datetime2", "decimal", "double", "float", "float4",
    "float8", "hugeint", "int", "int2", "int4", "int8", "integer", "json",
    "jsonb", "money", "nchar", "numeric", "nvarchar", "real", "signed",
    "smallint", "text", "time", "timestamp", "timestamptz", "tinyint",
    "uniqueidentifier", "unsigned", "uuid", "varchar", "year",
})


def cast_base(tag: str) -> str:
    """Lowercase type name without its ``(precision, scale)`` suffix."""
    return tag.split("(", 1)[0].lower()


def _unescape_quoted(text: str) -> str:
    body = text[1:-1]
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\":
            i += 1
            ch = body[i]
        out.append(ch)
        i += 1
    return "".join(out)


class _PathTransformer(Transformer):
    """Turns a key parse tree into ``(attribute, segments, modifier tokens)``."""

    def member(self, children: list[Token]) -> Member:
        tok = children[0]
        if tok.type == "QUOTED":
            return Member(_unescape_quoted(str(tok)))
        return Member(str(tok))

    def step(self, children: list[Any]) -> PathSegment:
        child = children[0]
        if isinstance(child, Token):
            return Index(int(child[1:-1]))
        return child

    head = step

    def modifier(self, children: list[Token]) -> Token:
        return children[0]

    def attribute_key(self, children: list[Any]) -> tuple[str, list[Any]]:
        return str(children[0]), children[1:]

    def sub_key(self, children: list[Any]) -> tuple[str, list[Any]]:
        return "", children


_transformer = _PathTransformer()


def _assemble(key: str, parts: list[Any]) -> ParsedPath:
    segments: list[PathSegment] = []
    cast: str | None = None
    unquote = False
    for part in parts:
        if not isinstance(part, Token):
            segments.append(part)
        elif part.type == "CAST":
            if cast is not None:
                raise MalformedPathError(
                    ERR_MSG_MALFORMED_PATH,
                    f"duplicate cast modifier in key {key!r}",
                )
            cast = str(part)[2:]
        else:
            if unquote:
                raise MalformedPathError(
                    ERR_MSG_MALFORMED_PATH,
                    f"duplicate unquote modifier in key {key!r}",
                )
            unquote = True

    if cast is not None and cast_base(cast) not in KNOWN_CAST_TAGS:
        logger.warning("cast type %r is not a known type tag; deferring to dialect", cast)

    return ParsedPath(tuple(segments), cast=cast, unquote=unquote)


def parse_key(key: str) -> AttributeKey:
    """Parse a flat attribute key such as ``gameData.passwords[0]``.

    The first identifier names the JSON column; the rest is the path into
    its document.

    Raises:
        MalformedPathError: If the key does not follow the key grammar.
    """
    attribute, parts = _transformer.transform(parse_tree(key))
    result = AttributeKey(attribute, _assemble(key, parts))
    logger.debug("parsed key %r -> %s %r", key, attribute, result.path)
    return result


def parse_path(sub_key: str) -> ParsedPath:
    """Parse a nested-object sub-key such as ``address.country`` or ``[0]``.

    Raises:
        MalformedPathError: If the sub-key does not follow the key grammar.
    """
    _, parts = _transformer.transform(parse_tree(sub_key, sub_key=True))
    return _assemble(sub_key, parts)


@dataclass(frozen=True)
class Condition:
    """One leaf of a flattened condition: a path, an operator and its operand."""

    key: AttributeKey
    operator: Op
    value: Any


def flatten(
    key: str | AttributeKey,
    value: Any,
    *,
    max_depth: int = DEFAULT_MAX_NESTING_DEPTH,
) -> list[Condition]:
    """Desugar a flat or nested-object condition into leaf conditions.

    String keys of a mapping are sub-keys extending the current path; ``Op``
    keys are operators applied to the current path. Any other value is an
    equality operand. The caller combines the returned leaves with AND.

    Raises:
        MalformedPathError: If a sub-key is malformed, a mapping is empty, or
            a modifier is placed on a key that is not a leaf.
        MaxDepthExceededError: If nesting exceeds ``max_depth``.
    """
    root = key if isinstance(key, AttributeKey) else parse_key(key)
    out: list[Condition] = []
    _flatten_into(out, root, value, 0, max_depth)
    logger.debug("flattened %s into %d condition(s)", root, len(out))
    return out


def _flatten_into(
    out: list[Condition],
    base: AttributeKey,
    value: Any,
    depth: int,
    max_depth: int,
) -> None:
    if depth > max_depth:
        raise MaxDepthExceededError(
            "maximum nesting depth exceeded",
            f"depth {depth} exceeds limit {max_depth} under {base}",
        )

    if not isinstance(value, Mapping):
        out.append(Condition(base, Op.EQ, value))
        return

    if not value:
        raise MalformedPathError(
            ERR_MSG_MALFORMED_PATH,
            f"empty nested condition under {base}",
        )

    for sub, operand in value.items():
        if isinstance(sub, Op):
            out.append(Condition(base, sub, operand))
        elif isinstance(sub, str):
            if base.path.has_modifiers:
                raise MalformedPathError(
                    ERR_MSG_MALFORMED_PATH,
                    f"modifiers must appear at the end of the key: {base} "
                    f"is followed by {sub!r}",
                )
            _flatten_into(out, base.extend(parse_path(sub)), operand, depth + 1, max_depth)
        else:
            raise MalformedPathError(
                ERR_MSG_MALFORMED_PATH,
                f"nested keys must be strings or Op members, got {type(sub).__name__}",
            )

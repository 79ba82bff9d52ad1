"""Lark grammar and tokenizer for JSON attribute keys.

Grammar summary::

    jsonAttribute.address."street.name"[0]::integer:unquote
    ^ column      ^ member ^ quoted     ^ index ^ cast  ^ unquote

Modifiers may only follow the last segment, in either order, at most once
each. Nested-object sub-keys use the ``sub_key`` start rule, which also
allows a leading ``[n]``.
"""

from __future__ import annotations

from lark import Lark, Token
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from pyjsonpath2sql._constants import MAX_KEY_LENGTH
from pyjsonpath2sql._errors import ERR_MSG_MALFORMED_PATH, MalformedPathError

KEY_GRAMMAR = r"""
attribute_key: IDENTIFIER step* modifier*
sub_key: head step* modifier*

head: member | INDEX
step: "." member | INDEX
member: IDENTIFIER | QUOTED
modifier: CAST | UNQUOTE

IDENTIFIER: /[A-Za-z0-9_$\-]+/
QUOTED: /"(?:[^"\\]|\\["\\])*"/
INDEX: /\[[0-9]+\]/
CAST: /::[A-Za-z][A-Za-z0-9_]*(?:\([0-9]+(?:,[0-9]+)?\))?/
UNQUOTE: ":unquote"
"""

MODIFIER_TOKENS = {"CAST", "UNQUOTE"}

_parser = Lark(
    KEY_GRAMMAR,
    parser="lalr",
    lexer="basic",
    start=["attribute_key", "sub_key"],
)


def tokenize(key: str, *, sub_key: bool = False) -> list[Token]:
    """Split a raw key into its token stream.

    Only a nested-object sub-key (``sub_key=True``) may start with ``[n]``.

    Raises:
        MalformedPathError: If the key contains characters outside the grammar
            or starts with an index where a column name is required.
    """
    _check_length(key)
    try:
        tokens = list(_parser.lex(key))
    except UnexpectedInput as e:
        raise translate_error(key, e) from e
    if not sub_key and tokens and tokens[0].type == "INDEX":
        raise MalformedPathError(
            ERR_MSG_MALFORMED_PATH,
            f"key cannot start with {tokens[0].value!r} at position 0 in key {key!r}",
        )
    return tokens


def parse_tree(key: str, *, sub_key: bool = False):
    """Parse a raw key into a Lark tree using the matching start rule."""
    _check_length(key)
    start = "sub_key" if sub_key else "attribute_key"
    try:
        return _parser.parse(key, start=start)
    except UnexpectedInput as e:
        raise translate_error(key, e) from e


def _check_length(key: str) -> None:
    if len(key) > MAX_KEY_LENGTH:
        raise MalformedPathError(
            ERR_MSG_MALFORMED_PATH,
            f"key length {len(key)} exceeds limit {MAX_KEY_LENGTH}",
        )


def translate_error(key: str, exc: UnexpectedInput) -> MalformedPathError:
    """Map a Lark lexing or parsing failure onto a MalformedPathError."""
    if isinstance(exc, UnexpectedCharacters):
        pos = exc.pos_in_stream
        char = key[pos]
        if char == '"':
            reason = "unterminated or malformed quoted segment"
        elif char == "[":
            reason = "array index must be a non-negative integer"
        elif char == ":":
            reason = "unknown modifier; expected '::type' or ':unquote'"
        else:
            reason = f"invalid character {char!r}; quote the segment to use it"
        return MalformedPathError(
            ERR_MSG_MALFORMED_PATH,
            f"{reason} at position {pos} in key {key!r}",
            wrapped=exc,
        )

    if isinstance(exc, UnexpectedToken) and exc.token.type != "$END":
        pos = exc.token.start_pos
        if _follows_modifier(key, pos):
            reason = "modifiers must appear at the end of the key"
        elif pos == 0:
            reason = f"key cannot start with {exc.token.value!r}"
        else:
            reason = f"unexpected {exc.token.value!r}"
        return MalformedPathError(
            ERR_MSG_MALFORMED_PATH,
            f"{reason} at position {pos} in key {key!r}",
            wrapped=exc,
        )

    if isinstance(exc, (UnexpectedToken, UnexpectedEOF)):
        reason = "empty key" if not key else "unexpected end of key"
        return MalformedPathError(
            ERR_MSG_MALFORMED_PATH,
            f"{reason}: {key!r}",
            wrapped=exc,
        )

    return MalformedPathError(
        ERR_MSG_MALFORMED_PATH, f"cannot parse key {key!r}", wrapped=exc
    )


def _follows_modifier(key: str, pos: int) -> bool:
    """Whether the token starting at ``pos`` comes after a modifier token."""
    previous: Token | None = None
    for tok in _parser.lex(key[:pos]):
        previous = tok
    return previous is not None and previous.type in MODIFIER_TOKENS

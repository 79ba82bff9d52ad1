"""Typed representation of a parsed JSON attribute key."""

from __future__ import annotations

import re
from dataclasses import dataclass

# Member names that can be written without quotes in the flat key form
_BARE_MEMBER_RE = re.compile(r"^[A-Za-z0-9_$\-]+$")


@dataclass(frozen=True)
class Member:
    """Object property access. ``name`` is the unescaped property name."""

    name: str

    def to_key(self, leading: bool = False) -> str:
        text = self.name if _BARE_MEMBER_RE.match(self.name) else quote_member(self.name)
        return text if leading else f".{text}"


@dataclass(frozen=True)
class Index:
    """Array element access by non-negative position."""

    n: int

    def to_key(self, leading: bool = False) -> str:
        return f"[{self.n}]"


PathSegment = Member | Index


def quote_member(name: str) -> str:
    """Quote a member name for the flat key form."""
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass(frozen=True)
class ParsedPath:
    """Ordered traversal into a JSON document plus terminal modifiers.

    An empty ``segments`` tuple denotes the column itself. ``cast`` and
    ``unquote`` apply to the value the whole path resolves to.
    """

    segments: tuple[PathSegment, ...] = ()
    cast: str | None = None
    unquote: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.segments

    @property
    def has_modifiers(self) -> bool:
        return self.cast is not None or self.unquote

    def modifiers_key(self) -> str:
        text = ""
        if self.cast is not None:
            text += f"::{self.cast}"
        if self.unquote:
            text += ":unquote"
        return text

    def to_key(self) -> str:
        """Render the path in the nested-object sub-key form."""
        parts = [
            seg.to_key(leading=i == 0) for i, seg in enumerate(self.segments)
        ]
        return "".join(parts) + self.modifiers_key()

    def __str__(self) -> str:
        return self.to_key()


@dataclass(frozen=True)
class AttributeKey:
    """A JSON column name together with the path into its document."""

    attribute: str
    path: ParsedPath = ParsedPath()

    def extend(self, child: ParsedPath) -> AttributeKey:
        """Append a nested sub-key's path; its modifiers become terminal."""
        return AttributeKey(
            self.attribute,
            ParsedPath(
                self.path.segments + child.segments,
                cast=child.cast,
                unquote=child.unquote,
            ),
        )

    def to_key(self) -> str:
        """Render back to the flat dotted/bracketed surface form."""
        segments = "".join(seg.to_key() for seg in self.path.segments)
        return f"{self.attribute}{segments}{self.path.modifiers_key()}"

    def __str__(self) -> str:
        return self.to_key()

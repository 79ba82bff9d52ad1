"""Comparison operators accepted on JSON attribute paths."""

from __future__ import annotations

import enum


class Op(enum.StrEnum):
    """Operators usable as keys of an operator object, e.g. ``{Op.GT: 5}``."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IS = "is"
    IS_NOT = "is_not"
    IN = "in"
    NOT_IN = "not_in"
    CONTAINS = "contains"
    CONTAINED = "contained"
    HAS_KEY = "has_key"
    HAS_ANY_KEYS = "has_any_keys"
    HAS_ALL_KEYS = "has_all_keys"


# Op -> SQL comparison operator
COMPARISON_OPERATORS: dict[Op, str] = {
    Op.EQ: "=",
    Op.NE: "!=",
    Op.GT: ">",
    Op.GTE: ">=",
    Op.LT: "<",
    Op.LTE: "<=",
}

# Operators meaning "is absent"; their operand is always SQL NULL
IS_OPERATORS = {Op.IS, Op.IS_NOT}

# Operators that can be applied to a null operand
NULL_AWARE_OPS = {Op.EQ, Op.NE, Op.IS, Op.IS_NOT}

# Operators producing the negated form of a null test
NEGATED_OPS = {Op.NE, Op.IS_NOT}

MEMBERSHIP_OPERATORS = {Op.IN, Op.NOT_IN}

CONTAINMENT_OPERATORS = {Op.CONTAINS, Op.CONTAINED}

KEY_EXISTENCE_OPERATORS = {Op.HAS_KEY, Op.HAS_ANY_KEYS, Op.HAS_ALL_KEYS}

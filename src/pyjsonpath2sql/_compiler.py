"""Core Compiler class - turns flattened JSON path conditions into SQL."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from io import StringIO
from typing import Any

from pyjsonpath2sql._builder import Condition, cast_base
from pyjsonpath2sql._constants import DEFAULT_MAX_NESTING_DEPTH
from pyjsonpath2sql._errors import (
    ERR_MSG_INVALID_CAST,
    ERR_MSG_INVALID_OPERATOR,
    ERR_MSG_UNSUPPORTED_CAPABILITY,
    InvalidCastTargetError,
    InvalidOperatorError,
    UnsupportedCapabilityError,
)
from pyjsonpath2sql._json import is_composite, stringify
from pyjsonpath2sql._operand import (
    And,
    Combined,
    JsonNull,
    Literal,
    NullMarker,
    NullMode,
    Or,
    ResolvedOperand,
    SqlNull,
    resolve_operand,
)
from pyjsonpath2sql._operators import (
    COMPARISON_OPERATORS,
    CONTAINMENT_OPERATORS,
    KEY_EXISTENCE_OPERATORS,
    MEMBERSHIP_OPERATORS,
    NEGATED_OPS,
    NULL_AWARE_OPS,
    Op,
)
from pyjsonpath2sql._path import AttributeKey, ParsedPath
from pyjsonpath2sql._utils import validate_field_name
from pyjsonpath2sql.dialect import POSTGRES, Dialect, KeyMatch, WriteFunc, syntax_for
from pyjsonpath2sql.dialect._base import write_joined
from pyjsonpath2sql.schema import ColumnType

logger = logging.getLogger(__name__)

_KEY_MATCH: dict[Op, KeyMatch] = {
    Op.HAS_KEY: KeyMatch.ONE,
    Op.HAS_ANY_KEYS: KeyMatch.ANY,
    Op.HAS_ALL_KEYS: KeyMatch.ALL,
}

ParamFactory = Callable[[Any], WriteFunc]


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # NaN and infinities fall through to stringify, which rejects them
    return isinstance(value, int) or math.isfinite(value)


@dataclass(frozen=True)
class CompileContext:
    """Immutable configuration threaded through one compilation."""

    dialect: Dialect = POSTGRES
    null_mode: NullMode = NullMode.SQL
    column_type: ColumnType | None = None
    table: str | None = None
    max_depth: int = DEFAULT_MAX_NESTING_DEPTH

    def resolved_column_type(self) -> ColumnType:
        caps = self.dialect.capabilities
        if self.column_type is None:
            return ColumnType.JSONB if caps.binary_json_type else ColumnType.JSON
        column_type = ColumnType(self.column_type)
        if column_type is ColumnType.JSONB and not caps.binary_json_type:
            raise UnsupportedCapabilityError(
                ERR_MSG_UNSUPPORTED_CAPABILITY,
                f"dialect '{self.dialect}' has no binary JSON column type",
            )
        return column_type


class Compiler:
    """Writes SQL predicates or assignment values for one JSON column."""

    def __init__(self, context: CompileContext, param_start: int = 1) -> None:
        self._w = StringIO()
        self._ctx = context
        self._dialect = context.dialect
        self._caps = context.dialect.capabilities
        self._syntax = syntax_for(context.dialect)
        self._null_mode = NullMode(context.null_mode)
        self._column_type = context.resolved_column_type()
        self._param_start = param_start
        self._parameters: list[Any] = []

    @property
    def result(self) -> str:
        return self._w.getvalue()

    @property
    def parameters(self) -> list[Any]:
        return self._parameters

    def _add_param(self, value: Any) -> int:
        """Add a parameter and return its placeholder index."""
        self._parameters.append(value)
        return self._param_start + len(self._parameters) - 1

    def _param_writer(self, value: Any) -> WriteFunc:
        """Callback that binds ``value`` when its placeholder is written."""
        def write() -> None:
            self._syntax.write_param_placeholder(self._w, self._add_param(value))
        return write

    def _column_writer(self, attribute: str) -> WriteFunc:
        max_length = self._caps.max_identifier_length
        validate_field_name(attribute, max_length)
        text = self._syntax.quote_identifier(attribute)
        if self._ctx.table is not None:
            validate_field_name(self._ctx.table, max_length)
            text = f"{self._syntax.quote_identifier(self._ctx.table)}.{text}"
        return lambda: self._w.write(text)

    def _require(self, supported: bool, feature: str) -> None:
        if not supported:
            raise UnsupportedCapabilityError(
                ERR_MSG_UNSUPPORTED_CAPABILITY,
                f"dialect '{self._dialect}' does not support {feature}",
            )
        if self._caps.operators_require_binary and self._column_type is not ColumnType.JSONB:
            raise UnsupportedCapabilityError(
                ERR_MSG_UNSUPPORTED_CAPABILITY,
                f"{feature} requires a jsonb column on dialect '{self._dialect}'",
            )

    # ---- Conditions ----

    def compile_conditions(self, conditions: Sequence[Condition]) -> None:
        """Write all conditions joined with AND."""
        for i, condition in enumerate(conditions):
            if i:
                self._w.write(" AND ")
            self.compile_condition(condition)
        logger.debug(
            "compiled %d condition(s) for dialect %s: %s",
            len(conditions), self._dialect, self.result,
        )

    def compile_condition(self, condition: Condition) -> None:
        operand = resolve_operand(
            condition.value,
            operator=condition.operator,
            null_mode=self._null_mode,
        )
        self._write_predicate(condition.key, condition.operator, operand)

    def _write_predicate(self, key: AttributeKey, op: Op, operand: ResolvedOperand) -> None:
        if isinstance(operand, Combined):
            self._w.write("(")
            for i, item in enumerate(operand.operands):
                if i:
                    self._w.write(f" {operand.kind} ")
                self._write_predicate(key, op, item)
            self._w.write(")")
            return
        if isinstance(operand, (SqlNull, JsonNull)):
            self._write_null_predicate(key, op, operand)
            return
        self._write_literal_predicate(key, op, operand.value)

    # ---- Null operands ----

    def _write_null_predicate(
        self, key: AttributeKey, op: Op, operand: SqlNull | JsonNull
    ) -> None:
        if op not in NULL_AWARE_OPS:
            raise InvalidOperatorError(
                ERR_MSG_INVALID_OPERATOR,
                f"operator {op.value!r} cannot be used with a null operand on {key}",
            )
        if key.path.has_modifiers:
            # Unquoting or casting turns JSON null into SQL NULL
            logger.debug("null test on %s ignores cast/unquote modifiers", key)

        write_column = self._column_writer(key.attribute)
        negate = op in NEGATED_OPS
        segments = key.path.segments
        if isinstance(operand, SqlNull):
            self._syntax.write_sql_null_test(self._w, write_column, segments, negate)
        else:
            self._syntax.write_json_null_test(
                self._w,
                write_column,
                segments,
                negate,
                self._param_writer("null"),
                self._column_type,
            )

    # ---- Literal operands ----

    def _write_literal_predicate(self, key: AttributeKey, op: Op, value: Any) -> None:
        if op in KEY_EXISTENCE_OPERATORS:
            self._write_key_existence(key, op, value)
            return
        if op in CONTAINMENT_OPERATORS:
            self._write_containment(key, op, value)
            return

        if op in MEMBERSHIP_OPERATORS:
            values = self._membership_values(key, op, value)
            if self._compares_numbers(key, values):
                self._write_number_predicate(key, op, values)
                return
            write_lhs, param_for, json_typed = self._comparison_sides(key, values)
            if json_typed and not self._caps.json_in_list:
                self._write_equality_chain(write_lhs, param_for, values, op is Op.NOT_IN)
                return
            write_lhs()
            self._w.write(" NOT IN (" if op is Op.NOT_IN else " IN (")
            for i, item in enumerate(values):
                if i:
                    self._w.write(", ")
                param_for(item)()
            self._w.write(")")
            return

        sql_op = COMPARISON_OPERATORS.get(op)
        if sql_op is None:
            raise InvalidOperatorError(
                ERR_MSG_INVALID_OPERATOR,
                f"unsupported operator {op!r} on {key}",
            )
        if self._compares_numbers(key, [value]):
            self._write_number_predicate(key, op, [value])
            return
        write_lhs, param_for, _ = self._comparison_sides(key, [value])
        write_lhs()
        self._w.write(f" {sql_op} ")
        param_for(value)()

    def _comparison_sides(
        self, key: AttributeKey, values: Sequence[Any]
    ) -> tuple[WriteFunc, ParamFactory, bool]:
        """Choose the extraction form and parameter encoding for a comparison.

        The flag is true when both sides are compared as JSON documents.
        """
        w = self._w
        syntax = self._syntax
        path = key.path
        segments = path.segments
        write_column = self._column_writer(key.attribute)

        def write_document() -> None:
            syntax.write_document(w, write_column, segments)

        def write_unquoted() -> None:
            syntax.write_unquoted(w, write_column, segments)

        if path.cast is not None:
            sql_type = self._cast_type(path)
            from_text = (
                path.unquote
                or self._caps.cast_from_text
                or cast_base(path.cast) not in self._caps.document_cast_types
                # plain json has no casts to scalar types
                or (self._caps.binary_json_type and self._column_type is ColumnType.JSON)
            )
            source = write_unquoted if from_text else write_document

            def write_cast() -> None:
                syntax.write_type_cast(w, source, sql_type)

            def cast_param(v: Any) -> WriteFunc:
                return self._param_writer(stringify(v) if is_composite(v) else v)

            return write_cast, cast_param, False

        text_compare = path.unquote or (
            not self._caps.document_extraction
            and not any(is_composite(v) for v in values)
        )
        if text_compare:
            def text_param(v: Any) -> WriteFunc:
                return self._param_writer(v if isinstance(v, str) else stringify(v))

            return write_unquoted, text_param, False

        def write_operand() -> None:
            syntax.write_document_operand(w, write_document, self._column_type)

        def json_param(v: Any) -> WriteFunc:
            write_param = self._param_writer(stringify(v))
            return lambda: syntax.write_json_param(w, write_param)

        return write_operand, json_param, True

    def _compares_numbers(self, key: AttributeKey, values: Sequence[Any]) -> bool:
        """Whether number operands need the dialect's numeric extraction."""
        return (
            not self._caps.json_number_compare
            and not key.path.has_modifiers
            and all(_is_number(v) for v in values)
        )

    def _write_number_predicate(self, key: AttributeKey, op: Op, values: Sequence[Any]) -> None:
        """Compare the numeric value at the path with raw number parameters.

        Only JSON numbers satisfy the positive forms. The negated forms also
        match a present property that is not a number, as a document
        inequality would.
        """
        w = self._w
        write_column = self._column_writer(key.attribute)
        segments = key.path.segments
        negate = op in (Op.NE, Op.NOT_IN)

        def write_number() -> None:
            self._syntax.write_number(w, write_column, segments)

        if negate:
            w.write("(")
            self._syntax.write_sql_null_test(w, write_column, segments, True)
            w.write(" AND (")
            write_number()
            w.write(" IS NULL OR ")
        write_number()
        if op in MEMBERSHIP_OPERATORS:
            w.write(" NOT IN (" if negate else " IN (")
            write_joined(w, [self._param_writer(v) for v in values], ", ")
            w.write(")")
        else:
            w.write(f" {COMPARISON_OPERATORS[op]} ")
            self._param_writer(values[0])()
        if negate:
            w.write("))")

    def _write_equality_chain(
        self,
        write_lhs: WriteFunc,
        param_for: ParamFactory,
        values: Sequence[Any],
        negate: bool,
    ) -> None:
        """Membership test spelled as ``(a = p1 OR a = p2)``."""
        joiner = " AND " if negate else " OR "
        self._w.write("(")
        for i, item in enumerate(values):
            if i:
                self._w.write(joiner)
            write_lhs()
            self._w.write(" != " if negate else " = ")
            param_for(item)()
        self._w.write(")")

    def _cast_type(self, path: ParsedPath) -> str:
        tag = path.cast or ""
        if not self._dialect.supports_cast(cast_base(tag)):
            raise InvalidCastTargetError(
                ERR_MSG_INVALID_CAST,
                f"type {tag!r} is not a valid cast target for dialect '{self._dialect}'",
            )
        return tag.upper()

    def _membership_values(self, key: AttributeKey, op: Op, value: Any) -> list[Any]:
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
            raise InvalidOperatorError(
                ERR_MSG_INVALID_OPERATOR,
                f"operator {op.value!r} on {key} requires a list of values",
            )
        values = list(value)
        if not values:
            raise InvalidOperatorError(
                ERR_MSG_INVALID_OPERATOR,
                f"operator {op.value!r} on {key} requires at least one value",
            )
        for item in values:
            if isinstance(item, (NullMarker, Or, And)):
                raise InvalidOperatorError(
                    ERR_MSG_INVALID_OPERATOR,
                    f"operator {op.value!r} accepts literal values only, got {item!r}",
                )
        return values

    def _write_containment(self, key: AttributeKey, op: Op, value: Any) -> None:
        self._require(self._caps.containment, "JSON containment")
        if key.path.has_modifiers:
            raise InvalidOperatorError(
                ERR_MSG_INVALID_OPERATOR,
                f"operator {op.value!r} cannot be combined with cast or unquote on {key}",
            )
        write_column = self._column_writer(key.attribute)
        segments = key.path.segments
        self._syntax.write_containment(
            self._w,
            lambda: self._syntax.write_document(self._w, write_column, segments),
            self._param_writer(stringify(value)),
            op is Op.CONTAINED,
        )

    def _write_key_existence(self, key: AttributeKey, op: Op, value: Any) -> None:
        self._require(self._caps.key_existence, "JSON key existence")
        if key.path.has_modifiers:
            raise InvalidOperatorError(
                ERR_MSG_INVALID_OPERATOR,
                f"operator {op.value!r} cannot be combined with cast or unquote on {key}",
            )
        if op is Op.HAS_KEY:
            keys = [value]
        elif isinstance(value, (list, tuple)) and value:
            keys = list(value)
        else:
            keys = []
        if not keys or not all(isinstance(k, str) for k in keys):
            raise InvalidOperatorError(
                ERR_MSG_INVALID_OPERATOR,
                f"operator {op.value!r} on {key} requires key names, got {value!r}",
            )

        write_column = self._column_writer(key.attribute)
        segments = key.path.segments
        self._syntax.write_key_existence(
            self._w,
            lambda: self._syntax.write_document(self._w, write_column, segments),
            [self._param_writer(self._syntax.key_param(k)) for k in keys],
            _KEY_MATCH[op],
        )

    # ---- Assignment ----

    def compile_assignment(self, value: Any) -> None:
        """Write the value for a direct assignment to the JSON column."""
        operand = resolve_operand(value, null_mode=self._null_mode)
        if isinstance(operand, SqlNull):
            self._w.write("NULL")
        elif isinstance(operand, JsonNull):
            self._param_writer("null")()
        elif isinstance(operand, Literal):
            self._param_writer(stringify(operand.value))()
        else:
            raise InvalidOperatorError(
                ERR_MSG_INVALID_OPERATOR,
                "or_()/and_() combinators cannot be assigned to a column",
            )
        logger.debug("compiled assignment for dialect %s: %s", self._dialect, self.result)

"""Dynamic document queries: filter, sort, projection and pagination.

Query-string values arrive as raw strings. Parsing is lenient: a `where`,
`sort` or `select` value that is not valid JSON is ignored, and `skip` /
`limit` accept a leading integer and otherwise fall back to their defaults.
Once parsed, the documents are compiled to SQLAlchemy expressions using
document-store semantics (`$eq`, `$in`, `$or`, ...). A parsed document the
compiler cannot execute raises `QueryError`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
import json
import operator
import re
from typing import Any

from sqlalchemy import and_, false, func, not_, or_, select, true
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.types import Boolean, DateTime

from taskboard.errors import QueryError, ValidationError
from taskboard.utils.date_utils import parse_datetime
from taskboard.utils.ids import is_object_id

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_REGEX_FLAGS = {"i", "m", "s", "x"}
_NO_MATCH = object()
_TRUE_VALUES = (True, "true", 1, "1", "yes")
_FALSE_VALUES = (False, "false", 0, "0", "no")

_COMPARISONS: dict[str, Callable[[Any, Any], Any]] = {
    "$gt": operator.gt,
    "$gte": operator.ge,
    "$lt": operator.lt,
    "$lte": operator.le,
}
_DESCENDING = {-1, "-1", "desc", "descending"}
_ASCENDING = {1, "1", "asc", "ascending"}


def safe_parse(raw: str | None, fallback: Any) -> Any:
    """Decode a JSON query parameter, returning `fallback` when it does not parse."""
    if raw is None or raw == "":
        return fallback
    try:
        return json.loads(raw)
    except ValueError:
        return fallback


def parse_int(raw: str | None) -> int | None:
    """Read the leading integer of `raw` (`"20abc"` -> 20); None if there is none."""
    if raw is None:
        return None
    match = _INT_PREFIX.match(raw)
    if not match:
        return None
    return int(match.group(1))


@dataclass(frozen=True, slots=True)
class Projection:
    """Field projection applied to serialized documents."""

    fields: frozenset[str]
    include: bool
    include_id: bool = True

    @classmethod
    def from_document(cls, document: Any) -> Projection | None:
        """Build a projection from `{"field": 1|0}` or a `"name -_id"` string."""
        if document is None:
            return None
        if isinstance(document, str):
            document = {token.lstrip("-+"): 0 if token.startswith("-") else 1 for token in document.split()}
        if not isinstance(document, dict):
            raise QueryError("Projection must be an object")
        if not document:
            return None

        flags: dict[str, bool] = {}
        for name, value in document.items():
            if isinstance(value, (bool, int, float)):
                flags[name] = bool(value)
            else:
                raise QueryError(f"Invalid projection value for '{name}'")

        include_id = flags.pop("_id", True)
        included = {name for name, flag in flags.items() if flag}
        excluded = {name for name, flag in flags.items() if not flag}
        if included and excluded:
            name = sorted(excluded)[0]
            raise QueryError(f"Cannot do exclusion on field {name} in inclusion projection")
        if included:
            return cls(fields=frozenset(included), include=True, include_id=include_id)
        return cls(fields=frozenset(excluded), include=False, include_id=include_id)

    def apply(self, document: dict[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for name, value in document.items():
            if name == "_id":
                keep = self.include_id
            elif self.include:
                keep = name in self.fields
            else:
                keep = name not in self.fields
            if keep:
                result[name] = value
        return result


@dataclass(slots=True)
class ListQuery:
    """Parsed list-endpoint parameters."""

    where: Any = field(default_factory=dict)
    sort: Any = None
    projection: Projection | None = None
    skip: int = 0
    limit: int | None = None
    count: bool = False


def build_list_query(params: Mapping[str, str | None], *, default_limit: int | None = None) -> ListQuery:
    """Parse list parameters (`where`, `sort`, `select`, `skip`, `limit`, `count`).

    Args:
        params: Raw query-string values; missing keys and None mean "absent".
        default_limit: Cap used when `limit` is absent, zero or not numeric.
            None leaves the result unbounded.

    Returns:
        ListQuery. With `count` set only `where` is populated.
    """
    where = safe_parse(params.get("where"), {})
    if params.get("count") == "true":
        return ListQuery(where=where, count=True)

    skip = parse_int(params.get("skip"))
    limit = parse_int(params.get("limit"))
    return ListQuery(
        where=where,
        sort=safe_parse(params.get("sort"), None),
        projection=Projection.from_document(safe_parse(params.get("select"), None)),
        skip=skip if skip and skip > 0 else 0,
        limit=abs(limit) if limit else default_limit,
    )


def parse_strict_projection(raw: str | None) -> Projection | None:
    """Parse `select` for single-document lookups, where bad JSON is a caller error."""
    if raw is None or raw == "":
        return None
    try:
        document = json.loads(raw)
    except ValueError as exc:
        raise ValidationError("Invalid select parameter") from exc
    return Projection.from_document(document)


def _cast_string(value: Any) -> str:
    """Cast a scalar operand to a string the way the document layer does (`5` -> `"5"`)."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    raise QueryError(f"Cast to string failed for value {value!r}")


class _ScalarField:
    """Condition builder for a plain column."""

    def __init__(self, column: Any, *, object_id: bool = False) -> None:
        self.column = column
        column_type = column.property.columns[0].type
        if object_id:
            self.kind = "objectid"
        elif isinstance(column_type, DateTime):
            self.kind = "datetime"
        elif isinstance(column_type, Boolean):
            self.kind = "bool"
        else:
            self.kind = "string"

    def coerce(self, value: Any) -> Any:
        """Cast an operand to the column type; uncastable operands are a QueryError."""
        if value is None:
            # Stored fields are never null
            return _NO_MATCH
        if self.kind == "datetime":
            parsed = parse_datetime(value)
            if parsed is None:
                raise QueryError(f"Cast to date failed for value {value!r}")
            return parsed
        if self.kind == "bool":
            if value in _TRUE_VALUES:
                return True
            if value in _FALSE_VALUES:
                return False
            raise QueryError(f"Cast to boolean failed for value {value!r}")
        if self.kind == "objectid":
            if not is_object_id(value):
                raise QueryError(f"Cast to ObjectId failed for value {value!r}")
            return value.lower()
        return _cast_string(value)

    def eq(self, value: Any) -> ColumnElement[bool]:
        if isinstance(value, (list, dict)):
            return false()
        coerced = self.coerce(value)
        return false() if coerced is _NO_MATCH else self.column == coerced

    def compare(self, op: Callable[[Any, Any], Any], value: Any) -> ColumnElement[bool]:
        coerced = self.coerce(value)
        return false() if coerced is _NO_MATCH else op(self.column, coerced)

    def in_(self, values: list[Any]) -> ColumnElement[bool]:
        coerced = [c for c in (self.coerce(v) for v in values) if c is not _NO_MATCH]
        return self.column.in_(coerced) if coerced else false()

    def exists(self, flag: bool) -> ColumnElement[bool]:
        return true() if flag else false()

    def regex(self, pattern: str) -> ColumnElement[bool]:
        if self.kind != "string":
            return false()
        return self.column.regexp_match(pattern)

    def size(self, size: int) -> ColumnElement[bool]:
        return false()

    def all_(self, values: list[Any]) -> ColumnElement[bool]:
        if not values:
            return false()
        return and_(*(self.eq(value) for value in values))


class _ArrayField:
    """Condition builder for an array field stored as ordered child rows."""

    def __init__(self, relationship: Any, element: Any, position: Any) -> None:
        self.relationship = relationship
        self.element = element
        self.position = position

    def eq(self, value: Any) -> ColumnElement[bool]:
        if isinstance(value, list):
            # Exact match: same elements in the same order, nothing beyond
            if any(item is None or isinstance(item, (list, dict)) for item in value):
                return false()
            value = [_cast_string(item) for item in value]
            return and_(
                ~self.relationship.any(self.position >= len(value)),
                *(
                    self.relationship.any(and_(self.element == item, self.position == index))
                    for index, item in enumerate(value)
                ),
            )
        if value is None or isinstance(value, dict):
            return false()
        return self.relationship.any(self.element == _cast_string(value))

    def compare(self, op: Callable[[Any, Any], Any], value: Any) -> ColumnElement[bool]:
        if value is None:
            return false()
        return self.relationship.any(op(self.element, _cast_string(value)))

    def in_(self, values: list[Any]) -> ColumnElement[bool]:
        return or_(false(), *(self.eq(value) for value in values))

    def exists(self, flag: bool) -> ColumnElement[bool]:
        return true() if flag else false()

    def regex(self, pattern: str) -> ColumnElement[bool]:
        return self.relationship.any(self.element.regexp_match(pattern))

    def size(self, size: int) -> ColumnElement[bool]:
        if size == 0:
            return ~self.relationship.any()
        return and_(
            self.relationship.any(self.position == size - 1),
            ~self.relationship.any(self.position >= size),
        )

    def all_(self, values: list[Any]) -> ColumnElement[bool]:
        if not values:
            return false()
        return and_(*(self.eq(value) for value in values))


class _MissingField:
    """Condition builder for a field no document has."""

    def eq(self, value: Any) -> ColumnElement[bool]:
        return true() if value is None else false()

    def compare(self, op: Callable[[Any, Any], Any], value: Any) -> ColumnElement[bool]:
        return false()

    def in_(self, values: list[Any]) -> ColumnElement[bool]:
        return true() if None in values else false()

    def exists(self, flag: bool) -> ColumnElement[bool]:
        return false() if flag else true()

    def regex(self, pattern: str) -> ColumnElement[bool]:
        return false()

    def size(self, size: int) -> ColumnElement[bool]:
        return false()

    def all_(self, values: list[Any]) -> ColumnElement[bool]:
        return false()


def _regex_pattern(pattern: Any, options: Any) -> str:
    if not isinstance(pattern, str):
        raise QueryError("$regex has to be a string")
    if options is None:
        options = ""
    if not isinstance(options, str) or set(options) - _REGEX_FLAGS:
        raise QueryError(f"Invalid regex options: {options!r}")
    try:
        re.compile(pattern)
    except re.error as exc:
        raise QueryError(f"Invalid regular expression: {exc}") from exc
    flags = "".join(sorted(set(options)))
    return f"(?{flags}){pattern}" if flags else pattern


def _is_operator_document(value: Any) -> bool:
    if not isinstance(value, dict) or not value:
        return False
    dollar_keys = [key for key in value if key.startswith("$")]
    if not dollar_keys:
        return False
    if len(dollar_keys) != len(value):
        raise QueryError("Cannot mix operators and plain fields in one condition")
    return True


class DocumentQuery:
    """Compile filter/sort documents against one mapped model.

    The model declares `document_fields` (public name -> column attribute)
    and optionally `array_fields` (public name -> relationship attribute
    whose rows carry `task_id`-style elements and a `position`).
    """

    def __init__(self, model: Any, *, array_element: str = "task_id", array_position: str = "position") -> None:
        self.model = model
        self.fields: dict[str, Any] = {
            name: getattr(model, attr) for name, attr in model.document_fields.items()
        }
        self.arrays: dict[str, _ArrayField] = {}
        for name, attr in getattr(model, "array_fields", {}).items():
            relationship = getattr(model, attr)
            child = relationship.property.mapper.class_
            self.arrays[name] = _ArrayField(
                relationship,
                getattr(child, array_element),
                getattr(child, array_position),
            )

    def _target(self, name: str) -> _ScalarField | _ArrayField | _MissingField:
        if name in self.fields:
            return _ScalarField(self.fields[name], object_id=name == "_id")
        if name in self.arrays:
            return self.arrays[name]
        return _MissingField()

    def compile_filter(self, where: Any) -> ColumnElement[bool]:
        """Compile a filter document to a boolean SQL expression."""
        if where is None:
            return true()
        if not isinstance(where, dict):
            raise QueryError("Filter must be an object")

        clauses: list[ColumnElement[bool]] = []
        for key, value in where.items():
            if key in ("$and", "$or", "$nor"):
                if not isinstance(value, list) or not value or not all(isinstance(v, dict) for v in value):
                    raise QueryError(f"{key} must be a nonempty array of objects")
                parts = [self.compile_filter(sub) for sub in value]
                if key == "$and":
                    clauses.append(and_(*parts))
                elif key == "$or":
                    clauses.append(or_(*parts))
                else:
                    clauses.append(not_(or_(*parts)))
            elif key.startswith("$"):
                raise QueryError(f"Unknown top level operator: {key}")
            else:
                clauses.append(self._field_condition(key, value))
        return and_(*clauses) if clauses else true()

    def _field_condition(self, name: str, value: Any) -> ColumnElement[bool]:
        target = self._target(name)
        if _is_operator_document(value):
            return self._operators(target, value)
        return target.eq(value)

    def _operators(self, target: Any, ops: dict[str, Any]) -> ColumnElement[bool]:
        if "$options" in ops and "$regex" not in ops:
            raise QueryError("$options needs a $regex")

        clauses: list[ColumnElement[bool]] = []
        for op, operand in ops.items():
            if op == "$options":
                continue
            if op == "$eq":
                clauses.append(target.eq(operand))
            elif op == "$ne":
                clauses.append(not_(target.eq(operand)))
            elif op in _COMPARISONS:
                clauses.append(target.compare(_COMPARISONS[op], operand))
            elif op in ("$in", "$nin"):
                if not isinstance(operand, list):
                    raise QueryError(f"{op} needs an array")
                condition = target.in_(operand)
                clauses.append(condition if op == "$in" else not_(condition))
            elif op == "$exists":
                clauses.append(target.exists(bool(operand)))
            elif op == "$regex":
                clauses.append(target.regex(_regex_pattern(operand, ops.get("$options"))))
            elif op == "$size":
                if isinstance(operand, bool) or not isinstance(operand, int) or operand < 0:
                    raise QueryError("$size needs a non-negative integer")
                clauses.append(target.size(operand))
            elif op == "$all":
                if not isinstance(operand, list):
                    raise QueryError("$all needs an array")
                clauses.append(target.all_(operand))
            elif op == "$not":
                if not _is_operator_document(operand):
                    raise QueryError("$not needs an operator object")
                clauses.append(not_(self._operators(target, operand)))
            else:
                raise QueryError(f"Unknown operator: {op}")
        return and_(*clauses)

    def order_by(self, sort: Any) -> list[Any]:
        """Translate `{"field": 1|-1}` or `"name -deadline"` into ORDER BY clauses."""
        if sort is None:
            entries: list[tuple[str, Any]] = []
        elif isinstance(sort, str):
            entries = [
                (token.lstrip("-+"), -1 if token.startswith("-") else 1) for token in sort.split()
            ]
        elif isinstance(sort, dict):
            entries = list(sort.items())
        else:
            raise QueryError("Sort must be an object or a string")

        clauses = []
        for name, direction in entries:
            if isinstance(direction, str):
                direction = direction.lower()
            elif isinstance(direction, bool) or not isinstance(direction, (int, float)):
                raise QueryError(f"Invalid sort value for '{name}'")
            if direction in _DESCENDING:
                descending = True
            elif direction in _ASCENDING:
                descending = False
            else:
                raise QueryError(f"Invalid sort value for '{name}'")
            column = self.fields.get(name)
            if column is None:
                continue
            clauses.append(column.desc() if descending else column.asc())
        # Insertion order: creation timestamp, then id for same-instant writes
        clauses.append(self.fields["dateCreated"].asc())
        clauses.append(self.fields["_id"].asc())
        return clauses

    def count(self, db: Session, where: Any) -> int:
        stmt = select(func.count()).select_from(self.model).where(self.compile_filter(where))
        return int(db.scalar(stmt) or 0)

    def fetch(self, db: Session, query: ListQuery) -> list[Any]:
        stmt = select(self.model).where(self.compile_filter(query.where)).order_by(*self.order_by(query.sort))
        if query.skip:
            stmt = stmt.offset(query.skip)
        if query.limit:
            stmt = stmt.limit(query.limit)
        return list(db.execute(stmt).scalars().all())


__all__ = [
    "DocumentQuery",
    "ListQuery",
    "Projection",
    "build_list_query",
    "parse_int",
    "parse_strict_projection",
    "safe_parse",
]

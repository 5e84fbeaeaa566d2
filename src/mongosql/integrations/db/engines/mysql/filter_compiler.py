"""
목적: Mongo 스타일 필터를 MySQL WHERE/ORDER BY/LIMIT 절로 변환한다.
설명: 문서는 "document" JSON 컬럼에 저장되며, 필드 경로는 항상 %s 파라미터로 바인딩한
    JSON_EXTRACT 로 접근한다. 값의 JSON 타입을 함께 검사해 문자열 "1" 과 숫자 1 이
    섞여 매칭되지 않게 한다. 지원하지 않는 연산자는 SQL 실행 전에 UnsupportedQueryError 로 거부한다.
    숫자 비교는 DECIMAL(65, 30) 으로 수행하므로 절댓값이 1e35 이상이거나 유한하지 않은 값은 거부한다.

    지원 연산자:
        최상위: $and, $or, $nor
        필드: $eq, $ne, $gt, $gte, $lt, $lte, $in, $nin, $exists, $regex(+$options "i"),
              $size, $all, $has, $mod, $not
디자인 패턴: 컴파일러(재귀 하강)
참조: src/mongosql/integrations/db/engines/sql_common.py, src/mongosql/integrations/db/base/models.py
"""

from __future__ import annotations

import json
import math
from typing import AbstractSet, Any, List, Mapping, Optional, Sequence, Tuple

from mongosql.integrations.db.base.errors import UnsupportedQueryError
from mongosql.integrations.db.base.models import SortField, SortOrder
from mongosql.integrations.db.engines.sql_common import (
    SQLIdentifierHelper,
    json_path,
    promoted_column_name,
)

Clause = Tuple[str, List[Any]]

DOCUMENT_COLUMN = '"document"'
ROW_ID_COLUMN = '"id"'
ID_COLUMN = '"_id_virtual"'
PROMOTED_MAX_LENGTH = 255
UNBOUNDED_LIMIT = 18446744073709551615

_EXTRACT = f"JSON_EXTRACT({DOCUMENT_COLUMN}, %s)"
_NUMERIC_TYPES = "('INTEGER', 'UNSIGNED INTEGER', 'DOUBLE', 'DECIMAL')"
_DECIMAL = "DECIMAL(65, 30)"
# DECIMAL(65, 30) 의 정수부 자릿수 한계
_DECIMAL_LIMIT = 10**35
_FALSE: Clause = ("0 = 1", [])
_LOGICAL = {"$and": "AND", "$or": "OR", "$nor": "OR"}

SUPPORTED_FIELD_OPERATORS = (
    "$eq", "$ne", "$gt", "$gte", "$lt", "$lte", "$in", "$nin", "$exists",
    "$regex", "$options", "$size", "$all", "$has", "$mod", "$not",
)


class MySQLFilterCompiler:
    """MySQL 필터 컴파일러."""

    def __init__(self, identifier_helper: Optional[SQLIdentifierHelper] = None) -> None:
        self._identifier = identifier_helper or SQLIdentifierHelper()

    def compile_where(
        self,
        filter: Optional[Mapping[str, Any]],
        promoted: AbstractSet[str] = frozenset(),
    ) -> Clause:
        """필터를 WHERE 절 본문과 파라미터로 변환한다. 빈 필터는 빈 문자열이다."""

        if filter is None:
            return "", []
        if not isinstance(filter, Mapping):
            raise UnsupportedQueryError("필터는 객체여야 합니다.")
        if not filter:
            return "", []
        return self._document(filter, promoted)

    def compile_sort(self, sort: Sequence[SortField]) -> Clause:
        """정렬 목록을 ORDER BY 본문으로 변환한다. 동순위는 삽입 순서로 정렬한다."""

        parts: List[str] = []
        params: List[Any] = []
        for item in sort:
            direction = "DESC" if item.order == SortOrder.DESC else "ASC"
            if item.field == "_id":
                parts.append(f"{ID_COLUMN} {direction}")
                continue
            parts.append(f"{_EXTRACT} {direction}")
            params.append(json_path(item.field))
        parts.append(f"{ROW_ID_COLUMN} ASC")
        return ", ".join(parts), params

    def compile_pagination(self, limit: Optional[int], skip: int = 0) -> Clause:
        """limit/skip 을 LIMIT/OFFSET 절로 변환한다. limit 0 은 제한 없음이다."""

        if skip and skip < 0 or limit is not None and limit < 0:
            raise UnsupportedQueryError("limit/skip 은 0 이상이어야 합니다.")
        if limit:
            if skip:
                return "LIMIT %s OFFSET %s", [limit, skip]
            return "LIMIT %s", [limit]
        if skip:
            return f"LIMIT {UNBOUNDED_LIMIT} OFFSET %s", [skip]
        return "", []

    def _document(self, filter: Mapping[str, Any], promoted: AbstractSet[str]) -> Clause:
        clauses: List[Clause] = []
        for key, value in filter.items():
            if not isinstance(key, str):
                raise UnsupportedQueryError(f"필드 이름은 문자열이어야 합니다: {key!r}")
            if key in _LOGICAL:
                clauses.append(self._logical(key, value, promoted))
            elif key.startswith("$"):
                raise UnsupportedQueryError(
                    f"지원하지 않는 최상위 연산자입니다: {key}",
                    metadata={"operator": key},
                )
            else:
                clauses.append(self._field(key, value, promoted))
        if not clauses:
            return "1 = 1", []
        return _join(clauses, "AND")

    def _logical(self, operator: str, value: Any, promoted: AbstractSet[str]) -> Clause:
        if not isinstance(value, list) or not value:
            raise UnsupportedQueryError(f"{operator} 의 값은 비어 있지 않은 배열이어야 합니다.")
        subclauses = []
        for item in value:
            if not isinstance(item, Mapping):
                raise UnsupportedQueryError(f"{operator} 의 항목은 객체여야 합니다.")
            subclauses.append(self._document(item, promoted))
        sql, params = _join(subclauses, _LOGICAL[operator])
        if operator == "$nor":
            return _negate((sql, params))
        return sql, params

    def _field(self, field: str, condition: Any, promoted: AbstractSet[str]) -> Clause:
        path = json_path(field)
        if not _is_operator_object(condition):
            return self._eq(field, path, condition, promoted)
        options = condition.get("$options")
        if options is not None and "$regex" not in condition:
            raise UnsupportedQueryError("$options 는 $regex 와 함께만 사용할 수 있습니다.")
        clauses = [
            self._operator(field, path, operator, argument, options, promoted)
            for operator, argument in condition.items()
            if operator != "$options"
        ]
        return _join(clauses, "AND")

    def _operator(
        self,
        field: str,
        path: str,
        operator: str,
        argument: Any,
        options: Any,
        promoted: AbstractSet[str],
    ) -> Clause:
        if operator == "$eq":
            return self._eq(field, path, argument, promoted)
        if operator == "$ne":
            return _negate(self._eq(field, path, argument, promoted))
        if operator in ("$gt", "$gte", "$lt", "$lte"):
            return self._compare(path, operator, argument)
        if operator == "$in":
            return self._in(field, path, argument, promoted)
        if operator == "$nin":
            return _negate(self._in(field, path, argument, promoted))
        if operator == "$exists":
            return self._exists(path, argument)
        if operator == "$regex":
            return self._regex(path, argument, options)
        if operator == "$size":
            return self._size(path, argument)
        if operator == "$all":
            return self._all(path, argument)
        if operator == "$has":
            return f"JSON_CONTAINS({_EXTRACT}, %s)", [path, _json(argument)]
        if operator == "$mod":
            return self._mod(path, argument)
        if operator == "$not":
            if not _is_operator_object(argument):
                raise UnsupportedQueryError("$not 의 값은 연산자 객체여야 합니다.")
            return _negate(self._field(field, argument, promoted))
        raise UnsupportedQueryError(
            f"지원하지 않는 필터 연산자입니다: {operator}",
            metadata={
                "operator": operator,
                "field": field,
                "supported": list(SUPPORTED_FIELD_OPERATORS),
            },
        )

    def _eq(self, field: str, path: str, value: Any, promoted: AbstractSet[str]) -> Clause:
        if field == "_id":
            if value is None or isinstance(value, (dict, list)):
                return _FALSE
            return f"{ID_COLUMN} = %s", [str(value)]
        clause = _typed_eq(path, value)
        if (
            field in promoted
            and isinstance(value, str)
            and len(value) <= PROMOTED_MAX_LENGTH
        ):
            column = self._identifier.quote_identifier(promoted_column_name(field))
            return f"({column} = %s AND {clause[0]})", [value] + clause[1]
        return clause

    def _compare(self, path: str, operator: str, value: Any) -> Clause:
        symbol = {"$gt": ">", "$gte": ">=", "$lt": "<", "$lte": "<="}[operator]
        if _is_number(value):
            return (
                f"(JSON_TYPE({_EXTRACT}) IN {_NUMERIC_TYPES} "
                f"AND CAST(JSON_UNQUOTE({_EXTRACT}) AS {_DECIMAL}) {symbol} %s)",
                [path, path, _decimal_operand(value)],
            )
        if isinstance(value, str):
            return (
                f"(JSON_TYPE({_EXTRACT}) = 'STRING' AND JSON_UNQUOTE({_EXTRACT}) {symbol} %s)",
                [path, path, value],
            )
        raise UnsupportedQueryError(f"{operator} 는 숫자 또는 문자열 값만 지원합니다: {value!r}")

    def _in(self, field: str, path: str, values: Any, promoted: AbstractSet[str]) -> Clause:
        if not isinstance(values, list):
            raise UnsupportedQueryError("$in/$nin 의 값은 배열이어야 합니다.")
        if not values:
            return _FALSE
        if field == "_id":
            ids = [str(value) for value in values if value is not None]
            if not ids:
                return _FALSE
            placeholders = ", ".join(["%s"] * len(ids))
            return f"{ID_COLUMN} IN ({placeholders})", ids
        return _join([self._eq(field, path, value, promoted) for value in values], "OR")

    def _exists(self, path: str, flag: Any) -> Clause:
        if not isinstance(flag, (bool, int)):
            raise UnsupportedQueryError("$exists 의 값은 bool 이어야 합니다.")
        clause = f"JSON_CONTAINS_PATH({DOCUMENT_COLUMN}, 'one', %s)"
        if flag:
            return clause, [path]
        return f"NOT {clause}", [path]

    def _regex(self, path: str, pattern: Any, options: Any) -> Clause:
        if not isinstance(pattern, str):
            raise UnsupportedQueryError("$regex 의 값은 문자열이어야 합니다.")
        if options in (None, ""):
            subject = f"JSON_UNQUOTE({_EXTRACT})"
        elif options == "i":
            subject = f"(JSON_UNQUOTE({_EXTRACT}) COLLATE utf8mb4_unicode_ci)"
        else:
            raise UnsupportedQueryError(
                f"지원하지 않는 $options 입니다: {options!r}",
                hint='대소문자 무시 옵션 "i" 만 지원합니다.',
            )
        return (
            f"(JSON_TYPE({_EXTRACT}) = 'STRING' AND {subject} REGEXP %s)",
            [path, path, pattern],
        )

    def _size(self, path: str, size: Any) -> Clause:
        if not isinstance(size, int) or isinstance(size, bool) or size < 0:
            raise UnsupportedQueryError("$size 의 값은 0 이상의 정수여야 합니다.")
        return (
            f"(JSON_TYPE({_EXTRACT}) = 'ARRAY' AND JSON_LENGTH({_EXTRACT}) = %s)",
            [path, path, size],
        )

    def _all(self, path: str, values: Any) -> Clause:
        if not isinstance(values, list):
            raise UnsupportedQueryError("$all 의 값은 배열이어야 합니다.")
        if not values:
            return _FALSE
        return (
            f"(JSON_TYPE({_EXTRACT}) = 'ARRAY' AND JSON_CONTAINS({_EXTRACT}, %s))",
            [path, path, _json(values)],
        )

    def _mod(self, path: str, argument: Any) -> Clause:
        if (
            not isinstance(argument, list)
            or len(argument) != 2
            or not all(_is_number(item) for item in argument)
            or argument[0] == 0
        ):
            raise UnsupportedQueryError("$mod 의 값은 [divisor(0 제외), remainder] 형식이어야 합니다.")
        return (
            f"(JSON_TYPE({_EXTRACT}) IN {_NUMERIC_TYPES} "
            f"AND MOD(CAST(JSON_UNQUOTE({_EXTRACT}) AS {_DECIMAL}), %s) = %s)",
            [path, path, _decimal_operand(argument[0]), _decimal_operand(argument[1])],
        )


def _typed_eq(path: str, value: Any) -> Clause:
    if value is None:
        return (
            f"({_EXTRACT} IS NULL OR JSON_TYPE({_EXTRACT}) = 'NULL')",
            [path, path],
        )
    if isinstance(value, bool):
        return (
            f"(JSON_TYPE({_EXTRACT}) = 'BOOLEAN' AND JSON_UNQUOTE({_EXTRACT}) = %s)",
            [path, path, "true" if value else "false"],
        )
    if _is_number(value):
        return (
            f"(JSON_TYPE({_EXTRACT}) IN {_NUMERIC_TYPES} "
            f"AND CAST(JSON_UNQUOTE({_EXTRACT}) AS {_DECIMAL}) = %s)",
            [path, path, _decimal_operand(value)],
        )
    if isinstance(value, str):
        return (
            f"(JSON_TYPE({_EXTRACT}) = 'STRING' AND JSON_UNQUOTE({_EXTRACT}) = %s)",
            [path, path, value],
        )
    if isinstance(value, (dict, list)):
        return f"{_EXTRACT} = JSON_EXTRACT(%s, '$')", [path, _json(value)]
    raise UnsupportedQueryError(f"비교할 수 없는 값 타입입니다: {type(value).__name__}")


def _is_operator_object(value: Any) -> bool:
    if not isinstance(value, Mapping) or not value:
        return False
    keys = list(value.keys())
    operator_keys = [key for key in keys if isinstance(key, str) and key.startswith("$")]
    if not operator_keys:
        return False
    if len(operator_keys) != len(keys):
        raise UnsupportedQueryError("연산자 키와 일반 키를 한 조건에 섞을 수 없습니다.")
    return True


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _decimal_operand(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        raise UnsupportedQueryError(f"유한하지 않은 숫자는 비교할 수 없습니다: {value!r}")
    if abs(value) >= _DECIMAL_LIMIT:
        raise UnsupportedQueryError(
            f"DECIMAL(65, 30) 범위를 벗어난 숫자입니다: {value!r}",
            hint="절댓값이 1e35 미만인 숫자만 비교할 수 있습니다.",
        )
    return value


def _json(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise UnsupportedQueryError(
            f"필터 값을 JSON으로 변환할 수 없습니다: {value!r}", original=exc
        ) from exc


def _join(clauses: Sequence[Clause], keyword: str) -> Clause:
    if len(clauses) == 1:
        return clauses[0]
    params: List[Any] = []
    for _, clause_params in clauses:
        params.extend(clause_params)
    return "(" + f" {keyword} ".join(sql for sql, _ in clauses) + ")", params


def _negate(clause: Clause) -> Clause:
    return f"NOT COALESCE({clause[0]}, FALSE)", list(clause[1])

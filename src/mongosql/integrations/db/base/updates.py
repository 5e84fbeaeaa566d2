"""
목적: 부분 갱신과 교체 문서를 계산한다.
설명: 연산자 없는 패치는 최상위 키 단위로 값을 교체하고,
    $set / $unset / $inc 는 점 경로 단위로 적용한다. _id 는 절대 바뀌지 않는다.
    validate_* 함수는 SQL 실행 전에 형식 오류를 걸러낸다.
디자인 패턴: 유틸리티 모듈
참조: src/mongosql/integrations/db/engines/mysql/engine.py
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping

from mongosql.integrations.db.base.errors import UnsupportedQueryError
from mongosql.integrations.db.base.models import Document

SUPPORTED_UPDATE_OPERATORS = ("$set", "$unset", "$inc")
_ID = "_id"


def validate_update(update: Mapping[str, Any]) -> bool:
    """갱신 명세를 검증하고 연산자 형식 여부를 반환한다."""

    if not isinstance(update, Mapping) or not update:
        raise UnsupportedQueryError("갱신 명세는 비어 있지 않은 객체여야 합니다.")
    operator_keys = [key for key in update if isinstance(key, str) and key.startswith("$")]
    if operator_keys and len(operator_keys) != len(update):
        raise UnsupportedQueryError("갱신 명세에서 연산자와 일반 키를 섞을 수 없습니다.")
    if not operator_keys:
        return False
    for operator, fields in update.items():
        if operator not in SUPPORTED_UPDATE_OPERATORS:
            raise UnsupportedQueryError(
                f"지원하지 않는 갱신 연산자입니다: {operator}",
                metadata={"supported": list(SUPPORTED_UPDATE_OPERATORS)},
            )
        if not isinstance(fields, Mapping) or not fields:
            raise UnsupportedQueryError(f"{operator} 의 값은 비어 있지 않은 객체여야 합니다.")
        for path, value in fields.items():
            _validate_path(path)
            if path == _ID or path.startswith(f"{_ID}."):
                raise UnsupportedQueryError("_id 는 변경할 수 없습니다.")
            if operator == "$inc" and not _is_number(value):
                raise UnsupportedQueryError(f"$inc 값은 숫자여야 합니다: {path}={value!r}")
    return True


def apply_update(document: Document, update: Mapping[str, Any]) -> Document:
    """갱신 명세를 적용한 새 문서를 반환한다."""

    uses_operators = validate_update(update)
    result = copy.deepcopy(document)
    if not uses_operators:
        _ensure_same_id(document, update)
        for key, value in update.items():
            if key != _ID:
                result[key] = copy.deepcopy(value)
        return result
    for operator, fields in update.items():
        for path, value in fields.items():
            parts = path.split(".")
            if operator == "$set":
                _set_path(result, parts, copy.deepcopy(value))
            elif operator == "$unset":
                _unset_path(result, parts)
            else:
                _inc_path(result, parts, value)
    return result


def validate_replacement(replacement: Mapping[str, Any]) -> None:
    """교체 문서를 검증한다."""

    if not isinstance(replacement, Mapping):
        raise UnsupportedQueryError("교체 문서는 객체여야 합니다.")
    for key in replacement:
        if not isinstance(key, str) or key.startswith("$"):
            raise UnsupportedQueryError(f"교체 문서에는 연산자를 사용할 수 없습니다: {key!r}")


def apply_replacement(document: Document, replacement: Mapping[str, Any]) -> Document:
    """기존 _id를 유지한 교체 문서를 반환한다."""

    validate_replacement(replacement)
    _ensure_same_id(document, replacement)
    result: Document = {_ID: document[_ID]}
    for key, value in replacement.items():
        if key != _ID:
            result[key] = copy.deepcopy(value)
    return result


def _ensure_same_id(document: Document, incoming: Mapping[str, Any]) -> None:
    if _ID in incoming and str(incoming[_ID]) != str(document.get(_ID)):
        raise UnsupportedQueryError("_id 는 변경할 수 없습니다.")


def _validate_path(path: Any) -> None:
    if not isinstance(path, str) or not path:
        raise UnsupportedQueryError(f"허용되지 않는 필드 경로: {path!r}")
    if any(not part or part.startswith("$") for part in path.split(".")):
        raise UnsupportedQueryError(f"허용되지 않는 필드 경로: {path!r}")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parent(document: Dict[str, Any], parts: List[str], create: bool) -> Any:
    current: Any = document
    for part in parts[:-1]:
        if not isinstance(current, dict):
            break
        if part not in current:
            if not create:
                return None
            current[part] = {}
        current = current[part]
    if not isinstance(current, dict):
        if not create:
            return None
        raise UnsupportedQueryError("객체가 아닌 값의 하위 경로는 갱신할 수 없습니다.")
    return current


def _set_path(document: Dict[str, Any], parts: List[str], value: Any) -> None:
    parent = _parent(document, parts, create=True)
    parent[parts[-1]] = value


def _unset_path(document: Dict[str, Any], parts: List[str]) -> None:
    parent = _parent(document, parts, create=False)
    if parent is not None:
        parent.pop(parts[-1], None)


def _inc_path(document: Dict[str, Any], parts: List[str], amount: Any) -> None:
    parent = _parent(document, parts, create=True)
    current = parent.get(parts[-1], 0)
    if not _is_number(current):
        raise UnsupportedQueryError(f"숫자가 아닌 필드는 $inc 할 수 없습니다: {'.'.join(parts)}")
    parent[parts[-1]] = current + amount

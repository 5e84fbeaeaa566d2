"""
목적: 조회 결과 문서에 projection을 적용한다.
설명: 포함(inclusion) 또는 제외(exclusion) 모드 중 하나만 허용하며,
    _id 는 명시적으로 제외하지 않는 한 항상 포함된다. 점 경로를 지원한다.
디자인 패턴: 유틸리티 모듈
참조: src/mongosql/integrations/db/engines/mysql/engine.py
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping, Optional, Tuple

from mongosql.integrations.db.base.errors import UnsupportedQueryError
from mongosql.integrations.db.base.models import Document

_ID = "_id"


def validate_projection(projection: Optional[Mapping[str, Any]]) -> Optional[bool]:
    """projection 모드를 반환한다. True=포함, False=제외, None=적용 없음."""

    if not projection:
        return None
    include_flags: List[bool] = []
    for path, flag in projection.items():
        if not isinstance(path, str) or not path or path.startswith("$"):
            raise UnsupportedQueryError(f"허용되지 않는 projection 경로: {path!r}")
        if isinstance(flag, bool) or flag in (0, 1):
            if path != _ID:
                include_flags.append(bool(flag))
            continue
        raise UnsupportedQueryError(
            f"projection 값은 0/1 또는 bool 이어야 합니다: {path}={flag!r}",
            hint="$slice, $elemMatch 등 projection 연산자는 지원하지 않습니다.",
        )
    if include_flags and len(set(include_flags)) > 1:
        raise UnsupportedQueryError("projection에서 포함과 제외를 섞을 수 없습니다.")
    if include_flags:
        return include_flags[0]
    # _id 만 지정된 경우
    return bool(projection[_ID])


def apply_projection(document: Document, projection: Optional[Mapping[str, Any]]) -> Document:
    """문서에 projection을 적용한 새 문서를 반환한다."""

    mode = validate_projection(projection)
    if mode is None:
        return document
    assert projection is not None
    include_id = bool(projection.get(_ID, True))
    paths = [path for path in projection if path != _ID]
    if mode:
        result: Document = {}
        if include_id and _ID in document:
            result[_ID] = document[_ID]
        for path in paths:
            _copy_path(document, result, path.split("."))
        return result
    result = copy.deepcopy(document)
    if not include_id:
        result.pop(_ID, None)
    for path in paths:
        _remove_path(result, path.split("."))
    return result


def _copy_path(source: Any, target: Dict[str, Any], parts: List[str]) -> None:
    if not isinstance(source, dict):
        return
    head, rest = parts[0], parts[1:]
    if head not in source:
        return
    value = source[head]
    if not rest:
        target[head] = copy.deepcopy(value)
        return
    if isinstance(value, dict):
        child = target.setdefault(head, {})
        if isinstance(child, dict):
            _copy_path(value, child, rest)
        return
    if isinstance(value, list):
        projected, matched = _project_list(value, rest)
        if matched:
            target[head] = projected


def _project_list(items: List[Any], parts: List[str]) -> Tuple[List[Any], bool]:
    projected: List[Any] = []
    for item in items:
        if isinstance(item, dict):
            child: Dict[str, Any] = {}
            _copy_path(item, child, parts)
            projected.append(child)
    return projected, bool(projected)


def _remove_path(target: Any, parts: List[str]) -> None:
    if isinstance(target, list):
        for item in target:
            _remove_path(item, parts)
        return
    if not isinstance(target, dict):
        return
    head, rest = parts[0], parts[1:]
    if head not in target:
        return
    if not rest:
        del target[head]
        return
    _remove_path(target[head], rest)

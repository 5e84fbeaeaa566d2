"""
목적: SQL 계열 엔진에서 공통으로 사용하는 유틸리티를 제공한다.
설명: 식별자 검증/인용(ANSI 쌍따옴표), 문서 필드 경로 → JSON 경로 변환,
    승격 컬럼 이름 규칙을 통합한다.
디자인 패턴: 유틸리티 모듈
참조: src/mongosql/integrations/db/engines/mysql/filter_compiler.py, src/mongosql/integrations/db/engines/mysql/schema_manager.py
"""

from __future__ import annotations

import re

from mongosql.integrations.db.base.errors import UnsupportedQueryError

MAX_IDENTIFIER_LENGTH = 64
PROMOTED_COLUMN_PREFIX = "_idx_"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_INDEX_SEGMENT_RE = re.compile(r"^\d+$")
_FORBIDDEN_SEGMENT_CHARS = set('"\\*[]\'')


class SQLIdentifierHelper:
    """SQL 식별자 검증/인용 도우미."""

    def quote_identifier(self, name: str) -> str:
        """식별자를 검증하고 쌍따옴표로 감싸 반환한다."""

        return f'"{self.plain_identifier(name)}"'

    def quote_table(self, name: str) -> str:
        """컬렉션 이름을 테이블 식별자로 반환한다."""

        return self.quote_identifier(name)

    def plain_identifier(self, name: str) -> str:
        """인용 없는 식별자를 검증해 반환한다."""

        if not name or not isinstance(name, str):
            raise UnsupportedQueryError("식별자 이름이 비어 있습니다.")
        if not _IDENTIFIER_RE.match(name) or len(name) > MAX_IDENTIFIER_LENGTH:
            raise UnsupportedQueryError(
                f"허용되지 않는 식별자: {name}",
                hint="이름은 ^[A-Za-z_][A-Za-z0-9_]*$ 형식이며 64자 이하여야 합니다.",
            )
        return name


def json_path(field: str) -> str:
    """문서 필드 경로(a.b.0.c)를 JSON 경로($."a"."b"[0]."c")로 변환한다."""

    if not isinstance(field, str) or not field:
        raise UnsupportedQueryError(f"허용되지 않는 필드 경로: {field!r}")
    segments = []
    for segment in field.split("."):
        if not segment or segment.startswith("$") or _FORBIDDEN_SEGMENT_CHARS & set(segment):
            raise UnsupportedQueryError(f"허용되지 않는 필드 경로: {field!r}")
        if _INDEX_SEGMENT_RE.match(segment):
            segments.append(f"[{segment}]")
        else:
            segments.append(f'."{segment}"')
    return "$" + "".join(segments)


def promoted_column_name(field: str) -> str:
    """승격 필드의 생성 컬럼 이름을 반환한다."""

    name = PROMOTED_COLUMN_PREFIX + field.replace(".", "__")
    if not all(_IDENTIFIER_RE.match(part) for part in field.split(".")):
        raise UnsupportedQueryError(f"승격할 수 없는 필드 경로: {field!r}")
    if len(name) > MAX_IDENTIFIER_LENGTH:
        raise UnsupportedQueryError(f"승격 컬럼 이름이 너무 깁니다: {name}")
    return name

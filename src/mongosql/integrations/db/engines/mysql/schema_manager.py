"""
목적: MySQL 컬렉션 테이블 관리 모듈을 제공한다.
설명: 컬렉션 하나를 테이블 하나로 매핑한다.
    - "id" BIGINT AUTO_INCREMENT 기본 키 (삽입 순서)
    - "document" JSON 본문
    - "_id_virtual" 생성 컬럼 + UNIQUE 인덱스 (문서 _id)
    - 승격 필드마다 "_idx_<path>" 생성 컬럼 + 인덱스 (최선 노력)
디자인 패턴: 매니저 패턴
참조: src/mongosql/integrations/db/engines/mysql/engine.py, src/mongosql/integrations/db/engines/sql_common.py
"""

from __future__ import annotations

from typing import List, Optional, Set

from mysql.connector import errors as mysql_errors

from mongosql.integrations.db.base.errors import UnsupportedQueryError
from mongosql.integrations.db.base.models import CollectionSchema
from mongosql.integrations.db.base.session import ConnectionSession
from mongosql.integrations.db.engines.sql_common import (
    SQLIdentifierHelper,
    json_path,
    promoted_column_name,
)
from mongosql.shared.const import SharedConst
from mongosql.shared.logging import LogContext, Logger, create_default_logger

ID_VIRTUAL_COLUMN = "_id_virtual"

_TABLE_EXISTS_SQL = (
    "SELECT COUNT(*) FROM information_schema.TABLES "
    "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = %s"
)
_COLUMNS_SQL = (
    "SELECT COLUMN_NAME FROM information_schema.COLUMNS "
    "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = %s"
)
_COLLECTIONS_SQL = (
    "SELECT DISTINCT TABLE_NAME FROM information_schema.COLUMNS "
    f"WHERE TABLE_SCHEMA = DATABASE() AND COLUMN_NAME = '{ID_VIRTUAL_COLUMN}' "
    "ORDER BY TABLE_NAME"
)


class MySQLSchemaManager:
    """MySQL 스키마 관리자."""

    def __init__(
        self,
        session: ConnectionSession,
        identifier_helper: Optional[SQLIdentifierHelper] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        self._session = session
        self._identifier = identifier_helper or SQLIdentifierHelper()
        self._logger = logger or create_default_logger("MySQLSchemaManager")

    def create_table_sql(self, name: str) -> str:
        """컬렉션 테이블 DDL을 반환한다."""

        table = self._identifier.quote_table(name)
        unique_key = self._identifier.quote_identifier(f"uq_{name}__id"[:64])
        return (
            f"CREATE TABLE IF NOT EXISTS {table} ("
            '"id" BIGINT UNSIGNED NOT NULL AUTO_INCREMENT, '
            '"document" JSON NOT NULL, '
            f'"{ID_VIRTUAL_COLUMN}" VARCHAR(64) CHARACTER SET utf8mb4 COLLATE utf8mb4_bin '
            "GENERATED ALWAYS AS (JSON_UNQUOTE(JSON_EXTRACT(\"document\", '$._id'))) VIRTUAL, "
            'PRIMARY KEY ("id"), '
            f'UNIQUE KEY {unique_key} ("{ID_VIRTUAL_COLUMN}")'
            ") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci"
        )

    def promoted_column_sql(self, name: str, field: str) -> str:
        """승격 필드의 생성 컬럼 + 인덱스 추가 DDL을 반환한다."""

        table = self._identifier.quote_table(name)
        column = self._identifier.quote_identifier(promoted_column_name(field))
        path = json_path(field)
        return (
            f"ALTER TABLE {table} ADD COLUMN {column} VARCHAR(255) "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_bin "
            f"GENERATED ALWAYS AS (LEFT(JSON_UNQUOTE(JSON_EXTRACT(\"document\", '{path}')), 255)) VIRTUAL, "
            f"ADD KEY {column} ({column})"
        )

    def create_table(self, name: str) -> None:
        """컬렉션 테이블을 생성한다(이미 있으면 무시)."""

        self._session.execute(self.create_table_sql(name))
        self._logger.info(
            f"컬렉션 테이블을 보장했습니다: {name}",
            LogContext(collection=name, operation="ensure_collection"),
        )

    def ensure(self, schema: CollectionSchema) -> CollectionSchema:
        """테이블과 승격 컬럼을 보장하고 실제 승격된 필드를 반환한다."""

        self.create_table(schema.name)
        fields = [field for field in dict.fromkeys(schema.indexed_fields) if field != "_id"]
        if not fields:
            return CollectionSchema(name=schema.name)
        existing = self.column_names(schema.name)
        promoted: List[str] = []
        for field in fields:
            try:
                column = promoted_column_name(field)
                if column not in existing:
                    self._session.execute(self.promoted_column_sql(schema.name, field))
                promoted.append(field)
            except (UnsupportedQueryError, mysql_errors.Error) as exc:
                self._logger.warning(
                    f"필드 승격을 건너뜁니다: {field} ({exc})",
                    LogContext(collection=schema.name, operation="ensure_collection"),
                )
        return CollectionSchema(name=schema.name, indexed_fields=promoted)

    def column_names(self, name: str) -> Set[str]:
        """테이블의 컬럼 이름 집합을 반환한다."""

        rows = self._session.fetch_all(_COLUMNS_SQL, [self._identifier.plain_identifier(name)])
        return {_text(row[0]) for row in rows}

    def table_exists(self, name: str) -> bool:
        rows = self._session.fetch_all(_TABLE_EXISTS_SQL, [self._identifier.plain_identifier(name)])
        return bool(rows and int(rows[0][0]) > 0)

    def drop(self, name: str) -> bool:
        """테이블을 삭제하고 삭제 전 존재 여부를 반환한다."""

        table = self._identifier.quote_table(name)
        existed = self.table_exists(name)
        self._session.execute(f"DROP TABLE IF EXISTS {table}")
        if existed:
            self._logger.info(
                f"컬렉션 테이블을 삭제했습니다: {name}",
                LogContext(collection=name, operation="drop_collection"),
            )
        return existed

    def list_collections(self) -> List[str]:
        """문서 컬렉션 테이블 이름 목록을 반환한다."""

        return [_text(row[0]) for row in self._session.fetch_all(_COLLECTIONS_SQL)]

    def rename(self, name: str, new_name: str) -> None:
        """테이블 이름을 변경한다."""

        source = self._identifier.quote_table(name)
        target = self._identifier.quote_table(new_name)
        self._session.execute(f"RENAME TABLE {source} TO {target}")


def _text(value: object) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.decode(SharedConst.DEFAULT_ENCODING)
    return str(value)

"""
목적: MySQL 계열 문서 엔진을 제공한다.
설명: 컬렉션 CRUD/조회 연산을 필터 컴파일러, 문서 매퍼, 스키마 관리자로 조합해 수행한다.
    - 쓰기: 테이블이 없으면 생성 후 수행(외부에서 삭제된 경우 1회 재시도)
    - 읽기: 테이블이 없으면 빈 결과/0
    - 갱신/교체: 대상 행을 FOR UPDATE 로 읽어 파이썬에서 병합 후 행 단위로 기록
    - 중복 _id 는 ConflictError, 연결 계열 오류는 DBConnectionError 로 변환
디자인 패턴: 어댑터 패턴
참조: src/mongosql/integrations/db/base/engine.py, src/mongosql/integrations/db/engines/mysql/filter_compiler.py
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Set, TypeVar

from mysql.connector import errors as mysql_errors

from mongosql.integrations.db.base.engine import BaseDocumentEngine
from mongosql.integrations.db.base.errors import (
    ConflictError,
    DBConnectionError,
    MongoSqlException,
)
from mongosql.integrations.db.base.models import CollectionSchema, Document, Query
from mongosql.integrations.db.base.projection import apply_projection, validate_projection
from mongosql.integrations.db.base.session import ConnectionSession
from mongosql.integrations.db.base.updates import (
    apply_replacement,
    apply_update,
    validate_replacement,
    validate_update,
)
from mongosql.integrations.db.engines.mysql.document_mapper import MySQLDocumentMapper
from mongosql.integrations.db.engines.mysql.filter_compiler import MySQLFilterCompiler
from mongosql.integrations.db.engines.mysql.schema_manager import MySQLSchemaManager
from mongosql.integrations.db.engines.sql_common import SQLIdentifierHelper
from mongosql.shared.logging import LogContext, Logger, create_default_logger

ER_DUP_ENTRY = 1062
ER_NO_SUCH_TABLE = 1146
ER_TABLE_EXISTS = 1050

T = TypeVar("T")
_RAISE = object()


class MySQLDocumentEngine(BaseDocumentEngine):
    """MySQL 계열 문서 엔진 구현체."""

    def __init__(
        self,
        session: ConnectionSession,
        logger: Optional[Logger] = None,
        dialect_name: str = "mysql",
    ) -> None:
        self._session = session
        self._dialect_name = dialect_name
        self._logger = logger or create_default_logger("MySQLDocumentEngine")
        self._identifier = SQLIdentifierHelper()
        self._compiler = MySQLFilterCompiler(self._identifier)
        self._mapper = MySQLDocumentMapper()
        self._schema = MySQLSchemaManager(session, self._identifier, self._logger)
        self._ensured: Set[str] = set()
        self._promoted: Dict[str, FrozenSet[str]] = {}
        self._state_lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._dialect_name

    def ensure_collection(self, schema: CollectionSchema) -> CollectionSchema:
        self._identifier.quote_table(schema.name)
        effective = self._guard(
            "ensure_collection", schema.name, lambda: self._schema.ensure(schema)
        )
        with self._state_lock:
            self._ensured.add(schema.name)
            self._promoted[schema.name] = frozenset(effective.indexed_fields)
        return effective

    def drop_collection(self, collection: str) -> bool:
        self._identifier.quote_table(collection)
        dropped = self._guard("drop_collection", collection, lambda: self._schema.drop(collection))
        self._forget(collection)
        return dropped

    def list_collections(self) -> List[str]:
        return self._guard("list_collections", None, self._schema.list_collections)

    def rename_collection(self, collection: str, new_name: str) -> bool:
        self._identifier.quote_table(collection)
        self._identifier.quote_table(new_name)
        try:
            self._schema.rename(collection, new_name)
        except mysql_errors.Error as exc:
            if exc.errno == ER_NO_SUCH_TABLE:
                return False
            if exc.errno == ER_TABLE_EXISTS:
                raise ConflictError(
                    f"같은 이름의 컬렉션이 이미 있습니다: {new_name}",
                    metadata={"collection": new_name},
                    original=exc,
                ) from exc
            raise self._translate(exc, "rename_collection", collection) from exc
        with self._state_lock:
            promoted = self._promoted.pop(collection, frozenset())
            was_ensured = collection in self._ensured
            self._ensured.discard(collection)
            if was_ensured:
                self._ensured.add(new_name)
                self._promoted[new_name] = promoted
        self._logger.info(
            f"컬렉션 이름을 변경했습니다: {collection} → {new_name}",
            LogContext(collection=collection, operation="rename_collection"),
        )
        return True

    def insert_one(self, collection: str, document: Mapping[str, Any]) -> Document:
        return self.insert_many(collection, [document])[0]

    def insert_many(
        self, collection: str, documents: Sequence[Mapping[str, Any]]
    ) -> List[Document]:
        table = self._identifier.quote_table(collection)
        prepared = [self._mapper.prepare(document) for document in documents]
        payloads = [self._mapper.encode(document) for document in prepared]
        if not prepared:
            return []
        ids = [document["_id"] for document in prepared]
        if len(set(ids)) != len(ids):
            raise ConflictError(
                "한 번에 저장하는 문서의 _id 가 중복됩니다.",
                metadata={"collection": collection},
            )
        sql = f'INSERT INTO {table} ("document") VALUES (%s)'

        def write() -> None:
            with self._session.transaction():
                for payload in payloads:
                    self._session.execute(sql, [payload])

        self._guard("insert", collection, lambda: self._write_with_table(collection, write))
        self._logger.debug(
            f"문서 {len(prepared)}건을 저장했습니다.",
            LogContext(collection=collection, operation="insert"),
        )
        return prepared

    def find(self, collection: str, query: Query) -> List[Document]:
        table = self._identifier.quote_table(collection)
        validate_projection(query.projection)
        where, params = self._compiler.compile_where(query.filter, self._promoted_fields(collection))
        order, order_params = self._compiler.compile_sort(query.sort)
        page, page_params = self._compiler.compile_pagination(query.limit, query.skip)
        sql = f'SELECT "document" FROM {table}'
        if where:
            sql += f" WHERE {where}"
        sql += f" ORDER BY {order}"
        if page:
            sql += f" {page}"
        rows = self._guard(
            "find",
            collection,
            lambda: self._session.fetch_all(sql, params + order_params + page_params),
            missing=[],
        )
        return [apply_projection(self._mapper.decode(row[0]), query.projection) for row in rows]

    def count(self, collection: str, filter: Optional[Dict[str, Any]] = None) -> int:
        table = self._identifier.quote_table(collection)
        where, params = self._compiler.compile_where(filter or {}, self._promoted_fields(collection))
        sql = f"SELECT COUNT(*) FROM {table}"
        if where:
            sql += f" WHERE {where}"
        rows = self._guard(
            "count", collection, lambda: self._session.fetch_all(sql, params), missing=[]
        )
        return int(rows[0][0]) if rows else 0

    def update(
        self,
        collection: str,
        filter: Dict[str, Any],
        update: Mapping[str, Any],
        multi: bool = False,
    ) -> int:
        validate_update(update)
        return self._rewrite(
            "update", collection, filter, multi, lambda document: apply_update(document, update)
        )

    def replace_one(
        self,
        collection: str,
        filter: Dict[str, Any],
        replacement: Mapping[str, Any],
    ) -> int:
        validate_replacement(replacement)
        self._mapper.encode(replacement)
        return self._rewrite(
            "replace",
            collection,
            filter,
            False,
            lambda document: apply_replacement(document, replacement),
        )

    def delete(self, collection: str, filter: Dict[str, Any], multi: bool = False) -> int:
        table = self._identifier.quote_table(collection)
        where, params = self._compiler.compile_where(filter, self._promoted_fields(collection))
        sql = f"DELETE FROM {table}"
        if where:
            sql += f" WHERE {where}"
        if not multi:
            sql += ' ORDER BY "id" ASC LIMIT 1'
        deleted = self._guard(
            "delete", collection, lambda: self._session.execute(sql, params), missing=0
        )
        self._logger.debug(
            f"문서 {deleted}건을 삭제했습니다.",
            LogContext(collection=collection, operation="delete"),
        )
        return deleted

    def _rewrite(
        self,
        operation: str,
        collection: str,
        filter: Dict[str, Any],
        multi: bool,
        transform: Callable[[Document], Document],
    ) -> int:
        table = self._identifier.quote_table(collection)
        where, params = self._compiler.compile_where(filter, self._promoted_fields(collection))
        select_sql = f'SELECT "id", "document" FROM {table}'
        if where:
            select_sql += f" WHERE {where}"
        select_sql += ' ORDER BY "id" ASC'
        if not multi:
            select_sql += " LIMIT 1"
        select_sql += " FOR UPDATE"
        update_sql = f'UPDATE {table} SET "document" = %s WHERE "id" = %s'

        def run() -> int:
            matched = 0
            with self._session.transaction():
                for row_id, raw in self._session.fetch_all(select_sql, params):
                    current = self._mapper.decode(raw)
                    updated = transform(current)
                    matched += 1
                    if updated != current:
                        self._session.execute(update_sql, [self._mapper.encode(updated), row_id])
            return matched

        matched = self._guard(operation, collection, run, missing=0)
        self._logger.debug(
            f"문서 {matched}건을 갱신했습니다.",
            LogContext(collection=collection, operation=operation),
        )
        return matched

    def _write_with_table(self, collection: str, write: Callable[[], None]) -> None:
        if collection not in self._ensured:
            self._ensure_table(collection)
        try:
            write()
        except mysql_errors.Error as exc:
            if exc.errno != ER_NO_SUCH_TABLE:
                raise
            self._forget(collection)
            self._ensure_table(collection)
            write()

    def _ensure_table(self, collection: str) -> None:
        self._schema.create_table(collection)
        with self._state_lock:
            self._ensured.add(collection)

    def _promoted_fields(self, collection: str) -> FrozenSet[str]:
        with self._state_lock:
            return self._promoted.get(collection, frozenset())

    def _forget(self, collection: str) -> None:
        with self._state_lock:
            self._ensured.discard(collection)
            self._promoted.pop(collection, None)

    def _guard(
        self,
        operation: str,
        collection: Optional[str],
        action: Callable[[], T],
        missing: Any = _RAISE,
    ) -> T:
        try:
            return action()
        except mysql_errors.Error as exc:
            if exc.errno == ER_NO_SUCH_TABLE and missing is not _RAISE:
                if collection is not None:
                    self._forget(collection)
                return missing
            raise self._translate(exc, operation, collection) from exc

    def _translate(
        self, exc: mysql_errors.Error, operation: str, collection: Optional[str]
    ) -> MongoSqlException:
        metadata = {"collection": collection, "operation": operation, "errno": exc.errno}
        self._logger.error(
            f"{operation} 실행 중 오류가 발생했습니다: {exc}",
            LogContext(collection=collection, operation=operation),
        )
        if exc.errno == ER_DUP_ENTRY:
            return ConflictError(
                "같은 _id 를 가진 문서가 이미 있습니다.",
                hint="_id 를 생략하면 새 식별자가 생성됩니다.",
                metadata=metadata,
                original=exc,
            )
        if isinstance(exc, (mysql_errors.OperationalError, mysql_errors.InterfaceError)):
            return DBConnectionError(
                "데이터베이스 연결 오류가 발생했습니다.",
                hint="연결이 끊긴 드라이버는 close() 후 다시 생성하세요.",
                metadata=metadata,
                original=exc,
            )
        return MongoSqlException(
            f"{operation} 실행에 실패했습니다.", metadata=metadata, original=exc
        )

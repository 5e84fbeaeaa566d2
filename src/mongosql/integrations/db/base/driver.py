"""
목적: 문서 저장소 드라이버를 제공한다.
설명: 방언(연결 팩토리 + 버전 정책 + 엔진 팩토리)을 조합해
    UNCONNECTED → CONNECTING → VERSION_CHECKING → READY 상태 전이를 수행하고,
    READY 상태에서만 컬렉션 단위 문서 연산을 엔진에 위임한다.
    연결/버전 검증 실패는 FAILED 로 전이되며, close() 전까지 복구하지 않는다.
디자인 패턴: 상태 기계, 퍼사드
참조: src/mongosql/integrations/db/base/dialect.py, src/mongosql/integrations/db/base/engine.py
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from mongosql.integrations.db.base.dialect import Dialect
from mongosql.integrations.db.base.engine import BaseDocumentEngine
from mongosql.integrations.db.base.errors import (
    NotReadyError,
    UnsupportedQueryError,
)
from mongosql.integrations.db.base.models import (
    CollectionSchema,
    Document,
    DriverConfig,
    Query,
    ServerVersion,
)
from mongosql.integrations.db.base.session import ConnectionSession
from mongosql.shared.logging import LogContext, Logger, create_default_logger


class DriverState(str, Enum):
    """드라이버 상태."""

    UNCONNECTED = "UNCONNECTED"
    CONNECTING = "CONNECTING"
    VERSION_CHECKING = "VERSION_CHECKING"
    READY = "READY"
    FAILED = "FAILED"


class DocumentDriver:
    """문서 저장소 드라이버.

    Args:
        config: 불변 드라이버 설정.
        dialect: 사용할 SQL 방언.
        logger: 주입 가능한 로거.
    """

    def __init__(
        self,
        config: DriverConfig,
        dialect: Dialect,
        logger: Optional[Logger] = None,
    ) -> None:
        self._config = config
        self._dialect = dialect
        base_logger = logger or create_default_logger("DocumentDriver")
        self._logger = base_logger.with_context(LogContext(dialect=dialect.name))
        self._lock = threading.Lock()
        self._state = DriverState.UNCONNECTED
        self._connection: Any = None
        self._session: Optional[ConnectionSession] = None
        self._engine: Optional[BaseDocumentEngine] = None
        self._server_version: Optional[ServerVersion] = None
        self._failure: Optional[BaseException] = None

    @property
    def config(self) -> DriverConfig:
        return self._config

    @property
    def dialect_name(self) -> str:
        return self._dialect.name

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is DriverState.READY

    @property
    def server_version(self) -> Optional[ServerVersion]:
        """검증된 서버 버전을 반환한다. 연결 전에는 None이다."""

        return self._server_version

    @property
    def dsn(self) -> str:
        """연결 식별용 DSN을 반환한다."""

        return self._dialect.connection_factory.build_dsn(self._config.options)

    def connect(self) -> "DocumentDriver":
        """연결과 버전 검증을 수행해 READY 상태로 만든다.

        동시 호출 시 연결 생성과 버전 검증은 한 번만 수행된다.
        """

        with self._lock:
            if self._state is DriverState.READY:
                return self
            if self._state is DriverState.FAILED:
                raise NotReadyError(
                    "이전 연결 시도가 실패한 드라이버입니다. close() 후 다시 연결하세요.",
                    original=self._failure,
                )
            factory = self._dialect.connection_factory
            self._state = DriverState.CONNECTING
            try:
                self._logger.info("연결을 생성합니다.", metadata={"dsn": self.dsn})
                connection = factory.create_connection(
                    self._config.options, self._config.driver_options
                )
            except Exception as exc:
                self._fail(exc)
                raise
            self._state = DriverState.VERSION_CHECKING
            try:
                version = self._dialect.version_gate(self._logger).assert_supported(connection)
            except Exception as exc:
                factory.close_connection(connection)
                self._fail(exc)
                raise
            self._connection = connection
            self._server_version = version
            self._session = ConnectionSession(connection, self._logger)
            self._engine = self._dialect.engine_factory(self._session, self._logger)
            self._state = DriverState.READY
            self._logger.info(
                "드라이버가 준비되었습니다.",
                metadata={"family": version.family, "version": str(version)},
            )
            return self

    def close(self) -> None:
        """연결을 종료하고 UNCONNECTED 상태로 되돌린다."""

        with self._lock:
            if self._connection is not None:
                self._dialect.connection_factory.close_connection(self._connection)
                self._logger.info("연결을 종료했습니다.")
            self._connection = None
            self._session = None
            self._engine = None
            self._server_version = None
            self._failure = None
            self._state = DriverState.UNCONNECTED

    def insert_one(self, collection: str, document: Mapping[str, Any]) -> Document:
        """문서 하나를 저장한다."""

        return self._ready_engine("insert_one", collection).insert_one(collection, document)

    def insert_many(
        self, collection: str, documents: Sequence[Mapping[str, Any]]
    ) -> List[Document]:
        """여러 문서를 저장한다."""

        return self._ready_engine("insert_many", collection).insert_many(collection, documents)

    def find(
        self,
        collection: str,
        filter: Optional[Dict[str, Any]] = None,
        projection: Optional[Dict[str, Any]] = None,
        sort: Any = None,
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> List[Document]:
        """조건에 맞는 문서 목록을 반환한다."""

        engine = self._ready_engine("find", collection)
        query = _build_query(filter, projection, sort, limit, skip)
        return engine.find(collection, query)

    def find_query(self, collection: str, query: Query) -> List[Document]:
        """Query 모델로 조회한다."""

        return self._ready_engine("find", collection).find(collection, query)

    def find_one(
        self,
        collection: str,
        filter: Optional[Dict[str, Any]] = None,
        projection: Optional[Dict[str, Any]] = None,
        sort: Any = None,
    ) -> Optional[Document]:
        """조건에 맞는 첫 문서를 반환한다."""

        documents = self.find(collection, filter, projection, sort, limit=1)
        return documents[0] if documents else None

    def find_by_id(
        self,
        collection: str,
        doc_id: Any,
        projection: Optional[Dict[str, Any]] = None,
    ) -> Optional[Document]:
        """식별자로 문서를 조회한다."""

        return self.find_one(collection, {"_id": str(doc_id)}, projection)

    def count(self, collection: str, filter: Optional[Dict[str, Any]] = None) -> int:
        """조건에 맞는 문서 수를 반환한다."""

        return self._ready_engine("count", collection).count(collection, filter or {})

    def update_one(
        self, collection: str, filter: Dict[str, Any], update: Mapping[str, Any]
    ) -> int:
        """조건에 맞는 첫 문서를 부분 갱신한다."""

        return self._ready_engine("update_one", collection).update(
            collection, filter or {}, update, multi=False
        )

    def update_many(
        self, collection: str, filter: Dict[str, Any], update: Mapping[str, Any]
    ) -> int:
        """조건에 맞는 모든 문서를 부분 갱신한다."""

        return self._ready_engine("update_many", collection).update(
            collection, filter or {}, update, multi=True
        )

    def replace_one(
        self, collection: str, filter: Dict[str, Any], replacement: Mapping[str, Any]
    ) -> int:
        """조건에 맞는 첫 문서를 교체한다."""

        return self._ready_engine("replace_one", collection).replace_one(
            collection, filter or {}, replacement
        )

    def delete_one(self, collection: str, filter: Dict[str, Any]) -> int:
        """조건에 맞는 첫 문서를 삭제한다."""

        return self._ready_engine("delete_one", collection).delete(
            collection, filter or {}, multi=False
        )

    def delete_many(self, collection: str, filter: Dict[str, Any]) -> int:
        """조건에 맞는 모든 문서를 삭제한다."""

        return self._ready_engine("delete_many", collection).delete(
            collection, filter or {}, multi=True
        )

    def drop_collection(self, collection: str) -> bool:
        """컬렉션을 삭제한다."""

        return self._ready_engine("drop_collection", collection).drop_collection(collection)

    def ensure_collection(
        self, collection: str, indexed_fields: Optional[Sequence[str]] = None
    ) -> CollectionSchema:
        """컬렉션 테이블과 승격 컬럼을 보장한다."""

        engine = self._ready_engine("ensure_collection", collection)
        schema = CollectionSchema(name=collection, indexed_fields=list(indexed_fields or []))
        return engine.ensure_collection(schema)

    def list_collections(self) -> List[str]:
        """컬렉션 이름 목록을 반환한다."""

        return self._ready_engine("list_collections").list_collections()

    def rename_collection(self, collection: str, new_name: str) -> bool:
        """컬렉션 이름을 변경한다."""

        return self._ready_engine("rename_collection", collection).rename_collection(
            collection, new_name
        )

    def _ready_engine(self, operation: str, collection: Optional[str] = None) -> BaseDocumentEngine:
        engine = self._engine
        if self._state is not DriverState.READY or engine is None:
            raise NotReadyError(
                f"드라이버가 READY 상태가 아니므로 {operation} 을(를) 수행할 수 없습니다.",
                hint="connect()가 성공했는지 확인하세요.",
                metadata={"state": self._state.value, "operation": operation},
            )
        self._logger.debug(
            f"{operation} 호출", LogContext(collection=collection, operation=operation)
        )
        return engine

    def _fail(self, exc: BaseException) -> None:
        self._state = DriverState.FAILED
        self._failure = exc
        self._logger.error(
            f"드라이버 초기화에 실패했습니다: {exc}",
            metadata={"error": type(exc).__name__},
        )


def _build_query(
    filter: Optional[Dict[str, Any]],
    projection: Optional[Dict[str, Any]],
    sort: Any,
    limit: Optional[int],
    skip: int,
) -> Query:
    try:
        return Query(
            filter=filter or {},
            projection=projection,
            sort=sort,
            limit=limit,
            skip=skip or 0,
        )
    except ValidationError as exc:
        raise UnsupportedQueryError(
            "조회 요청 형식이 올바르지 않습니다.",
            metadata={"errors": exc.errors(include_url=False)},
            original=exc,
        ) from exc

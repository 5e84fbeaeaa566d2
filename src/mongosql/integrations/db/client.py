"""
목적: 문서 저장소 클라이언트를 제공한다.
설명: 드라이버를 주입받아 컬렉션 스키마 등록과 읽기/쓰기/삭제 DSL 빌더를 제공한다.
디자인 패턴: 파사드
참조: src/mongosql/integrations/db/base/driver.py, src/mongosql/integrations/db/query_builder/read_builder.py
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Sequence

from mongosql.integrations.db.base.driver import DocumentDriver
from mongosql.integrations.db.base.models import CollectionSchema
from mongosql.integrations.db.query_builder.delete_builder import DeleteBuilder
from mongosql.integrations.db.query_builder.read_builder import ReadBuilder
from mongosql.integrations.db.query_builder.write_builder import WriteBuilder


class DocumentClient:
    """문서 저장소 클라이언트."""

    def __init__(self, driver: DocumentDriver) -> None:
        self._driver = driver
        self._schemas: Dict[str, CollectionSchema] = {}
        self._schema_lock = threading.RLock()

    @property
    def driver(self) -> DocumentDriver:
        """내부 드라이버를 반환한다."""

        return self._driver

    def register_schema(
        self, collection: str, indexed_fields: Optional[Sequence[str]] = None
    ) -> CollectionSchema:
        """컬렉션을 보장하고 실제 승격된 필드 정보를 보관한다."""

        effective = self._driver.ensure_collection(collection, indexed_fields)
        with self._schema_lock:
            self._schemas[collection] = effective
        return effective

    def get_schema(self, collection: str) -> CollectionSchema:
        """등록된 컬렉션 스키마를 반환한다."""

        with self._schema_lock:
            schema = self._schemas.get(collection)
            if schema is None:
                return CollectionSchema(name=collection)
            return schema.model_copy(deep=True)

    def collections(self) -> List[str]:
        """컬렉션 이름 목록을 반환한다."""

        return self._driver.list_collections()

    def read(self, collection: str) -> ReadBuilder:
        """읽기 DSL 빌더를 반환한다."""

        return ReadBuilder(self._driver, collection)

    def write(self, collection: str) -> WriteBuilder:
        """쓰기 DSL 빌더를 반환한다."""

        return WriteBuilder(self._driver, collection)

    def delete(self, collection: str) -> DeleteBuilder:
        """삭제 DSL 빌더를 반환한다."""

        return DeleteBuilder(self._driver, collection)

    def drop(self, collection: str) -> bool:
        """컬렉션을 삭제한다."""

        with self._schema_lock:
            self._schemas.pop(collection, None)
        return self._driver.drop_collection(collection)

"""
목적: 삭제 전용 DSL 빌더를 제공한다.
설명: ID 삭제와 QueryBuilder 기반 조건 삭제를 지원한다.
디자인 패턴: 파사드
참조: src/mongosql/integrations/db/base/query_builder.py
"""

from __future__ import annotations

from typing import List

from mongosql.integrations.db.base.driver import DocumentDriver
from mongosql.integrations.db.base.query_builder import QueryBuilder
from mongosql.integrations.db.query_builder.filter_chain import FilterChain


class DeleteBuilder(FilterChain):
    """삭제 DSL 빌더."""

    def __init__(self, driver: DocumentDriver, collection: str) -> None:
        self._driver = driver
        self._collection = collection
        self._builder = QueryBuilder()

    def by_id(self, doc_id: object) -> int:
        """ID로 삭제한다."""

        return self._driver.delete_one(self._collection, {"_id": str(doc_id)})

    def by_ids(self, doc_ids: List[object]) -> int:
        """여러 ID를 삭제한다."""

        if not doc_ids:
            return 0
        ids = [str(doc_id) for doc_id in doc_ids]
        return self._driver.delete_many(self._collection, {"_id": {"$in": ids}})

    def one(self) -> int:
        """조건에 맞는 첫 문서를 삭제한다."""

        return self._driver.delete_one(self._collection, self._builder.build_filter())

    def execute(self) -> int:
        """조건에 맞는 모든 문서를 삭제한다."""

        return self._driver.delete_many(self._collection, self._builder.build_filter())

"""
목적: 읽기 전용 DSL 빌더를 제공한다.
설명: QueryBuilder를 감싸 체이닝 후 fetch()/first()/count()로 조회한다.
디자인 패턴: 빌더 패턴
참조: src/mongosql/integrations/db/base/query_builder.py
"""

from __future__ import annotations

from typing import List, Optional

from mongosql.integrations.db.base.driver import DocumentDriver
from mongosql.integrations.db.base.models import Document, Query
from mongosql.integrations.db.base.query_builder import QueryBuilder
from mongosql.integrations.db.query_builder.filter_chain import FilterChain


class ReadBuilder(FilterChain):
    """읽기 DSL 빌더."""

    def __init__(self, driver: DocumentDriver, collection: str) -> None:
        self._driver = driver
        self._collection = collection
        self._builder = QueryBuilder()

    def order_by(self, field: str) -> "ReadBuilder":
        self._builder.order_by(field)
        return self

    def asc(self) -> "ReadBuilder":
        self._builder.asc()
        return self

    def desc(self) -> "ReadBuilder":
        self._builder.desc()
        return self

    def limit(self, value: int) -> "ReadBuilder":
        self._builder.limit(value)
        return self

    def offset(self, value: int) -> "ReadBuilder":
        self._builder.offset(value)
        return self

    def select(self, *fields: str) -> "ReadBuilder":
        self._builder.select(*fields)
        return self

    def exclude(self, *fields: str) -> "ReadBuilder":
        self._builder.exclude(*fields)
        return self

    def build(self) -> Query:
        """Query 모델을 반환한다."""

        return self._builder.build()

    def fetch(self) -> List[Document]:
        """조회 결과를 반환한다."""

        return self._driver.find_query(self._collection, self.build())

    def first(self) -> Optional[Document]:
        """첫 문서를 반환한다."""

        query = self.build().model_copy(update={"limit": 1})
        documents = self._driver.find_query(self._collection, query)
        return documents[0] if documents else None

    def count(self) -> int:
        """조건에 맞는 문서 수를 반환한다."""

        return self._driver.count(self._collection, self._builder.build_filter())

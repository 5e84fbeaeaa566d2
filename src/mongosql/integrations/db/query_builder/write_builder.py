"""
목적: 쓰기 전용 DSL 빌더를 제공한다.
설명: 문서 저장과, where 체인으로 대상을 고른 뒤 set/unset/inc 로 갱신하는 호출을 제공한다.
    예) client.write("posts").where("slug").eq("hello").set("title", "Hi").update_one()
디자인 패턴: 파사드, 빌더 패턴
참조: src/mongosql/integrations/db/base/driver.py
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from mongosql.integrations.db.base.driver import DocumentDriver
from mongosql.integrations.db.base.models import Document
from mongosql.integrations.db.base.query_builder import QueryBuilder
from mongosql.integrations.db.query_builder.filter_chain import FilterChain


class WriteBuilder(FilterChain):
    """쓰기 DSL 빌더."""

    def __init__(self, driver: DocumentDriver, collection: str) -> None:
        self._driver = driver
        self._collection = collection
        self._builder = QueryBuilder()
        self._update: Dict[str, Dict[str, Any]] = {}

    def insert_one(self, document: Mapping[str, Any]) -> Document:
        """단일 문서를 저장한다."""

        return self._driver.insert_one(self._collection, document)

    def insert_many(self, documents: Sequence[Mapping[str, Any]]) -> List[Document]:
        """여러 문서를 저장한다."""

        return self._driver.insert_many(self._collection, documents)

    def set(self, field: str, value: Any) -> "WriteBuilder":
        self._update.setdefault("$set", {})[field] = value
        return self

    def unset(self, field: str) -> "WriteBuilder":
        self._update.setdefault("$unset", {})[field] = ""
        return self

    def inc(self, field: str, amount: float = 1) -> "WriteBuilder":
        self._update.setdefault("$inc", {})[field] = amount
        return self

    def update_one(self) -> int:
        """조건에 맞는 첫 문서를 갱신한다."""

        return self._driver.update_one(self._collection, self._builder.build_filter(), self._update)

    def update_many(self) -> int:
        """조건에 맞는 모든 문서를 갱신한다."""

        return self._driver.update_many(self._collection, self._builder.build_filter(), self._update)

    def replace_one(self, replacement: Mapping[str, Any]) -> int:
        """조건에 맞는 첫 문서를 교체한다."""

        return self._driver.replace_one(self._collection, self._builder.build_filter(), replacement)

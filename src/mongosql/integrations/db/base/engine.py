"""
목적: 문서 엔진 인터페이스를 정의한다.
설명: 컬렉션 단위 CRUD/조회 연산을 방언별 SQL로 수행하는 엔진의 계약이다.
    드라이버는 READY 상태에서만 이 인터페이스를 호출한다.
디자인 패턴: 전략 패턴
참조: src/mongosql/integrations/db/base/driver.py, src/mongosql/integrations/db/engines/mysql/engine.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence

from mongosql.integrations.db.base.models import CollectionSchema, Document, Query


class BaseDocumentEngine(ABC):
    """문서 엔진 인터페이스."""

    @property
    @abstractmethod
    def name(self) -> str:
        """엔진 이름을 반환한다."""

    @abstractmethod
    def ensure_collection(self, schema: CollectionSchema) -> CollectionSchema:
        """컬렉션 테이블을 보장하고 실제 승격된 필드 목록을 반환한다."""

    @abstractmethod
    def drop_collection(self, collection: str) -> bool:
        """컬렉션을 삭제하고 존재 여부를 반환한다."""

    @abstractmethod
    def list_collections(self) -> List[str]:
        """컬렉션 이름 목록을 반환한다."""

    @abstractmethod
    def rename_collection(self, collection: str, new_name: str) -> bool:
        """컬렉션 이름을 변경한다."""

    @abstractmethod
    def insert_one(self, collection: str, document: Mapping[str, Any]) -> Document:
        """단일 문서를 저장하고 _id가 포함된 문서를 반환한다."""

    @abstractmethod
    def insert_many(
        self, collection: str, documents: Sequence[Mapping[str, Any]]
    ) -> List[Document]:
        """여러 문서를 하나의 트랜잭션으로 저장한다."""

    @abstractmethod
    def find(self, collection: str, query: Query) -> List[Document]:
        """조건에 맞는 문서를 조회한다."""

    @abstractmethod
    def count(self, collection: str, filter: Optional[Dict[str, Any]] = None) -> int:
        """조건에 맞는 문서 수를 반환한다."""

    @abstractmethod
    def update(
        self,
        collection: str,
        filter: Dict[str, Any],
        update: Mapping[str, Any],
        multi: bool = False,
    ) -> int:
        """부분 갱신을 수행하고 변경된 문서 수를 반환한다."""

    @abstractmethod
    def replace_one(
        self,
        collection: str,
        filter: Dict[str, Any],
        replacement: Mapping[str, Any],
    ) -> int:
        """문서 하나를 통째로 교체한다. _id는 유지된다."""

    @abstractmethod
    def delete(self, collection: str, filter: Dict[str, Any], multi: bool = False) -> int:
        """조건에 맞는 문서를 삭제하고 삭제된 수를 반환한다."""

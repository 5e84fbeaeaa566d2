"""
목적: 공통 DSL 기반 QueryBuilder를 제공한다.
설명: 체이닝 방식으로 필터/정렬/페이지네이션/projection을 구성해
    문서 저장소 어휘(Mongo 스타일 필터)의 Query 모델을 생성한다.
    예) QueryBuilder().where("age").gte(18).order_by("name").asc().limit(10).build()
디자인 패턴: 빌더 패턴
참조: src/mongosql/integrations/db/base/models.py
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from mongosql.integrations.db.base.models import Query, SortField, SortOrder


class QueryBuilder:
    """쿼리 DSL 빌더 클래스."""

    def __init__(self) -> None:
        self._conditions: List[Tuple[str, Dict[str, Any]]] = []
        self._sort_fields: List[SortField] = []
        self._limit: Optional[int] = None
        self._skip: int = 0
        self._projection: Optional[Dict[str, int]] = None
        self._logic: str = "AND"
        self._pending_field: Optional[str] = None
        self._pending_sort_field: Optional[str] = None

    def where(self, field: str) -> "QueryBuilder":
        """필터 대상 필드를 지정한다."""

        self._pending_field = field
        return self

    def and_(self) -> "QueryBuilder":
        """조건 결합을 AND로 설정한다."""

        self._logic = "AND"
        return self

    def or_(self) -> "QueryBuilder":
        """조건 결합을 OR로 설정한다."""

        self._logic = "OR"
        return self

    def eq(self, value: object) -> "QueryBuilder":
        """동등 조건을 추가한다."""

        return self._add_condition({"$eq": value})

    def ne(self, value: object) -> "QueryBuilder":
        """불일치 조건을 추가한다."""

        return self._add_condition({"$ne": value})

    def gt(self, value: object) -> "QueryBuilder":
        """초과 조건을 추가한다."""

        return self._add_condition({"$gt": value})

    def gte(self, value: object) -> "QueryBuilder":
        """이상 조건을 추가한다."""

        return self._add_condition({"$gte": value})

    def lt(self, value: object) -> "QueryBuilder":
        """미만 조건을 추가한다."""

        return self._add_condition({"$lt": value})

    def lte(self, value: object) -> "QueryBuilder":
        """이하 조건을 추가한다."""

        return self._add_condition({"$lte": value})

    def in_(self, values: List[object]) -> "QueryBuilder":
        """포함 조건을 추가한다."""

        return self._add_condition({"$in": list(values)})

    def not_in(self, values: List[object]) -> "QueryBuilder":
        """미포함 조건을 추가한다."""

        return self._add_condition({"$nin": list(values)})

    def exists(self, flag: bool = True) -> "QueryBuilder":
        """필드 존재 여부 조건을 추가한다."""

        return self._add_condition({"$exists": flag})

    def regex(self, pattern: str, ignore_case: bool = False) -> "QueryBuilder":
        """정규식 조건을 추가한다."""

        condition: Dict[str, Any] = {"$regex": pattern}
        if ignore_case:
            condition["$options"] = "i"
        return self._add_condition(condition)

    def contains(self, value: object) -> "QueryBuilder":
        """배열/객체 포함 조건을 추가한다."""

        return self._add_condition({"$has": value})

    def all_(self, values: List[object]) -> "QueryBuilder":
        """배열이 모든 값을 포함하는 조건을 추가한다."""

        return self._add_condition({"$all": list(values)})

    def size(self, value: int) -> "QueryBuilder":
        """배열 길이 조건을 추가한다."""

        return self._add_condition({"$size": value})

    def mod(self, divisor: int, remainder: int) -> "QueryBuilder":
        """나머지 조건을 추가한다."""

        return self._add_condition({"$mod": [divisor, remainder]})

    def order_by(self, field: str) -> "QueryBuilder":
        """정렬 필드를 지정한다."""

        self._pending_sort_field = field
        return self

    def asc(self) -> "QueryBuilder":
        """오름차순 정렬을 추가한다."""

        return self._add_sort(SortOrder.ASC)

    def desc(self) -> "QueryBuilder":
        """내림차순 정렬을 추가한다."""

        return self._add_sort(SortOrder.DESC)

    def limit(self, value: int) -> "QueryBuilder":
        """조회 제한을 설정한다."""

        if value < 0:
            raise ValueError("limit는 0 이상이어야 합니다.")
        self._limit = value
        return self

    def offset(self, value: int) -> "QueryBuilder":
        """조회 오프셋을 설정한다."""

        if value < 0:
            raise ValueError("offset은 0 이상이어야 합니다.")
        self._skip = value
        return self

    def select(self, *fields: str) -> "QueryBuilder":
        """포함 projection을 설정한다."""

        self._projection = {field: 1 for field in fields}
        return self

    def exclude(self, *fields: str) -> "QueryBuilder":
        """제외 projection을 설정한다."""

        self._projection = {field: 0 for field in fields}
        return self

    def build_filter(self) -> Dict[str, Any]:
        """Mongo 스타일 필터 사전을 생성한다."""

        clauses = [{field: condition} for field, condition in self._conditions]
        if not clauses:
            return {}
        if self._logic == "OR":
            return {"$or": clauses}
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}

    def build(self) -> Query:
        """Query 모델을 생성한다."""

        return Query(
            filter=self.build_filter(),
            projection=dict(self._projection) if self._projection else None,
            sort=list(self._sort_fields),
            limit=self._limit,
            skip=self._skip,
        )

    def reset(self) -> "QueryBuilder":
        """빌더 상태를 초기화한다."""

        self.__init__()
        return self

    def _add_condition(self, condition: Dict[str, Any]) -> "QueryBuilder":
        if self._pending_field is None:
            raise ValueError("where()로 필드를 먼저 지정해야 합니다.")
        self._conditions.append((self._pending_field, condition))
        self._pending_field = None
        return self

    def _add_sort(self, order: SortOrder) -> "QueryBuilder":
        if self._pending_sort_field is None:
            raise ValueError("order_by()로 필드를 먼저 지정해야 합니다.")
        self._sort_fields.append(SortField(field=self._pending_sort_field, order=order))
        self._pending_sort_field = None
        return self

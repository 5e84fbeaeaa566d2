"""
목적: 빌더 공통 필터 체이닝 메서드를 제공한다.
설명: 내부 QueryBuilder 에 조건 메서드를 위임하고 자기 자신을 반환한다.
디자인 패턴: 믹스인, 위임
참조: src/mongosql/integrations/db/base/query_builder.py
"""

from __future__ import annotations

from typing import List, TypeVar

from mongosql.integrations.db.base.query_builder import QueryBuilder

Self = TypeVar("Self", bound="FilterChain")


class FilterChain:
    """필터 체이닝 믹스인."""

    _builder: QueryBuilder

    def where(self: Self, field: str) -> Self:
        self._builder.where(field)
        return self

    def and_(self: Self) -> Self:
        self._builder.and_()
        return self

    def or_(self: Self) -> Self:
        self._builder.or_()
        return self

    def eq(self: Self, value: object) -> Self:
        self._builder.eq(value)
        return self

    def ne(self: Self, value: object) -> Self:
        self._builder.ne(value)
        return self

    def gt(self: Self, value: object) -> Self:
        self._builder.gt(value)
        return self

    def gte(self: Self, value: object) -> Self:
        self._builder.gte(value)
        return self

    def lt(self: Self, value: object) -> Self:
        self._builder.lt(value)
        return self

    def lte(self: Self, value: object) -> Self:
        self._builder.lte(value)
        return self

    def in_(self: Self, values: List[object]) -> Self:
        self._builder.in_(values)
        return self

    def not_in(self: Self, values: List[object]) -> Self:
        self._builder.not_in(values)
        return self

    def exists(self: Self, flag: bool = True) -> Self:
        self._builder.exists(flag)
        return self

    def regex(self: Self, pattern: str, ignore_case: bool = False) -> Self:
        self._builder.regex(pattern, ignore_case)
        return self

    def contains(self: Self, value: object) -> Self:
        self._builder.contains(value)
        return self

    def all_(self: Self, values: List[object]) -> Self:
        self._builder.all_(values)
        return self

    def size(self: Self, value: int) -> Self:
        self._builder.size(value)
        return self

    def mod(self: Self, divisor: int, remainder: int) -> Self:
        self._builder.mod(divisor, remainder)
        return self

"""
목적: 드라이버 전반에서 공통으로 사용하는 모델을 정의한다.
설명: 드라이버 설정, 연결 옵션, 서버 버전, 버전 정책, 컬렉션 스키마,
    문서 저장소 쿼리(filter/projection/sort/limit/skip) 모델을 제공한다.
디자인 패턴: 데이터 전송 객체(DTO), 값 객체
참조: src/mongosql/integrations/db/base/version.py, src/mongosql/integrations/db/base/driver.py
"""

from __future__ import annotations

import hashlib
import json
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mongosql.shared.const import SharedConst

Document = Dict[str, Any]

_STRING_OPTION_FIELDS = ("connection", "host", "socket", "dbname", "charset", "username", "password")


class ConnectionOptions(BaseModel):
    """연결 옵션 모델이다.

    Args:
        connection: SQL 방언 선택자(mysql, mariadb).
        host: 서버 호스트. socket이 비어 있을 때만 사용한다.
        port: 서버 포트.
        socket: 유닉스 소켓 경로. 비어 있지 않으면 host/port보다 우선한다.
        dbname: 데이터베이스 이름(필수).
        charset: 연결 문자셋.
        username: 접속 사용자.
        password: 접속 비밀번호.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    connection: str = "mysql"
    host: Optional[str] = None
    port: Optional[int] = None
    socket: Optional[str] = None
    dbname: Optional[str] = None
    charset: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)

    @model_validator(mode="before")
    @classmethod
    def _coerce_strings(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        coerced = dict(data)
        for key in _STRING_OPTION_FIELDS:
            value = coerced.get(key)
            if value is not None and not isinstance(value, str):
                coerced[key] = str(value)
        if coerced.get("port") == "":
            coerced["port"] = None
        return coerced


class DriverConfig(BaseModel):
    """드라이버 설정 모델이다.

    생성 이후 변경되지 않으며, identity()는 레지스트리 키로 사용된다.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    server: str = SharedConst.SERVER_NAME
    options: ConnectionOptions = Field(default_factory=ConnectionOptions)
    driver_options: Dict[str, Any] = Field(default_factory=dict, alias="driverOptions")

    def identity(self) -> str:
        """설정 내용을 기준으로 한 안정적인 식별자를 반환한다."""

        payload = self.model_dump(mode="json")
        encoded = json.dumps(payload, sort_keys=True, default=str, ensure_ascii=False)
        return hashlib.sha256(encoded.encode(SharedConst.DEFAULT_ENCODING)).hexdigest()


class ServerVersion(BaseModel):
    """검증을 통과한 서버 버전이다."""

    model_config = ConfigDict(frozen=True)

    major: int
    minor: int = 0
    patch: int = 0
    family: str
    raw: str

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


class ParsedVersion(BaseModel):
    """버전 문자열 파싱 결과이다.

    Args:
        candidate: 비교 대상이 되는 버전 번호 문자열.
        family_markers: 감지된 포크 마커 토큰 목록.
        family: 최종 결정된 엔진 계열 이름.
    """

    model_config = ConfigDict(frozen=True)

    candidate: str
    family_markers: List[str] = Field(default_factory=list)
    family: str


class VersionPolicy(BaseModel):
    """엔진 계열별 최소 버전 정책이다.

    Args:
        base_family: 기본 엔진 계열 이름.
        base_minimum: 기본 엔진 최소 버전(포함).
        fork_minimums: 포크 마커 토큰 → 최소 버전.
        compat_sentinel: 포크가 앞에 붙이는 복제 호환 버전 문자열.
    """

    model_config = ConfigDict(frozen=True)

    base_family: str = "mysql"
    base_minimum: str
    fork_minimums: Dict[str, str] = Field(default_factory=dict)
    compat_sentinel: Optional[str] = None

    def minimum_for(self, family: str) -> str:
        """계열에 해당하는 최소 버전을 반환한다."""

        for marker, minimum in self.fork_minimums.items():
            if marker.lower() == family:
                return minimum
        return self.base_minimum


class CollectionSchema(BaseModel):
    """컬렉션 스키마 힌트이다.

    indexed_fields 의 각 경로는 생성 컬럼으로 승격되어 인덱싱된다(최선 노력).
    """

    name: str
    indexed_fields: List[str] = Field(default_factory=list)


class SortOrder(str, Enum):
    """정렬 방향."""

    ASC = "ASC"
    DESC = "DESC"


class SortField(BaseModel):
    """정렬 필드."""

    field: str
    order: SortOrder = SortOrder.ASC


class Query(BaseModel):
    """문서 저장소 어휘로 표현된 조회 요청이다.

    sort 는 `{"a": 1, "b": -1}` 또는 `[("a", 1), ("b", -1)]` 형태도 받는다.
    limit 0 또는 None 은 제한 없음을 뜻한다.
    """

    filter: Dict[str, Any] = Field(default_factory=dict)
    projection: Optional[Dict[str, Any]] = None
    sort: List[SortField] = Field(default_factory=list)
    limit: Optional[int] = Field(default=None, ge=0)
    skip: int = Field(default=0, ge=0)

    @field_validator("filter", mode="before")
    @classmethod
    def _default_filter(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("sort", mode="before")
    @classmethod
    def _normalize_sort(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, dict):
            value = list(value.items())
        normalized = []
        for item in value:
            if isinstance(item, (tuple, list)) and len(item) == 2:
                field, direction = item
                normalized.append({"field": field, "order": _sort_order(direction)})
            else:
                normalized.append(item)
        return normalized


def _sort_order(direction: Any) -> SortOrder:
    if isinstance(direction, SortOrder):
        return direction
    if isinstance(direction, str):
        return SortOrder(direction.upper())
    if direction in (1, -1):
        return SortOrder.ASC if direction == 1 else SortOrder.DESC
    raise ValueError(f"허용되지 않는 정렬 방향: {direction!r}")

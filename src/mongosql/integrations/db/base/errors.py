"""
목적: 드라이버 예외 계층을 정의한다.
설명: 모든 드라이버 예외는 BaseAppException을 상속하며 고정된 에러 코드를 가진다.
    생성 단계 예외(설정/연결/버전)는 드라이버 생성을 중단시키고,
    연산 단계 예외(쿼리/충돌/인코딩)는 드라이버 상태를 바꾸지 않는다.
디자인 패턴: 도메인 예외 객체
참조: src/mongosql/shared/exceptions/base.py
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from mongosql.shared.exceptions import BaseAppException, ExceptionDetail


class MongoSqlException(BaseAppException):
    """드라이버 공통 예외."""

    CODE = "MSQL-ERROR"

    def __init__(
        self,
        message: str,
        hint: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        original: Optional[BaseException] = None,
    ) -> None:
        detail = ExceptionDetail(
            code=self.CODE,
            cause=str(original) if original is not None else message,
            hint=hint,
            metadata=metadata or {},
        )
        super().__init__(message, detail, original)


class ConfigurationError(MongoSqlException):
    """연결 옵션이 누락되었거나 잘못된 경우."""

    CODE = "MSQL-CONFIG"


class DBConnectionError(MongoSqlException):
    """전송 계층 또는 인증 실패."""

    CODE = "MSQL-CONNECTION"


class UnsupportedVersionError(MongoSqlException):
    """서버 버전이 계열별 최소 버전보다 낮은 경우."""

    CODE = "MSQL-VERSION"

    def __init__(
        self,
        message: str,
        detected: Optional[str] = None,
        required: Optional[str] = None,
        family: Optional[str] = None,
        original: Optional[BaseException] = None,
    ) -> None:
        self.detected = detected
        self.required = required
        self.family = family
        super().__init__(
            message,
            hint="지원되는 최소 버전 이상으로 서버를 업그레이드하세요.",
            metadata={"detected": detected, "required": required, "family": family},
            original=original,
        )


class NotReadyError(MongoSqlException):
    """READY 상태가 아닌 드라이버에 연산을 호출한 경우."""

    CODE = "MSQL-NOT-READY"


class UnsupportedQueryError(MongoSqlException):
    """필터/연산자를 SQL로 변환할 수 없는 경우."""

    CODE = "MSQL-QUERY"


class ConflictError(MongoSqlException):
    """쓰기 중 고유 식별자 충돌."""

    CODE = "MSQL-CONFLICT"


class DocumentEncodingError(MongoSqlException):
    """문서를 JSON으로 직렬화/역직렬화할 수 없는 경우."""

    CODE = "MSQL-ENCODING"

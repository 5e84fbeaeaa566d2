"""
목적: SQL 방언 계약을 정의한다.
설명: 방언은 연결 팩토리, 버전 정책, 엔진 팩토리를 조합한 값 객체이다.
    드라이버는 상속 대신 이 값을 주입받아 연결 → 버전 검증 → 엔진 구성을 수행한다.
디자인 패턴: 추상 팩토리, 전략 패턴
참조: src/mongosql/integrations/db/base/driver.py, src/mongosql/integrations/db/engines/mysql/dialect.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from mongosql.integrations.db.base.engine import BaseDocumentEngine
from mongosql.integrations.db.base.models import ConnectionOptions, VersionPolicy
from mongosql.integrations.db.base.session import ConnectionSession
from mongosql.integrations.db.base.version import VersionGate
from mongosql.shared.logging import Logger


class BaseConnectionFactory(ABC):
    """연결 팩토리 인터페이스."""

    @property
    @abstractmethod
    def default_port(self) -> int:
        """방언의 관례 포트를 반환한다."""

    @abstractmethod
    def build_dsn(self, options: ConnectionOptions) -> str:
        """연결 옵션으로 결정적인 DSN 문자열을 만든다."""

    @abstractmethod
    def create_connection(
        self,
        options: ConnectionOptions,
        driver_options: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """연결을 생성하고 정규화 구문까지 실행한 핸들을 반환한다."""

    @abstractmethod
    def read_server_version(self, connection: Any) -> str:
        """서버가 보고한 버전 문자열을 반환한다."""

    def close_connection(self, connection: Any) -> None:
        """연결을 닫는다."""

        connection.close()


EngineFactory = Callable[[ConnectionSession, Logger], BaseDocumentEngine]


@dataclass(frozen=True)
class Dialect:
    """SQL 방언 값 객체.

    Args:
        name: 방언 이름.
        connection_factory: 연결 팩토리.
        version_policy: 계열별 최소 버전 정책.
        engine_factory: 세션으로 문서 엔진을 만드는 팩토리.
    """

    name: str
    connection_factory: BaseConnectionFactory
    version_policy: VersionPolicy
    engine_factory: EngineFactory

    def version_gate(self, logger: Optional[Logger] = None) -> VersionGate:
        """방언 정책을 따르는 버전 검증기를 생성한다."""

        return VersionGate(
            self.version_policy,
            self.connection_factory.read_server_version,
            logger=logger,
        )

"""
목적: 설정으로 드라이버를 생성한다.
설명: options.connection 으로 방언을 선택하고 연결과 버전 검증까지 마친 READY 드라이버를 만든다.
    create_driver 는 실패 시 예외를 던지고, try_create_driver 는 DriverBuildResult 로 돌려준다.
    어느 쪽이든 부분적으로 초기화된 드라이버는 호출자에게 전달되지 않는다.
디자인 패턴: 팩토리, 결과 객체
참조: src/mongosql/integrations/db/base/driver.py, src/mongosql/integrations/db/engines/mysql/dialect.py
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from mongosql.integrations.db.base.dialect import Dialect
from mongosql.integrations.db.base.driver import DocumentDriver
from mongosql.integrations.db.base.errors import ConfigurationError, MongoSqlException
from mongosql.integrations.db.base.models import DriverConfig
from mongosql.integrations.db.engines.mysql.dialect import (
    create_mariadb_dialect,
    create_mysql_dialect,
)
from mongosql.shared.logging import Logger, create_default_logger

DialectBuilder = Callable[..., Dialect]

DIALECTS: Dict[str, DialectBuilder] = {
    "mysql": create_mysql_dialect,
    "mariadb": create_mariadb_dialect,
}


def resolve_dialect(config: DriverConfig, connector: Any = None) -> Dialect:
    """설정의 connection 값에 해당하는 방언을 반환한다."""

    name = (config.options.connection or "mysql").lower()
    builder = DIALECTS.get(name)
    if builder is None:
        raise ConfigurationError(
            f"지원하지 않는 connection 입니다: {name}",
            hint=f"사용 가능: {', '.join(sorted(DIALECTS))}",
            metadata={"connection": name},
        )
    return builder(connector=connector)


def create_driver(
    config: DriverConfig,
    logger: Optional[Logger] = None,
    dialect: Optional[Dialect] = None,
    connector: Any = None,
) -> DocumentDriver:
    """READY 상태의 드라이버를 생성한다. 실패하면 예외를 던진다.

    connector 는 mysql.connector 대신 connect(**kwargs) 를 제공할 모듈이다.
    """

    logger = logger or create_default_logger("DocumentDriver")
    driver = DocumentDriver(config, dialect or resolve_dialect(config, connector), logger=logger)
    driver.connect()
    return driver


@dataclass(frozen=True)
class DriverBuildResult:
    """드라이버 생성 결과. driver 와 error 중 정확히 하나만 채워진다."""

    driver: Optional[DocumentDriver] = None
    error: Optional[MongoSqlException] = None

    def __post_init__(self) -> None:
        if (self.driver is None) == (self.error is None):
            raise ValueError("driver 와 error 중 하나만 지정해야 합니다.")

    @property
    def ok(self) -> bool:
        return self.driver is not None

    def unwrap(self) -> DocumentDriver:
        """드라이버를 반환하고, 실패 결과면 보관된 예외를 던진다."""

        if self.driver is None:
            assert self.error is not None
            raise self.error
        return self.driver


def try_create_driver(
    config: DriverConfig,
    logger: Optional[Logger] = None,
    dialect: Optional[Dialect] = None,
    connector: Any = None,
) -> DriverBuildResult:
    """드라이버 생성 결과를 예외 대신 값으로 반환한다."""

    try:
        driver = create_driver(config, logger=logger, dialect=dialect, connector=connector)
        return DriverBuildResult(driver=driver)
    except MongoSqlException as exc:
        return DriverBuildResult(error=exc)

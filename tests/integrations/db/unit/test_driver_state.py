"""
목적: 드라이버 상태 기계와 생성 결과 모델을 검증한다.
설명: READY 이전 연산 거부, 버전 실패 시 FAILED 전이와 연결 정리,
    close() 이후 재연결, try_create_driver 결과 형태, 로그 저장소 상한을 확인한다.
디자인 패턴: 상태 기계
참조: src/mongosql/integrations/db/base/driver.py, src/mongosql/integrations/db/factory.py
"""

from __future__ import annotations

import logging

import pytest
from mysql.connector import errors as mysql_errors

from mongosql.integrations.db import (
    DocumentDriver,
    DriverBuildResult,
    DriverConfig,
    create_driver,
    try_create_driver,
)
from mongosql.integrations.db.base import DriverState
from mongosql.integrations.db.base.errors import (
    ConfigurationError,
    DBConnectionError,
    NotReadyError,
    UnsupportedVersionError,
)
from mongosql.integrations.db.engines.mysql import create_mysql_dialect
from mongosql.shared.logging import InMemoryLogger, InMemoryLogRepository, LogLevel

_LOGGER = logging.getLogger("tests.unit")


def _log_step(action: str, **context) -> None:
    """단계별 동작을 로깅한다."""

    if context:
        payload = ", ".join(f"{key}={value}" for key, value in context.items())
        _LOGGER.info("%s | %s", action, payload)
        return
    _LOGGER.info("%s", action)


def test_operations_rejected_before_connect(make_connector, driver_config) -> None:
    """연결 전 연산은 NotReadyError 이며 SQL 을 실행하지 않는지 확인한다."""

    connector = make_connector()
    driver = DocumentDriver(driver_config, create_mysql_dialect(connector=connector))

    with pytest.raises(NotReadyError):
        driver.find("posts", {"a": 1})
    with pytest.raises(NotReadyError):
        driver.insert_one("posts", {"a": 1})

    assert driver.state is DriverState.UNCONNECTED
    assert connector.connect_count == 0


def test_connect_reaches_ready(make_connector, driver_config) -> None:
    """정상 연결이 READY 상태와 서버 버전을 남기는지 확인한다."""

    connector = make_connector(server_info="8.0.36")
    driver = DocumentDriver(driver_config, create_mysql_dialect(connector=connector))

    driver.connect()
    driver.connect()
    _log_step("드라이버 준비", dsn=driver.dsn)

    assert driver.is_ready
    assert str(driver.server_version) == "8.0.36"
    assert driver.server_version.family == "mysql"
    assert connector.connect_count == 1
    assert driver.dsn == "mysql:dbname=cms;charset=utf8mb4;host=db.internal;port=3306;"


def test_unsupported_version_fails_and_closes(make_connector, driver_config) -> None:
    """버전 검증 실패 시 FAILED 로 전이하고 연결을 닫는지 확인한다."""

    connector = make_connector(server_info="5.6.51-log")
    driver = DocumentDriver(driver_config, create_mysql_dialect(connector=connector))

    with pytest.raises(UnsupportedVersionError):
        driver.connect()

    assert driver.state is DriverState.FAILED
    assert connector.last.closed is True
    with pytest.raises(NotReadyError):
        driver.connect()
    with pytest.raises(NotReadyError):
        driver.count("posts")
    assert connector.connect_count == 1


def test_connection_failure_marks_failed(make_connector, driver_config) -> None:
    """연결 실패 시 DBConnectionError 와 함께 FAILED 로 전이하는지 확인한다."""

    failure = mysql_errors.InterfaceError(msg="Access denied", errno=1045)
    connector = make_connector(connect_error=failure)
    driver = DocumentDriver(driver_config, create_mysql_dialect(connector=connector))

    with pytest.raises(DBConnectionError):
        driver.connect()

    assert driver.state is DriverState.FAILED


def test_close_returns_to_unconnected(make_connector, driver_config) -> None:
    """close() 후 UNCONNECTED 로 돌아가고 다시 연결할 수 있는지 확인한다."""

    connector = make_connector()
    driver = DocumentDriver(driver_config, create_mysql_dialect(connector=connector))
    driver.connect()
    first = connector.last

    driver.close()

    assert first.closed is True
    assert driver.state is DriverState.UNCONNECTED
    assert driver.server_version is None
    with pytest.raises(NotReadyError):
        driver.count("posts")

    driver.connect()
    assert driver.is_ready
    assert connector.connect_count == 2


def test_create_driver_selects_mariadb_dialect(make_connector) -> None:
    """options.connection 으로 방언을 선택하는지 확인한다."""

    connector = make_connector(server_info="5.5.5-10.3.39-MariaDB-0+deb10u1")
    config = DriverConfig(options={"dbname": "cms", "connection": "mariadb"})

    driver = create_driver(config, connector=connector)

    assert driver.dialect_name == "mariadb"
    assert driver.server_version.family == "mariadb"


def test_create_driver_rejects_unknown_dialect(make_connector) -> None:
    """알 수 없는 방언은 ConfigurationError 인지 확인한다."""

    config = DriverConfig(options={"dbname": "cms", "connection": "oracle"})

    with pytest.raises(ConfigurationError):
        create_driver(config, connector=make_connector())


def test_try_create_driver_returns_explicit_result(make_connector, driver_config) -> None:
    """try_create_driver 가 driver 또는 error 중 하나만 담는지 확인한다."""

    ok = try_create_driver(driver_config, connector=make_connector())
    failed = try_create_driver(driver_config, connector=make_connector(server_info="5.7.8"))

    assert ok.ok and ok.error is None
    assert ok.unwrap().is_ready
    assert not failed.ok and failed.driver is None
    assert isinstance(failed.error, UnsupportedVersionError)
    with pytest.raises(UnsupportedVersionError):
        failed.unwrap()


def test_build_result_requires_exactly_one_side() -> None:
    """DriverBuildResult 는 driver 와 error 를 함께 가질 수 없는지 확인한다."""

    with pytest.raises(ValueError):
        DriverBuildResult(driver=None, error=None)


def test_try_create_driver_reports_rejected_driver_option(make_connector) -> None:
    """커넥터가 거부한 driverOptions 가 예외 대신 ConfigurationError 결과로 돌아오는지 확인한다."""

    connector = make_connector(connect_error=AttributeError("Unsupported argument 'bogus'"))
    config = DriverConfig(options={"dbname": "cms"}, driverOptions={"bogus": 1})

    result = try_create_driver(config, connector=connector)
    _log_step("생성 결과", ok=result.ok, error=result.error)

    assert not result.ok
    assert isinstance(result.error, ConfigurationError)


def test_try_create_driver_reports_reserved_driver_option(make_connector) -> None:
    """driverOptions 로 database 를 바꾸려 하면 연결 없이 ConfigurationError 인지 확인한다."""

    connector = make_connector()
    config = DriverConfig(options={"dbname": "cms"}, driverOptions={"database": "other"})

    result = try_create_driver(config, connector=connector)

    assert isinstance(result.error, ConfigurationError)
    assert connector.connect_count == 0


def test_repeated_operations_keep_log_repository_bounded(memory_connector, driver_config) -> None:
    """많은 연산을 수행해도 로그 저장소가 상한을 넘지 않는지 확인한다."""

    repository = InMemoryLogRepository(max_records=50)
    logger = InMemoryLogger(
        "bounded", repository=repository, emit_stdout=False, min_level=LogLevel.DEBUG
    )
    driver = DocumentDriver(
        driver_config, create_mysql_dialect(connector=memory_connector), logger=logger
    )
    driver.connect()

    for _ in range(500):
        driver.count("posts")
    _log_step("로그 개수", records=len(repository.list()))

    assert len(repository.list()) == 50


def test_default_logger_drops_per_call_debug_records(memory_connector, driver_config, monkeypatch) -> None:
    """기본 최소 레벨에서는 연산마다 남는 DEBUG 레코드가 저장되지 않는지 확인한다."""

    monkeypatch.delenv("LOG_LEVEL", raising=False)
    logger = InMemoryLogger("quiet", emit_stdout=False)
    driver = DocumentDriver(
        driver_config, create_mysql_dialect(connector=memory_connector), logger=logger
    )
    driver.connect()
    before = len(logger.repository.list())

    for _ in range(100):
        driver.count("posts")

    assert len(logger.repository.list()) == before
    assert all(record.level != LogLevel.DEBUG for record in logger.repository.list())

"""
목적: 지연 드라이버 레지스트리와 부트스트랩 연동을 검증한다.
설명: 동시에 처음 접근해도 연결과 버전 검증이 한 번만 일어나는지,
    생성 실패가 캐시되지 않는지, server 값에 따라 저장소가 등록되는지 확인한다.
디자인 패턴: 지연 초기화, 서비스 로케이터
참조: src/mongosql/integrations/db/registry.py, src/mongosql/bootstrap.py
"""

from __future__ import annotations

import logging
import threading

import pytest

from mongosql import ServiceRegistry, register_storage
from mongosql.integrations.db import (
    DBConnectionError,
    DocumentDriver,
    DriverConfig,
    DriverRegistry,
    LazyDriverHolder,
    create_driver,
)
from mongosql.integrations.db.base import DriverState
from mongosql.integrations.db.engines.mysql import create_mysql_dialect

_LOGGER = logging.getLogger("tests.unit")

THREADS = 8


def _log_step(action: str, **context) -> None:
    """단계별 동작을 로깅한다."""

    if context:
        payload = ", ".join(f"{key}={value}" for key, value in context.items())
        _LOGGER.info("%s | %s", action, payload)
        return
    _LOGGER.info("%s", action)


def _run_concurrently(target) -> list:
    barrier = threading.Barrier(THREADS)
    results: list = []
    lock = threading.Lock()

    def work() -> None:
        barrier.wait()
        value = target()
        with lock:
            results.append(value)

    threads = [threading.Thread(target=work) for _ in range(THREADS)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return results


def test_concurrent_first_use_connects_once(make_connector, driver_config) -> None:
    """동시 첫 접근에도 연결과 버전 검증이 한 번만 수행되는지 확인한다."""

    connector = make_connector(connect_delay=0.05)
    registry = DriverRegistry(builder=lambda config: create_driver(config, connector=connector))

    drivers = _run_concurrently(lambda: registry.get(driver_config))
    _log_step("동시 접근 완료", connections=connector.connect_count)

    assert len(drivers) == THREADS
    assert all(driver is drivers[0] for driver in drivers)
    assert connector.connect_count == 1
    assert connector.last.version_reads == 1


def test_concurrent_driver_connect_is_serialised(make_connector, driver_config) -> None:
    """DocumentDriver.connect() 동시 호출도 연결을 하나만 만드는지 확인한다."""

    connector = make_connector(connect_delay=0.05)
    driver = DocumentDriver(driver_config, create_mysql_dialect(connector=connector))

    _run_concurrently(driver.connect)

    assert driver.is_ready
    assert connector.connect_count == 1


def test_registry_keys_by_config_identity(make_connector, driver_config) -> None:
    """같은 내용의 설정은 같은 드라이버를, 다른 설정은 다른 드라이버를 받는지 확인한다."""

    connector = make_connector()
    registry = DriverRegistry(builder=lambda config: create_driver(config, connector=connector))
    same = DriverConfig(options={"dbname": "cms", "host": "db.internal", "username": "cms"})
    other = DriverConfig(options={"dbname": "blog"})

    assert registry.get(driver_config) is registry.get(same)
    assert registry.get(other) is not registry.get(driver_config)
    assert len(registry.keys()) == 2

    driver = registry.get(driver_config)
    registry.close_all()

    assert driver.state is DriverState.UNCONNECTED
    assert registry.keys() == []


def test_failed_build_is_not_cached() -> None:
    """생성 실패 후 다음 get() 이 다시 시도하는지 확인한다."""

    attempts = []

    def factory():
        attempts.append(1)
        if len(attempts) == 1:
            raise DBConnectionError("일시적 실패")
        return "driver"

    holder = LazyDriverHolder(factory)

    with pytest.raises(DBConnectionError):
        holder.get()
    assert not holder.is_initialized()
    assert holder.get() == "driver"
    assert holder.get() == "driver"
    assert len(attempts) == 2


def test_register_storage_for_sqldriver(make_connector, driver_config) -> None:
    """server 가 sqldriver 이면 storage 키에 지연 드라이버를 등록하는지 확인한다."""

    connector = make_connector()
    registry = DriverRegistry(builder=lambda config: create_driver(config, connector=connector))
    services = ServiceRegistry()

    assert register_storage(services, driver_config, driver_registry=registry) is True
    assert services.has("storage")
    assert connector.connect_count == 0

    first = services.get("storage")
    second = services.get("storage")

    assert first is second
    assert first.is_ready
    assert connector.connect_count == 1


def test_register_storage_skips_other_servers(make_connector) -> None:
    """다른 server 값이면 아무것도 등록하지 않는지 확인한다."""

    connector = make_connector()
    registry = DriverRegistry(builder=lambda config: create_driver(config, connector=connector))
    services = ServiceRegistry()
    config = DriverConfig(server="mongodb", options={"dbname": "cms"})

    assert register_storage(services, config, driver_registry=registry) is False
    assert not services.has("storage")
    assert connector.connect_count == 0
    with pytest.raises(KeyError):
        services.get("storage")

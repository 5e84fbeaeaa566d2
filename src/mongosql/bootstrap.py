"""
목적: 애플리케이션 부트스트랩 연동 지점을 제공한다.
설명: 설정의 server 가 "sqldriver" 일 때만 서비스 레지스트리의 "storage" 키에
    지연 생성 드라이버를 등록한다. 드라이버는 처음 조회될 때 만들어지고 이후 재사용된다.
디자인 패턴: 서비스 로케이터, 지연 초기화
참조: src/mongosql/integrations/db/registry.py, src/mongosql/shared/const/__init__.py
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Optional

from mongosql.integrations.db.base.driver import DocumentDriver
from mongosql.integrations.db.base.models import DriverConfig
from mongosql.integrations.db.registry import DriverRegistry
from mongosql.shared.const import SharedConst
from mongosql.shared.logging import Logger, create_default_logger


class ServiceRegistry:
    """키 → 팩토리 서비스 레지스트리. 팩토리는 get() 시점에 호출된다."""

    def __init__(self) -> None:
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._lock = threading.Lock()

    def set(self, key: str, factory: Callable[[], Any]) -> None:
        with self._lock:
            self._factories[key] = factory

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._factories

    def get(self, key: str) -> Any:
        with self._lock:
            factory = self._factories.get(key)
        if factory is None:
            raise KeyError(f"등록되지 않은 서비스입니다: {key}")
        return factory()


def register_storage(
    services: ServiceRegistry,
    config: DriverConfig,
    driver_registry: Optional[DriverRegistry] = None,
    logger: Optional[Logger] = None,
) -> bool:
    """조건이 맞으면 저장소 드라이버를 등록하고 등록 여부를 반환한다."""

    logger = logger or create_default_logger("bootstrap")
    if config.server != SharedConst.SERVER_NAME:
        logger.debug(f"server={config.server} 이므로 저장소 드라이버를 등록하지 않습니다.")
        return False
    registry = driver_registry or DriverRegistry(logger=logger)
    holder = registry.holder(config)

    def storage() -> DocumentDriver:
        return holder.get()

    services.set(SharedConst.STORAGE_KEY, storage)
    logger.info("저장소 드라이버를 등록했습니다.", metadata={"key": SharedConst.STORAGE_KEY})
    return True

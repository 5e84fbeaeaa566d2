"""
목적: 프로세스 단위 드라이버 레지스트리를 제공한다.
설명: LazyDriverHolder 는 잠금으로 보호되는 1회 초기화 슬롯이며,
    동시에 처음 접근해도 드라이버(연결 + 버전 검증)는 한 번만 만들어진다.
    생성 실패는 캐시하지 않으므로 다음 get() 이 다시 시도한다.
    DriverRegistry 는 설정 식별자(DriverConfig.identity())별로 홀더를 관리한다.
디자인 패턴: 지연 초기화, 레지스트리
참조: src/mongosql/integrations/db/factory.py, src/mongosql/bootstrap.py
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional

from mongosql.integrations.db.base.driver import DocumentDriver
from mongosql.integrations.db.base.models import DriverConfig
from mongosql.integrations.db.factory import create_driver
from mongosql.shared.logging import Logger, create_default_logger

DriverBuilder = Callable[[DriverConfig], DocumentDriver]


class LazyDriverHolder:
    """지연 생성 드라이버 슬롯."""

    def __init__(self, factory: Callable[[], DocumentDriver]) -> None:
        self._factory = factory
        self._driver: Optional[DocumentDriver] = None
        self._lock = threading.Lock()

    def get(self) -> DocumentDriver:
        """드라이버를 반환한다. 처음 호출될 때 한 번만 생성한다."""

        driver = self._driver
        if driver is not None:
            return driver
        with self._lock:
            if self._driver is None:
                self._driver = self._factory()
            return self._driver

    def is_initialized(self) -> bool:
        return self._driver is not None

    def reset(self) -> None:
        """보관된 드라이버를 닫고 슬롯을 비운다."""

        with self._lock:
            driver, self._driver = self._driver, None
        if driver is not None:
            driver.close()


class DriverRegistry:
    """설정 식별자별 드라이버 레지스트리."""

    def __init__(
        self,
        builder: Optional[DriverBuilder] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        self._logger = logger or create_default_logger("DriverRegistry")
        self._builder = builder or (lambda config: create_driver(config, logger=self._logger))
        self._holders: Dict[str, LazyDriverHolder] = {}
        self._lock = threading.Lock()

    def holder(self, config: DriverConfig) -> LazyDriverHolder:
        """설정에 해당하는 홀더를 반환한다(없으면 등록)."""

        key = config.identity()
        with self._lock:
            holder = self._holders.get(key)
            if holder is None:
                holder = LazyDriverHolder(lambda: self._build(config))
                self._holders[key] = holder
            return holder

    def get(self, config: DriverConfig) -> DocumentDriver:
        """설정에 해당하는 드라이버를 반환한다."""

        return self.holder(config).get()

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._holders)

    def close_all(self) -> None:
        """모든 드라이버를 닫고 레지스트리를 비운다."""

        with self._lock:
            holders, self._holders = list(self._holders.values()), {}
        for holder in holders:
            holder.reset()

    def _build(self, config: DriverConfig) -> DocumentDriver:
        self._logger.info("드라이버를 생성합니다.", metadata={"identity": config.identity()[:12]})
        return self._builder(config)

"""
목적: mongosql 패키지 공개 API를 제공한다.
설명: 드라이버 생성, 레지스트리, 부트스트랩 진입점을 외부에 노출한다.
디자인 패턴: 퍼사드
참조: src/mongosql/integrations/db/__init__.py, src/mongosql/bootstrap.py
"""

from mongosql.bootstrap import ServiceRegistry, register_storage
from mongosql.integrations.db import (
    DocumentClient,
    DocumentDriver,
    DriverBuildResult,
    DriverConfig,
    DriverRegistry,
    create_driver,
    load_driver_config,
    try_create_driver,
)

__all__ = [
    "DocumentClient",
    "DocumentDriver",
    "DriverBuildResult",
    "DriverConfig",
    "DriverRegistry",
    "ServiceRegistry",
    "create_driver",
    "load_driver_config",
    "register_storage",
    "try_create_driver",
]

"""
목적: DB 연동 모듈 공개 API를 제공한다.
설명: 드라이버 생성/레지스트리/설정 로딩과 클라이언트를 외부에 노출한다.
디자인 패턴: 퍼사드
참조: src/mongosql/integrations/db/factory.py, src/mongosql/integrations/db/registry.py
"""

from mongosql.integrations.db.base import (
    CollectionSchema,
    ConfigurationError,
    ConflictError,
    DBConnectionError,
    DocumentDriver,
    DocumentEncodingError,
    DriverConfig,
    DriverState,
    MongoSqlException,
    NotReadyError,
    Query,
    QueryBuilder,
    UnsupportedQueryError,
    UnsupportedVersionError,
)
from mongosql.integrations.db.client import DocumentClient
from mongosql.integrations.db.config import load_driver_config
from mongosql.integrations.db.factory import (
    DIALECTS,
    DriverBuildResult,
    create_driver,
    resolve_dialect,
    try_create_driver,
)
from mongosql.integrations.db.registry import DriverRegistry, LazyDriverHolder

__all__ = [
    "DIALECTS",
    "CollectionSchema",
    "ConfigurationError",
    "ConflictError",
    "DBConnectionError",
    "DocumentClient",
    "DocumentDriver",
    "DocumentEncodingError",
    "DriverBuildResult",
    "DriverConfig",
    "DriverRegistry",
    "DriverState",
    "LazyDriverHolder",
    "MongoSqlException",
    "NotReadyError",
    "Query",
    "QueryBuilder",
    "UnsupportedQueryError",
    "UnsupportedVersionError",
    "create_driver",
    "load_driver_config",
    "resolve_dialect",
    "try_create_driver",
]

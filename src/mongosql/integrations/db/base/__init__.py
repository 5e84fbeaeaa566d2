"""
목적: DB 공통 추상화 모듈 공개 API를 제공한다.
설명: 모델, 예외, 버전 검증, 방언 계약, 드라이버, 쿼리 빌더를 외부에 노출한다.
디자인 패턴: 퍼사드
참조: src/mongosql/integrations/db/base/models.py, src/mongosql/integrations/db/base/driver.py
"""

from mongosql.integrations.db.base.dialect import BaseConnectionFactory, Dialect
from mongosql.integrations.db.base.driver import DocumentDriver, DriverState
from mongosql.integrations.db.base.engine import BaseDocumentEngine
from mongosql.integrations.db.base.errors import (
    ConfigurationError,
    ConflictError,
    DBConnectionError,
    DocumentEncodingError,
    MongoSqlException,
    NotReadyError,
    UnsupportedQueryError,
    UnsupportedVersionError,
)
from mongosql.integrations.db.base.models import (
    CollectionSchema,
    ConnectionOptions,
    Document,
    DriverConfig,
    ParsedVersion,
    Query,
    ServerVersion,
    SortField,
    SortOrder,
    VersionPolicy,
)
from mongosql.integrations.db.base.query_builder import QueryBuilder
from mongosql.integrations.db.base.session import ConnectionSession
from mongosql.integrations.db.base.version import (
    VersionGate,
    compare_versions,
    parse_server_version,
    parse_version_number,
)

__all__ = [
    "BaseConnectionFactory",
    "BaseDocumentEngine",
    "CollectionSchema",
    "ConfigurationError",
    "ConflictError",
    "ConnectionOptions",
    "ConnectionSession",
    "DBConnectionError",
    "Dialect",
    "Document",
    "DocumentDriver",
    "DocumentEncodingError",
    "DriverConfig",
    "DriverState",
    "MongoSqlException",
    "NotReadyError",
    "ParsedVersion",
    "Query",
    "QueryBuilder",
    "ServerVersion",
    "SortField",
    "SortOrder",
    "UnsupportedQueryError",
    "UnsupportedVersionError",
    "VersionGate",
    "VersionPolicy",
    "compare_versions",
    "parse_server_version",
    "parse_version_number",
]

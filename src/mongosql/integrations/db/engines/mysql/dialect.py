"""
목적: MySQL 계열 방언 값을 제공한다.
설명: MySQL 기본 최소 버전 5.7.9, MariaDB 포크 최소 버전 10.2.6,
    MariaDB 복제 호환 sentinel 5.5.5 정책과 연결 팩토리, 문서 엔진 팩토리를 묶는다.
디자인 패턴: 추상 팩토리
참조: src/mongosql/integrations/db/base/dialect.py, src/mongosql/integrations/db/factory.py
"""

from __future__ import annotations

from typing import Any, Optional

from mongosql.integrations.db.base.dialect import Dialect
from mongosql.integrations.db.base.models import VersionPolicy
from mongosql.integrations.db.base.session import ConnectionSession
from mongosql.integrations.db.engines.mysql.connection import MySQLConnectionFactory
from mongosql.integrations.db.engines.mysql.engine import MySQLDocumentEngine
from mongosql.shared.logging import Logger

MYSQL_VERSION_POLICY = VersionPolicy(
    base_family="mysql",
    base_minimum="5.7.9",
    fork_minimums={"MariaDB": "10.2.6"},
    compat_sentinel="5.5.5",
)


def create_mysql_dialect(
    connector: Any = None,
    name: str = "mysql",
    logger: Optional[Logger] = None,
) -> Dialect:
    """MySQL 계열 방언을 생성한다."""

    def engine_factory(session: ConnectionSession, engine_logger: Logger) -> MySQLDocumentEngine:
        return MySQLDocumentEngine(session, engine_logger, dialect_name=name)

    return Dialect(
        name=name,
        connection_factory=MySQLConnectionFactory(connector=connector, logger=logger),
        version_policy=MYSQL_VERSION_POLICY,
        engine_factory=engine_factory,
    )


def create_mariadb_dialect(connector: Any = None, logger: Optional[Logger] = None) -> Dialect:
    """MariaDB 방언을 생성한다. 버전 정책은 MySQL 계열과 공유한다."""

    return create_mysql_dialect(connector=connector, name="mariadb", logger=logger)

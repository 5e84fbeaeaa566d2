"""
목적: MySQL 계열 엔진 공개 API를 제공한다.
설명: 연결 팩토리, 방언, 문서 엔진, 필터 컴파일러를 외부에 노출한다.
디자인 패턴: 퍼사드
참조: src/mongosql/integrations/db/engines/mysql/dialect.py
"""

from mongosql.integrations.db.engines.mysql.connection import MySQLConnectionFactory
from mongosql.integrations.db.engines.mysql.dialect import (
    MYSQL_VERSION_POLICY,
    create_mariadb_dialect,
    create_mysql_dialect,
)
from mongosql.integrations.db.engines.mysql.document_mapper import MySQLDocumentMapper
from mongosql.integrations.db.engines.mysql.engine import MySQLDocumentEngine
from mongosql.integrations.db.engines.mysql.filter_compiler import MySQLFilterCompiler
from mongosql.integrations.db.engines.mysql.schema_manager import MySQLSchemaManager

__all__ = [
    "MYSQL_VERSION_POLICY",
    "MySQLConnectionFactory",
    "MySQLDocumentEngine",
    "MySQLDocumentMapper",
    "MySQLFilterCompiler",
    "MySQLSchemaManager",
    "create_mariadb_dialect",
    "create_mysql_dialect",
]

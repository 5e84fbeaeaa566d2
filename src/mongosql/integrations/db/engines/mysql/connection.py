"""
목적: MySQL/MariaDB 연결 팩토리를 제공한다.
설명: 연결 옵션으로 결정적인 DSN을 만들고, 기본 드라이버 옵션 위에 호출자 옵션을 병합해
    mysql-connector 연결을 생성한다. 연결 대상(database/host/port/unix_socket)과 계정은
    호출자 옵션으로 덮어쓸 수 없고, 커넥터가 거부한 옵션은 ConfigurationError 로 보고한다.
    연결 직후 문자셋 초기화 구문과
    `SET sql_mode = 'ANSI'` 를 실행해 생성 SQL이 ANSI 따옴표 규칙을 따르도록 한다.
    DSN 형식: mysql:dbname=<name>;charset=<charset>;unix_socket=<path>; 또는 host=<host>;port=<port>;
디자인 패턴: 팩토리
참조: src/mongosql/integrations/db/base/dialect.py
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import mysql.connector
from mysql.connector import errors as mysql_errors

from mongosql.integrations.db.base.dialect import BaseConnectionFactory
from mongosql.integrations.db.base.errors import ConfigurationError, DBConnectionError
from mongosql.integrations.db.base.models import ConnectionOptions
from mongosql.shared.logging import Logger, create_default_logger

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 3306
DEFAULT_CHARSET = "utf8mb4"
INIT_COMMAND = "SET NAMES utf8mb4 COLLATE utf8mb4_unicode_ci"
SQL_MODE_COMMAND = "SET sql_mode = 'ANSI'"

DEFAULT_DRIVER_OPTIONS: Dict[str, Any] = {
    "init_command": INIT_COMMAND,
    "buffered": False,
    "autocommit": True,
}

# 연결 대상과 계정은 options 로만 지정한다.
RESERVED_DRIVER_OPTIONS = frozenset(
    {"database", "db", "host", "port", "unix_socket", "user", "username", "password", "passwd", "charset"}
)


class MySQLConnectionFactory(BaseConnectionFactory):
    """MySQL 계열 연결 팩토리.

    Args:
        connector: connect(**kwargs)를 제공하는 모듈. 기본값은 mysql.connector.
        logger: 주입 가능한 로거.
    """

    def __init__(self, connector: Any = None, logger: Optional[Logger] = None) -> None:
        self._connector = connector or mysql.connector
        self._logger = logger or create_default_logger("MySQLConnectionFactory")

    @property
    def default_port(self) -> int:
        return DEFAULT_PORT

    def build_dsn(self, options: ConnectionOptions) -> str:
        dbname = self._require_dbname(options)
        dsn = f"mysql:dbname={dbname};charset={options.charset or DEFAULT_CHARSET};"
        if options.socket:
            return dsn + f"unix_socket={options.socket};"
        return dsn + f"host={options.host or DEFAULT_HOST};port={options.port or DEFAULT_PORT};"

    def build_connect_kwargs(
        self,
        options: ConnectionOptions,
        driver_options: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """mysql.connector.connect 인자를 만든다. 호출자 옵션이 있는 키만 기본값을 덮어쓴다.

        Raises:
            ConfigurationError: 호출자 옵션이 연결 대상이나 계정 키를 포함할 때.
        """

        reserved = sorted(RESERVED_DRIVER_OPTIONS.intersection(driver_options or {}))
        if reserved:
            raise ConfigurationError(
                f"driverOptions 로 지정할 수 없는 키입니다: {', '.join(reserved)}",
                hint="dbname/host/port/socket/username/password/charset 은 options 에 설정하세요.",
                metadata={"keys": reserved},
            )
        kwargs: Dict[str, Any] = {
            "database": self._require_dbname(options),
            "charset": options.charset or DEFAULT_CHARSET,
        }
        if options.socket:
            kwargs["unix_socket"] = options.socket
        else:
            kwargs["host"] = options.host or DEFAULT_HOST
            kwargs["port"] = options.port or DEFAULT_PORT
        if options.username is not None:
            kwargs["user"] = options.username
        if options.password is not None:
            kwargs["password"] = options.password
        kwargs.update(DEFAULT_DRIVER_OPTIONS)
        kwargs.update(dict(driver_options or {}))
        return kwargs

    def create_connection(
        self,
        options: ConnectionOptions,
        driver_options: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        dsn = self.build_dsn(options)
        kwargs = self.build_connect_kwargs(options, driver_options)
        init_command = kwargs.pop("init_command", None)
        try:
            connection = self._connector.connect(**kwargs)
        except mysql_errors.Error as exc:
            raise DBConnectionError(
                f"데이터베이스에 연결할 수 없습니다: {dsn}",
                hint="호스트/소켓, 계정, 권한을 확인하세요.",
                metadata={"dsn": dsn, "errno": getattr(exc, "errno", None)},
                original=exc,
            ) from exc
        except (AttributeError, TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"커넥터가 연결 인자를 거부했습니다: {exc}",
                hint="driverOptions 의 키와 값 형식을 확인하세요.",
                metadata={"dsn": dsn},
                original=exc,
            ) from exc
        try:
            for statement in (init_command, SQL_MODE_COMMAND):
                if statement:
                    self._run(connection, statement)
        except mysql_errors.Error as exc:
            connection.close()
            raise DBConnectionError(
                "연결 초기화 구문 실행에 실패했습니다.",
                metadata={"dsn": dsn, "errno": getattr(exc, "errno", None)},
                original=exc,
            ) from exc
        self._logger.info("MySQL 연결이 초기화되었습니다.", metadata={"dsn": dsn})
        return connection

    def read_server_version(self, connection: Any) -> str:
        return connection.get_server_info()

    def _run(self, connection: Any, statement: str) -> None:
        cursor = connection.cursor()
        try:
            cursor.execute(statement)
        finally:
            cursor.close()

    def _require_dbname(self, options: ConnectionOptions) -> str:
        if not options.dbname:
            raise ConfigurationError(
                "연결 옵션에 dbname이 필요합니다.",
                hint="options.dbname 을 설정하세요.",
                metadata={"field": "dbname"},
            )
        return options.dbname

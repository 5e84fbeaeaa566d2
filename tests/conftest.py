"""
목적: pytest 공통 로깅 훅과 가짜 MySQL 커넥터 픽스처를 제공한다.
설명: 테스트 시작/종료와 결과를 로깅하고, 실제 서버 없이 드라이버를 검증할 수 있도록
    실행된 SQL을 기록하는 가짜 커넥터와 단순 테이블/카탈로그 에뮬레이터를 제공한다.
디자인 패턴: 테스트 훅, 테스트 더블
참조: pyproject.toml, src/mongosql/integrations/db/engines/mysql/connection.py
"""

from __future__ import annotations

import json
import logging
import re
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest
from dotenv import load_dotenv
from mysql.connector import errors as mysql_errors

from mongosql.integrations.db.base import DocumentDriver, DriverConfig
from mongosql.integrations.db.engines.mysql import create_mysql_dialect


_LOGGER = logging.getLogger("tests")
_TABLE_RE = re.compile(r'(?:FROM|INTO|UPDATE|EXISTS) "(\w+)"')


def _load_env_files() -> None:
    """환경 변수 파일이 있으면 로딩한다."""

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)


_load_env_files()


class FakeResult:
    """가짜 커서 실행 결과."""

    def __init__(self, rows: Optional[List[Tuple[Any, ...]]] = None, rowcount: int = 0) -> None:
        self.rows = rows or []
        self.rowcount = rowcount


Responder = Callable[[str, Optional[Tuple[Any, ...]]], Optional[FakeResult]]


class FakeCursor:
    """실행된 SQL을 연결에 기록하는 가짜 커서."""

    def __init__(self, connection: "FakeConnection") -> None:
        self._connection = connection
        self._rows: List[Tuple[Any, ...]] = []
        self.rowcount = -1
        self.closed = False
        self._open = False

    def execute(self, sql: str, params: Optional[Tuple[Any, ...]] = None) -> None:
        connection = self._connection
        if not self._open:
            self._open = True
            connection.enter_statement()
        connection.executed.append((sql, params))
        connection.timeline.append(sql)
        if connection.execute_delay:
            time.sleep(connection.execute_delay)
        result = connection.responder(sql, params) or FakeResult()
        self._rows = list(result.rows)
        self.rowcount = result.rowcount

    def fetchall(self) -> List[Tuple[Any, ...]]:
        rows, self._rows = self._rows, []
        return rows

    def close(self) -> None:
        self.closed = True
        if self._open:
            self._open = False
            self._connection.leave_statement()


class FakeConnection:
    """가짜 MySQL 연결.

    커서가 execute() 부터 close() 까지 열려 있는 구간을 세어
    max_active 로 동시에 진행 중이던 구문 수의 최댓값을 기록한다.
    """

    def __init__(
        self,
        server_info: str,
        responder: Responder,
        kwargs: Dict[str, Any],
        execute_delay: float = 0.0,
    ) -> None:
        self.server_info = server_info
        self.responder = responder
        self.kwargs = kwargs
        self.execute_delay = execute_delay
        self.executed: List[Tuple[str, Optional[Tuple[Any, ...]]]] = []
        self.events: List[str] = []
        self.timeline: List[str] = []
        self.version_reads = 0
        self.closed = False
        self.active = 0
        self.max_active = 0
        self._gate = threading.Lock()

    def enter_statement(self) -> None:
        with self._gate:
            self.active += 1
            self.max_active = max(self.max_active, self.active)

    def leave_statement(self) -> None:
        with self._gate:
            self.active -= 1

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def get_server_info(self) -> str:
        self.version_reads += 1
        return self.server_info

    def start_transaction(self) -> None:
        self.events.append("begin")
        self.timeline.append("begin")

    def commit(self) -> None:
        self.events.append("commit")
        self.timeline.append("commit")

    def rollback(self) -> None:
        self.events.append("rollback")
        self.timeline.append("rollback")

    def close(self) -> None:
        self.closed = True

    def statements(self) -> List[str]:
        return [sql for sql, _ in self.executed]


class FakeConnector:
    """connect(**kwargs) 를 제공하는 가짜 mysql.connector 모듈."""

    def __init__(
        self,
        server_info: str = "8.0.36",
        responder: Optional[Responder] = None,
        connect_error: Optional[Exception] = None,
        connect_delay: float = 0.0,
        execute_delay: float = 0.0,
    ) -> None:
        self.server_info = server_info
        self.responder = responder or (lambda sql, params: None)
        self.connect_error = connect_error
        self.connect_delay = connect_delay
        self.execute_delay = execute_delay
        self.connections: List[FakeConnection] = []
        self._lock = threading.Lock()

    @property
    def connect_count(self) -> int:
        return len(self.connections)

    @property
    def last(self) -> FakeConnection:
        return self.connections[-1]

    def connect(self, **kwargs: Any) -> FakeConnection:
        if self.connect_delay:
            time.sleep(self.connect_delay)
        if self.connect_error is not None:
            raise self.connect_error
        connection = FakeConnection(self.server_info, self.responder, kwargs, self.execute_delay)
        with self._lock:
            self.connections.append(connection)
        return connection


class InMemoryMySQL:
    """드라이버가 생성하는 SQL 중 _id 조건만 해석하는 단순 테이블 에뮬레이터."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Tuple[int, str]]] = {}
        self._next_id = 0

    def __call__(self, sql: str, params: Optional[Tuple[Any, ...]]) -> Optional[FakeResult]:
        values = list(params or ())
        if sql.startswith("SET "):
            return None
        table = _table_name(sql)
        if sql.startswith("CREATE TABLE IF NOT EXISTS"):
            self.tables.setdefault(table, [])
            return None
        rows = self._rows(table)
        if sql.startswith("INSERT INTO"):
            document = json.loads(values[0])
            if any(json.loads(raw)["_id"] == document["_id"] for _, raw in rows):
                raise mysql_errors.IntegrityError(msg="Duplicate entry", errno=1062)
            self._next_id += 1
            rows.append((self._next_id, values[0]))
            return FakeResult(rowcount=1)
        if sql.startswith("UPDATE"):
            payload, row_id = values
            for index, (current_id, _) in enumerate(rows):
                if current_id == row_id:
                    rows[index] = (row_id, payload)
                    return FakeResult(rowcount=1)
            return FakeResult(rowcount=0)
        matched = _match(rows, sql, values)
        if sql.startswith("SELECT COUNT(*)"):
            return FakeResult(rows=[(len(matched),)])
        if " LIMIT 1" in sql:
            matched = matched[:1]
        elif "LIMIT %s" in sql:
            matched = matched[: values[-1]]
        if sql.startswith('SELECT "id", "document"'):
            return FakeResult(rows=list(matched))
        if sql.startswith('SELECT "document"'):
            return FakeResult(rows=[(raw,) for _, raw in matched])
        if sql.startswith("DELETE FROM"):
            doomed = {row_id for row_id, _ in matched}
            rows[:] = [row for row in rows if row[0] not in doomed]
            return FakeResult(rowcount=len(doomed))
        raise AssertionError(f"에뮬레이터가 해석할 수 없는 SQL: {sql}")

    def _rows(self, table: str) -> List[Tuple[int, str]]:
        if table not in self.tables:
            raise mysql_errors.ProgrammingError(msg=f"Table '{table}' doesn't exist", errno=1146)
        return self.tables[table]


class InMemoryCatalog(InMemoryMySQL):
    """information_schema 조회와 ALTER/DROP/RENAME 을 해석하는 에뮬레이터.

    denied_columns 에 있는 컬럼을 추가하려는 ALTER 는 권한 오류(1227)로 실패한다.
    """

    BASE_COLUMNS = ("id", "document", "_id_virtual")

    def __init__(self, denied_columns: Tuple[str, ...] = ()) -> None:
        super().__init__()
        self.columns: Dict[str, List[str]] = {}
        self.denied_columns = set(denied_columns)

    def __call__(self, sql: str, params: Optional[Tuple[Any, ...]]) -> Optional[FakeResult]:
        names = re.findall(r'"(\w+)"', sql)
        if sql.startswith("CREATE TABLE IF NOT EXISTS"):
            self.columns.setdefault(names[0], list(self.BASE_COLUMNS))
        elif sql.startswith("SELECT COUNT(*) FROM information_schema.TABLES"):
            return FakeResult(rows=[(int(params[0] in self.tables),)])
        elif sql.startswith("SELECT COLUMN_NAME FROM information_schema.COLUMNS"):
            return FakeResult(rows=[(name,) for name in self.columns.get(params[0], [])])
        elif sql.startswith("SELECT DISTINCT TABLE_NAME"):
            return FakeResult(rows=[(name.encode("utf-8"),) for name in sorted(self.tables)])
        elif sql.startswith("ALTER TABLE"):
            return self._alter(names[0], names[1])
        elif sql.startswith("DROP TABLE IF EXISTS"):
            self.tables.pop(names[0], None)
            self.columns.pop(names[0], None)
            return None
        elif sql.startswith("RENAME TABLE"):
            return self._rename(names[0], names[1])
        return super().__call__(sql, params)

    def _alter(self, table: str, column: str) -> None:
        if table not in self.tables:
            raise mysql_errors.ProgrammingError(msg=f"Table '{table}' doesn't exist", errno=1146)
        if column in self.denied_columns:
            raise mysql_errors.ProgrammingError(msg="Access denied; you need the ALTER privilege", errno=1227)
        self.columns[table].append(column)

    def _rename(self, source: str, target: str) -> None:
        if source not in self.tables:
            raise mysql_errors.ProgrammingError(msg=f"Table '{source}' doesn't exist", errno=1146)
        if target in self.tables:
            raise mysql_errors.ProgrammingError(msg=f"Table '{target}' already exists", errno=1050)
        self.tables[target] = self.tables.pop(source)
        self.columns[target] = self.columns.pop(source)


def _table_name(sql: str) -> str:
    match = _TABLE_RE.search(sql)
    if match is None:
        raise AssertionError(f"테이블 이름을 찾을 수 없습니다: {sql}")
    return match.group(1)


def _match(rows: List[Tuple[int, str]], sql: str, values: List[Any]) -> List[Tuple[int, str]]:
    if ' WHERE "_id_virtual" = %s' in sql:
        return [row for row in rows if json.loads(row[1])["_id"] == values[0]]
    if " WHERE " in sql:
        raise AssertionError(f"에뮬레이터는 _id 조건만 지원합니다: {sql}")
    return list(rows)


@pytest.fixture
def make_connector() -> Callable[..., FakeConnector]:
    """가짜 커넥터 생성 함수를 반환한다."""

    return FakeConnector


@pytest.fixture
def make_catalog() -> Callable[..., InMemoryCatalog]:
    """information_schema 를 해석하는 에뮬레이터 생성 함수를 반환한다."""

    return InMemoryCatalog


@pytest.fixture
def memory_connector() -> FakeConnector:
    """인메모리 테이블 에뮬레이터가 연결된 가짜 커넥터를 반환한다."""

    return FakeConnector(server_info="8.0.36", responder=InMemoryMySQL())


@pytest.fixture
def driver_config() -> DriverConfig:
    """기본 드라이버 설정을 반환한다."""

    return DriverConfig(options={"dbname": "cms", "host": "db.internal", "username": "cms"})


@pytest.fixture
def ready_driver(memory_connector: FakeConnector, driver_config: DriverConfig) -> DocumentDriver:
    """READY 상태의 드라이버를 반환한다."""

    driver = DocumentDriver(driver_config, create_mysql_dialect(connector=memory_connector))
    driver.connect()
    return driver


def pytest_sessionstart(session) -> None:  # noqa: D401 - pytest 훅 시그니처 유지
    """테스트 세션 시작을 로깅한다."""

    _LOGGER.info("테스트 세션 시작")


def pytest_sessionfinish(session, exitstatus: int) -> None:  # noqa: D401 - pytest 훅 시그니처 유지
    """테스트 세션 종료를 로깅한다."""

    _LOGGER.info("테스트 세션 종료 (exitstatus=%s)", exitstatus)


def pytest_runtest_logstart(nodeid: str, location) -> None:  # noqa: D401 - pytest 훅 시그니처 유지
    """각 테스트 시작을 로깅한다."""

    _LOGGER.info("테스트 시작: %s", nodeid)


def pytest_runtest_logreport(report) -> None:  # noqa: D401 - pytest 훅 시그니처 유지
    """테스트 결과를 로깅한다."""

    if report.when != "call":
        return
    if report.passed:
        _LOGGER.info("테스트 완료: %s", report.nodeid)
        return
    if report.skipped:
        _LOGGER.warning("테스트 스킵: %s", report.nodeid)
        return
    _LOGGER.error("테스트 실패: %s", report.nodeid)

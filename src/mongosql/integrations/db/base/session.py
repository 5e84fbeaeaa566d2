"""
목적: 연결 단위 세션을 제공한다.
설명: 하나의 연결 핸들에 대한 구문 실행을 RLock으로 직렬화하고,
    결과 집합은 잠금을 놓기 전에 모두 소비한다(비버퍼 커서).
    with session.transaction(): 블록은 정상 종료 시 커밋, 예외 시 롤백한다.
디자인 패턴: 컨텍스트 매니저, 단일 연결 직렬화
참조: src/mongosql/integrations/db/base/engine.py
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from mongosql.shared.logging import Logger, create_default_logger

Row = Tuple[Any, ...]


class ConnectionSession:
    """단일 연결 세션."""

    def __init__(self, connection: Any, logger: Optional[Logger] = None) -> None:
        self._connection = connection
        self._logger = logger or create_default_logger("ConnectionSession")
        self._lock = threading.RLock()
        self._depth = 0

    @property
    def connection(self) -> Any:
        return self._connection

    def fetch_all(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Row]:
        """조회 구문을 실행하고 모든 행을 반환한다."""

        with self._lock:
            cursor = self._connection.cursor()
            try:
                cursor.execute(sql, tuple(params) if params else None)
                return list(cursor.fetchall())
            finally:
                cursor.close()

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """변경 구문을 실행하고 영향받은 행 수를 반환한다."""

        with self._lock:
            cursor = self._connection.cursor()
            try:
                cursor.execute(sql, tuple(params) if params else None)
                rowcount = cursor.rowcount
                return rowcount if rowcount and rowcount > 0 else 0
            finally:
                cursor.close()

    @contextmanager
    def transaction(self) -> Iterator["ConnectionSession"]:
        """트랜잭션 블록을 제공한다. 중첩 호출은 바깥 트랜잭션에 합류한다."""

        with self._lock:
            outermost = self._depth == 0
            if outermost:
                self._connection.start_transaction()
            self._depth += 1
            try:
                yield self
            except BaseException:
                self._depth -= 1
                if outermost:
                    self._connection.rollback()
                    self._logger.warning("트랜잭션을 롤백했습니다.")
                raise
            else:
                self._depth -= 1
                if outermost:
                    self._connection.commit()

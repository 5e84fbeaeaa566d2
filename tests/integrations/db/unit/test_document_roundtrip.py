"""
목적: 드라이버를 통한 문서 저장/조회/갱신/삭제 흐름을 검증한다.
설명: 인메모리 테이블 에뮬레이터를 연결한 가짜 커넥터로
    _id 생성, 왕복 동등성, 중복 충돌, 없는 컬렉션 처리, 트랜잭션 경계를 확인한다.
디자인 패턴: 테스트 더블
참조: src/mongosql/integrations/db/engines/mysql/engine.py, tests/conftest.py
"""

from __future__ import annotations

import logging
import re

import pytest

from mongosql.integrations.db.base import (
    ConflictError,
    DocumentEncodingError,
    UnsupportedQueryError,
)

_LOGGER = logging.getLogger("tests.unit")

OBJECT_ID_RE = re.compile(r"^[0-9a-f]{24}$")


def _log_step(action: str, **context) -> None:
    """단계별 동작을 로깅한다."""

    if context:
        payload = ", ".join(f"{key}={value}" for key, value in context.items())
        _LOGGER.info("%s | %s", action, payload)
        return
    _LOGGER.info("%s", action)


def test_insert_then_find_by_id_roundtrip(ready_driver) -> None:
    """저장한 문서를 _id 로 다시 읽으면 같은 문서인지 확인한다."""

    stored = ready_driver.insert_one("items", {"a": 1, "b": {"c": "x"}})
    _log_step("문서 저장", doc_id=stored["_id"])

    assert OBJECT_ID_RE.match(stored["_id"])
    assert list(stored)[0] == "_id"

    loaded = ready_driver.find_by_id("items", stored["_id"])

    assert loaded == {"_id": stored["_id"], "a": 1, "b": {"c": "x"}}


def test_existing_id_is_coerced_to_string(ready_driver) -> None:
    """호출자가 준 _id 는 문자열로 저장되는지 확인한다."""

    stored = ready_driver.insert_one("items", {"_id": 7, "name": "seven"})

    assert stored["_id"] == "7"
    assert ready_driver.find_by_id("items", 7)["name"] == "seven"


def test_duplicate_id_raises_conflict(ready_driver, memory_connector) -> None:
    """같은 _id 로 다시 저장하면 ConflictError 이고 드라이버는 READY 인지 확인한다."""

    ready_driver.insert_one("items", {"_id": "dup", "v": 1})

    with pytest.raises(ConflictError):
        ready_driver.insert_one("items", {"_id": "dup", "v": 2})

    assert ready_driver.is_ready
    assert ready_driver.count("items") == 1
    assert memory_connector.last.events[-1] == "rollback"


def test_insert_many_rejects_duplicate_ids_in_batch(ready_driver, memory_connector) -> None:
    """한 배치 안의 중복 _id 는 SQL 실행 전에 거부되는지 확인한다."""

    before = len(memory_connector.last.executed)

    with pytest.raises(ConflictError):
        ready_driver.insert_many("items", [{"_id": "x"}, {"_id": "x"}])

    assert len(memory_connector.last.executed) == before


def test_insert_many_runs_in_one_transaction(ready_driver, memory_connector) -> None:
    """여러 문서 저장이 하나의 트랜잭션에서 실행되는지 확인한다."""

    stored = ready_driver.insert_many("items", [{"n": 1}, {"n": 2}, {"n": 3}])

    assert [document["n"] for document in stored] == [1, 2, 3]
    assert memory_connector.last.events == ["begin", "commit"]
    assert [document["n"] for document in ready_driver.find("items")] == [1, 2, 3]
    assert len(ready_driver.find("items", limit=2)) == 2


def test_unencodable_documents_rejected(ready_driver) -> None:
    """JSON 으로 표현할 수 없는 문서는 DocumentEncodingError 인지 확인한다."""

    with pytest.raises(DocumentEncodingError):
        ready_driver.insert_one("items", {"value": float("nan")})
    with pytest.raises(DocumentEncodingError):
        ready_driver.insert_one("items", {1: "numeric key"})
    with pytest.raises(DocumentEncodingError):
        ready_driver.insert_one("items", {"value": object()})
    with pytest.raises(DocumentEncodingError):
        ready_driver.insert_one("items", {"_id": "x" * 65})


def test_missing_collection_reads_empty(ready_driver) -> None:
    """없는 컬렉션은 빈 결과, 0건 처리로 응답하는지 확인한다."""

    assert ready_driver.find("ghost") == []
    assert ready_driver.find_one("ghost", {"_id": "a"}) is None
    assert ready_driver.count("ghost") == 0
    assert ready_driver.update_one("ghost", {"_id": "a"}, {"$set": {"x": 1}}) == 0
    assert ready_driver.delete_many("ghost", {"_id": "a"}) == 0


def test_invalid_collection_name_rejected(ready_driver) -> None:
    """컬렉션 이름 규칙을 벗어나면 UnsupportedQueryError 인지 확인한다."""

    for name in ("bad-name", "1items", 'x"; DROP TABLE y', "a" * 65):
        with pytest.raises(UnsupportedQueryError):
            ready_driver.insert_one(name, {"a": 1})


def test_update_replace_delete_flow(ready_driver, memory_connector) -> None:
    """갱신/교체/삭제가 _id 를 유지하며 반영되는지 확인한다."""

    stored = ready_driver.insert_one("items", {"title": "draft", "views": 1})
    doc_id = stored["_id"]

    assert ready_driver.update_one("items", {"_id": doc_id}, {"$set": {"title": "live"}, "$inc": {"views": 1}}) == 1
    assert ready_driver.find_by_id("items", doc_id) == {"_id": doc_id, "title": "live", "views": 2}

    statements = memory_connector.last.statements()
    _log_step("실행 SQL", count=len(statements))
    assert any(sql.endswith("LIMIT 1 FOR UPDATE") for sql in statements)
    assert any(sql.startswith('UPDATE "items" SET "document" = %s') for sql in statements)

    assert ready_driver.replace_one("items", {"_id": doc_id}, {"title": "replaced"}) == 1
    assert ready_driver.find_by_id("items", doc_id) == {"_id": doc_id, "title": "replaced"}

    with pytest.raises(UnsupportedQueryError):
        ready_driver.update_one("items", {"_id": doc_id}, {"_id": "other"})
    assert ready_driver.find_by_id("items", doc_id)["_id"] == doc_id

    assert ready_driver.delete_one("items", {"_id": doc_id}) == 1
    assert ready_driver.find_by_id("items", doc_id) is None
    assert ready_driver.count("items") == 0


def test_unchanged_update_matches_without_writing(ready_driver, memory_connector) -> None:
    """값이 같으면 매칭 수만 세고 UPDATE 는 실행하지 않는지 확인한다."""

    stored = ready_driver.insert_one("items", {"title": "same"})
    connection = memory_connector.last
    before = len(connection.executed)

    matched = ready_driver.update_one("items", {"_id": stored["_id"]}, {"$set": {"title": "same"}})

    assert matched == 1
    assert not any(sql.startswith("UPDATE") for sql in connection.statements()[before:])


def test_find_applies_projection(ready_driver) -> None:
    """조회 결과에 projection 이 적용되는지 확인한다."""

    stored = ready_driver.insert_one("items", {"a": 1, "b": {"c": "x", "d": "y"}})

    result = ready_driver.find_one("items", {"_id": stored["_id"]}, projection={"b.c": 1})

    assert result == {"_id": stored["_id"], "b": {"c": "x"}}

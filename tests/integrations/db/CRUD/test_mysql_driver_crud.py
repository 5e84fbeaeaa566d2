"""
목적: MySQL/MariaDB 드라이버의 기본 CRUD 동작을 검증한다.
설명: 실제 서버 환경에서 컬렉션 생성, 문서 저장/조회/갱신/삭제, 필터와 정렬을 확인한다.
    MYSQL_HOST/MYSQL_USER/MYSQL_DATABASE 가 없으면 건너뛴다.
디자인 패턴: 테스트 케이스
참조: src/mongosql/integrations/db/engines/mysql/engine.py
"""

from __future__ import annotations

import logging
import os
import uuid

import pytest

from mongosql.integrations.db import DocumentClient, DriverConfig, create_driver
from mongosql.integrations.db.base import ConflictError


_LOGGER = logging.getLogger("tests.crud")


def _log_step(action: str, **context) -> None:
    """CRUD 단계별 동작을 로깅한다."""

    if context:
        payload = ", ".join(f"{key}={value}" for key, value in context.items())
        _LOGGER.info("%s | %s", action, payload)
        return
    _LOGGER.info("%s", action)


def test_mysql_driver_basic_crud() -> None:
    """MySQL CRUD 기본 동작을 검증한다."""

    config = _mysql_config()
    if config is None:
        pytest.skip("MYSQL_HOST/MYSQL_USER/MYSQL_DATABASE 환경 변수가 필요합니다.")

    _log_step("드라이버 생성", dsn=f"{config.options.host}:{config.options.port}")
    driver = create_driver(config)
    client = DocumentClient(driver)
    collection = _collection_name("items")
    _log_step("서버 버전", version=driver.server_version, family=driver.server_version.family)

    try:
        _log_step("컬렉션 생성", name=collection)
        schema = client.register_schema(collection, indexed_fields=["slug"])
        assert collection in client.collections()
        _log_step("승격 필드", fields=schema.indexed_fields)

        _log_step("문서 저장", count=3)
        first = driver.insert_one(collection, {"slug": "a", "rank": 3, "tags": ["x", "y"]})
        driver.insert_many(
            collection,
            [
                {"slug": "b", "rank": 1, "tags": ["y"]},
                {"slug": "c", "rank": 2, "meta": {"draft": True}},
            ],
        )
        loaded = driver.find_by_id(collection, first["_id"])
        assert loaded == first

        with pytest.raises(ConflictError):
            driver.insert_one(collection, {"_id": first["_id"]})

        _log_step("조건 조회", field="rank", op="gte", value=2)
        docs = client.read(collection).where("rank").gte(2).order_by("rank").asc().fetch()
        assert [doc["slug"] for doc in docs] == ["c", "a"]
        assert driver.count(collection, {"tags": {"$has": "y"}}) == 2
        assert driver.count(collection, {"slug": "b"}) == 1
        assert driver.count(collection, {"rank": "3"}) == 0
        assert driver.count(collection, {"meta.draft": True}) == 1
        assert driver.count(collection, {"meta": {"$exists": False}}) == 2
        assert driver.count(collection, {"slug": {"$regex": "^A", "$options": "i"}}) == 1
        assert driver.find(collection, sort={"rank": -1}, limit=1, skip=1)[0]["slug"] == "c"

        _log_step("문서 갱신", doc_id=first["_id"])
        assert driver.update_one(collection, {"_id": first["_id"]}, {"$inc": {"rank": 10}}) == 1
        assert driver.find_by_id(collection, first["_id"])["rank"] == 13
        assert driver.update_many(collection, {"rank": {"$lt": 5}}, {"$set": {"low": True}}) == 2

        _log_step("문서 삭제", doc_id=first["_id"])
        assert client.delete(collection).by_id(first["_id"]) == 1
        assert driver.count(collection) == 2
    finally:
        _log_step("컬렉션 삭제", name=collection)
        driver.drop_collection(collection)
        _log_step("연결 종료")
        driver.close()


def _collection_name(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def _mysql_config() -> DriverConfig | None:
    host = os.getenv("MYSQL_HOST")
    user = os.getenv("MYSQL_USER")
    database = os.getenv("MYSQL_DATABASE")
    port_raw = os.getenv("MYSQL_PORT", "3306")
    if not (host and user and database) or not port_raw.isdigit():
        return None
    return DriverConfig(
        options={
            "connection": os.getenv("MYSQL_CONNECTION", "mysql"),
            "host": host,
            "port": int(port_raw),
            "dbname": database,
            "username": user,
            "password": os.getenv("MYSQL_PW"),
        }
    )

"""
목적: 문서와 JSON 컬럼 값 사이의 변환을 담당한다.
설명: 저장 전 _id 를 보장(없으면 ObjectId 형식 24자리 16진수 생성, 있으면 문자열화)하고
    JSON으로 직렬화한다. 조회 시 str/bytes/dict 형태의 컬럼 값을 문서로 복원한다.
디자인 패턴: 매퍼
참조: src/mongosql/integrations/db/engines/mysql/engine.py
"""

from __future__ import annotations

import json
import secrets
import time
from typing import Any, Mapping

from mongosql.integrations.db.base.errors import DocumentEncodingError
from mongosql.integrations.db.base.models import Document
from mongosql.shared.const import SharedConst

ID_FIELD = "_id"
MAX_ID_LENGTH = 64


def generate_object_id() -> str:
    """타임스탬프 8자리 + 난수 16자리의 16진수 식별자를 생성한다."""

    return f"{int(time.time()):08x}{secrets.token_hex(8)}"


class MySQLDocumentMapper:
    """MySQL JSON 컬럼 문서 매퍼."""

    def prepare(self, document: Mapping[str, Any]) -> Document:
        """_id 가 맨 앞에 오는 저장용 문서 사본을 만든다."""

        if not isinstance(document, Mapping):
            raise DocumentEncodingError("문서는 객체여야 합니다.")
        raw_id = document.get(ID_FIELD)
        doc_id = generate_object_id() if raw_id is None else str(raw_id)
        if not doc_id or len(doc_id) > MAX_ID_LENGTH:
            raise DocumentEncodingError(
                f"_id 는 1~{MAX_ID_LENGTH}자 문자열이어야 합니다.",
                metadata={"_id": doc_id[:80]},
            )
        prepared: Document = {ID_FIELD: doc_id}
        for key, value in document.items():
            if key != ID_FIELD:
                prepared[key] = value
        return prepared

    def encode(self, document: Mapping[str, Any]) -> str:
        """문서를 JSON 문자열로 직렬화한다."""

        _check_keys(document)
        try:
            return json.dumps(document, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise DocumentEncodingError(
                "문서를 JSON으로 직렬화할 수 없습니다.",
                hint="숫자/문자열/bool/null/객체/배열 값만 저장할 수 있습니다.",
                original=exc,
            ) from exc

    def decode(self, raw: Any) -> Document:
        """컬럼 값을 문서로 복원한다."""

        if isinstance(raw, dict):
            return raw
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode(SharedConst.DEFAULT_ENCODING)
        if not isinstance(raw, str):
            raise DocumentEncodingError(f"문서 컬럼 값 타입을 해석할 수 없습니다: {type(raw).__name__}")
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise DocumentEncodingError("저장된 문서가 올바른 JSON이 아닙니다.", original=exc) from exc
        if not isinstance(document, dict):
            raise DocumentEncodingError("저장된 문서가 JSON 객체가 아닙니다.")
        return document


def _check_keys(value: Any) -> None:
    if isinstance(value, Mapping):
        for key, child in value.items():
            if not isinstance(key, str):
                raise DocumentEncodingError(f"문서 키는 문자열이어야 합니다: {key!r}")
            _check_keys(child)
    elif isinstance(value, (list, tuple)):
        for child in value:
            _check_keys(child)

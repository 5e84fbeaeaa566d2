"""
목적: 읽기/쓰기/삭제 DSL 빌더 공개 API를 제공한다.
설명: 드라이버 위에서 동작하는 체이닝 빌더를 외부에 노출한다.
디자인 패턴: 퍼사드
참조: src/mongosql/integrations/db/query_builder/read_builder.py
"""

from mongosql.integrations.db.query_builder.delete_builder import DeleteBuilder
from mongosql.integrations.db.query_builder.read_builder import ReadBuilder
from mongosql.integrations.db.query_builder.write_builder import WriteBuilder

__all__ = ["DeleteBuilder", "ReadBuilder", "WriteBuilder"]

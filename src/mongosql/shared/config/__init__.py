"""
목적: 설정 로더 공개 API를 제공한다.
설명: dict/JSON 파일/환경 변수 병합 로더를 외부에 노출한다.
디자인 패턴: 퍼사드
참조: src/mongosql/shared/config/loader.py
"""

from mongosql.shared.config.loader import ConfigLoader, ConfigSourceError

__all__ = ["ConfigLoader", "ConfigSourceError"]

"""
목적: 공통 상수 집합을 제공한다.
설명: 프로젝트 전역에서 사용하는 기본 상수 값을 정의한다.
디자인 패턴: 상수 객체
참조: src/mongosql/shared/config/loader.py, src/mongosql/bootstrap.py
"""


class SharedConst:
    """공통 상수 집합이다.

    Attributes:
        DEFAULT_ENCODING: 기본 파일 인코딩.
        ENV_NESTED_DELIMITER: 환경 변수 키를 중첩 경로로 해석하는 구분자.
        ENV_PREFIX: 드라이버 설정 환경 변수 접두사.
        LOG_LEVEL: 기본 최소 로그 레벨.
        LOG_MAX_RECORDS: 인메모리 로그 저장소가 보관하는 최대 레코드 수.
        SERVER_NAME: 부트스트랩에서 이 드라이버를 선택하는 서버 이름.
        STORAGE_KEY: 서비스 레지스트리에 등록되는 저장소 키.
    """

    DEFAULT_ENCODING = "utf-8"
    ENV_NESTED_DELIMITER = "__"
    ENV_PREFIX = "MONGOSQL__"
    LOG_LEVEL = "INFO"
    LOG_MAX_RECORDS = 1000
    SERVER_NAME = "sqldriver"
    STORAGE_KEY = "storage"


__all__ = ["SharedConst"]

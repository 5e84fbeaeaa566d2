"""
목적: 외부 시스템 연동 패키지를 정의한다.
설명: 관계형 DB 연동 모듈을 묶는다.
디자인 패턴: 패키지
참조: src/mongosql/integrations/db/__init__.py
"""

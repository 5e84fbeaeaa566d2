"""
목적: SQL 방언별 엔진 패키지를 정의한다.
설명: MySQL 계열 엔진과 공통 SQL 유틸리티를 묶는다.
디자인 패턴: 패키지
참조: src/mongosql/integrations/db/engines/mysql/__init__.py
"""

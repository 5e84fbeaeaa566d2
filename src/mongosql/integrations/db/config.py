"""
목적: 드라이버 설정 로딩을 제공한다.
설명: JSON 파일 → 환경 변수(MONGOSQL__ 접두사) → overrides 순으로 병합한 뒤
    "database" 섹션(없으면 최상위)을 DriverConfig 로 검증한다.
    예) MONGOSQL__DATABASE__OPTIONS__DBNAME=cms → {"database": {"options": {"dbname": "cms"}}}
디자인 패턴: 빌더 패턴
참조: src/mongosql/shared/config/loader.py, src/mongosql/integrations/db/base/models.py
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import ValidationError

from mongosql.integrations.db.base.errors import ConfigurationError
from mongosql.integrations.db.base.models import DriverConfig
from mongosql.shared.config import ConfigLoader, ConfigSourceError
from mongosql.shared.const import SharedConst
from mongosql.shared.logging import Logger, create_default_logger

CONFIG_SECTION = "database"


def load_driver_config(
    path: Optional[str] = None,
    env_prefix: Optional[str] = SharedConst.ENV_PREFIX,
    overrides: Optional[Mapping[str, Any]] = None,
    logger: Optional[Logger] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DriverConfig:
    """설정 소스를 병합해 DriverConfig 를 만든다."""

    logger = logger or create_default_logger("DriverConfigLoader")
    loader = ConfigLoader(logger=logger)
    try:
        if path:
            loader.add_json_file(path, required=True)
        if env_prefix:
            loader.add_env(prefix=env_prefix, environ=environ)
        merged = loader.build(overrides)
    except ConfigSourceError as exc:
        raise ConfigurationError(exc.message, metadata=exc.detail.metadata, original=exc) from exc
    section = merged.get(CONFIG_SECTION, merged)
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"{CONFIG_SECTION} 설정은 객체여야 합니다.")
    try:
        config = DriverConfig.model_validate(dict(section))
    except ValidationError as exc:
        raise ConfigurationError(
            "드라이버 설정이 올바르지 않습니다.",
            metadata={"errors": exc.errors(include_url=False)},
            original=exc,
        ) from exc
    logger.info(
        "드라이버 설정을 불러왔습니다.",
        metadata={"server": config.server, "connection": config.options.connection},
    )
    return config

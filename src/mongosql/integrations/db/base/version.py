"""
목적: 서버 버전 파싱과 최소 버전 검증을 제공한다.
설명: 버전 문자열을 대시 단위 조각으로 나누고, 포크 마커 감지와
    복제 호환 sentinel 제거를 독립된 단계로 수행한 뒤 계열별 최소 버전과 비교한다.
    예) "5.5.5-10.2.26-MariaDB-1:10.2.26+maria~bionic" → mariadb, 10.2.26
디자인 패턴: 파이프라인, 템플릿 메서드(VersionGate 확장 지점)
참조: src/mongosql/integrations/db/base/models.py, src/mongosql/integrations/db/engines/mysql/dialect.py
"""

from __future__ import annotations

import re
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, Union

from mongosql.integrations.db.base.errors import UnsupportedVersionError
from mongosql.integrations.db.base.models import ParsedVersion, ServerVersion, VersionPolicy
from mongosql.shared.logging import Logger, create_default_logger

VersionLike = Union[str, Sequence[int]]

_LEADING_DIGITS = re.compile(r"^(\d+)")


def split_fragments(raw: str) -> List[str]:
    """버전 문자열을 대시 기준 조각으로 나눈다."""

    return [fragment for fragment in raw.strip().split("-")]


def detect_family(fragments: Iterable[str], markers: Iterable[str]) -> List[str]:
    """조각 중 알려진 포크 마커 토큰을 찾아 반환한다."""

    present = set(fragments)
    return [marker for marker in markers if marker in present]


def discard_compat_sentinel(
    candidate: str,
    remaining: Sequence[str],
    sentinel: Optional[str],
) -> Tuple[str, List[str]]:
    """선두 후보가 sentinel이면 버리고 다음 조각을 후보로 삼는다."""

    rest = list(remaining)
    if sentinel and candidate == sentinel and rest:
        return rest[0], rest[1:]
    return candidate, rest


def parse_version_number(candidate: str) -> Tuple[int, int, int]:
    """점 구분 버전 번호를 (major, minor, patch)로 변환한다. 누락 요소는 0이다."""

    components: List[int] = []
    for part in candidate.strip().split(".")[:3]:
        match = _LEADING_DIGITS.match(part)
        if match is None:
            break
        components.append(int(match.group(1)))
    if not components:
        raise UnsupportedVersionError(
            f"버전 번호를 해석할 수 없습니다: {candidate!r}",
            detected=candidate,
        )
    while len(components) < 3:
        components.append(0)
    return components[0], components[1], components[2]


def compare_versions(left: VersionLike, right: VersionLike) -> int:
    """두 버전을 요소 단위로 비교해 -1/0/1을 반환한다."""

    left_tuple = _as_tuple(left)
    right_tuple = _as_tuple(right)
    if left_tuple < right_tuple:
        return -1
    if left_tuple > right_tuple:
        return 1
    return 0


def parse_server_version(raw: str, policy: VersionPolicy) -> ParsedVersion:
    """서버가 보고한 버전 문자열을 구조화된 결과로 파싱한다."""

    fragments = split_fragments(raw)
    candidate, remaining = fragments[0], fragments[1:]
    markers = detect_family(fragments, policy.fork_minimums.keys())
    family = policy.base_family
    if markers:
        family = markers[0].lower()
        candidate, remaining = discard_compat_sentinel(
            candidate, remaining, policy.compat_sentinel
        )
    return ParsedVersion(candidate=candidate, family_markers=markers, family=family)


def _as_tuple(value: VersionLike) -> Tuple[int, ...]:
    if isinstance(value, str):
        return parse_version_number(value)
    padded = list(value)[:3]
    while len(padded) < 3:
        padded.append(0)
    return tuple(int(item) for item in padded)


class VersionGate:
    """계열별 최소 버전 검증기.

    방언별 추가 검사가 필요하면 `_validate_parsed` 를 재정의한 뒤
    super() 로 공통 비교 로직에 위임한다.
    """

    def __init__(
        self,
        policy: VersionPolicy,
        reader: Callable[[Any], str],
        logger: Optional[Logger] = None,
    ) -> None:
        self._policy = policy
        self._reader = reader
        self._logger = logger or create_default_logger("VersionGate")

    @property
    def policy(self) -> VersionPolicy:
        return self._policy

    def assert_supported(self, connection: Any) -> ServerVersion:
        """연결의 서버 버전을 읽어 검증하고, 통과하면 ServerVersion을 반환한다."""

        raw = str(self._reader(connection))
        return self.check(raw)

    def check(self, raw: str) -> ServerVersion:
        """버전 문자열을 직접 검증한다."""

        parsed = parse_server_version(raw, self._policy)
        return self._validate_parsed(parsed, raw)

    def _validate_parsed(self, parsed: ParsedVersion, raw: str) -> ServerVersion:
        major, minor, patch = parse_version_number(parsed.candidate)
        required = self._policy.minimum_for(parsed.family)
        detected = f"{major}.{minor}.{patch}"
        if compare_versions((major, minor, patch), required) < 0:
            self._logger.error(
                f"지원하지 않는 서버 버전입니다: {parsed.family} {detected} < {required}",
                metadata={"raw": raw},
            )
            raise UnsupportedVersionError(
                f"{parsed.family} {detected} 은(는) 지원되지 않습니다. "
                f"최소 {required} 이상이 필요합니다.",
                detected=detected,
                required=required,
                family=parsed.family,
            )
        self._logger.info(
            f"서버 버전 확인 완료: {parsed.family} {detected}",
            metadata={"raw": raw, "required": required},
        )
        return ServerVersion(
            major=major, minor=minor, patch=patch, family=parsed.family, raw=raw
        )

"""Pydantic 데이터 모델 모듈

마커, 좌표, 경로 계산 결과, 입력 폼 데이터는 모두 이 모듈의 모델로 검증한다.
"""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from src.core.exceptions import InvalidCoordinateError

IconKind = Literal["round", "substation"]
RouteMode = Literal["straight", "road"]
# straight_fallback: 도로 경로를 요청했지만 라우팅 서비스 실패로 직선 계산된 결과
RouteKind = Literal["straight", "road", "straight_fallback"]

ROUTE_MODES: tuple[RouteMode, ...] = ("straight", "road")
ICON_KINDS: tuple[IconKind, ...] = ("round", "substation")


class Coordinate(BaseModel):
    """위경도 좌표 (lat, lng). 유한한 값 + 범위 검증."""

    model_config = {"frozen": True}

    lat: float = Field(..., ge=-90.0, le=90.0, allow_inf_nan=False, description="위도")
    lng: float = Field(..., ge=-180.0, le=180.0, allow_inf_nan=False, description="경도")

    def as_tuple(self) -> tuple[float, float]:
        return self.lat, self.lng


def make_coordinate(lat: float, lng: float) -> Coordinate:
    """Coordinate를 생성하고, 검증 실패는 InvalidCoordinateError로 변환."""
    try:
        return Coordinate(lat=lat, lng=lng)
    except ValidationError as exc:
        raise InvalidCoordinateError(f"좌표가 올바르지 않습니다: ({lat}, {lng})") from exc


class Marker(BaseModel):
    """지도 위 단일 마커(Point).

    MarkerStore만 생성/삭제한다. 외부에는 복사본만 노출된다.
    """

    id: int = Field(..., description="세션 내 고유 id (단조 증가)")
    lat: float = Field(..., ge=-90.0, le=90.0, allow_inf_nan=False, description="위도")
    lng: float = Field(..., ge=-180.0, le=180.0, allow_inf_nan=False, description="경도")
    name: str = Field(default="", description="표시 이름")
    capacity_label: str = Field(default="", description="용량 라벨 (자유 텍스트, 예: 50 kVA)")
    icon_kind: IconKind = Field(default="round", description="아이콘 종류")

    @property
    def position(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


class Segment(BaseModel):
    """선택된 연속 두 마커 사이 구간."""

    model_config = {"frozen": True}

    from_id: int | None = None
    to_id: int | None = None
    distance_km: float = 0.0
    midpoint: Coordinate


class RouteResult(BaseModel):
    """경로 계산 결과. 부분 수정 없이 통째로 교체한다."""

    model_config = {"frozen": True}

    kind: RouteKind
    requested_mode: RouteMode
    polyline: list[Coordinate] = Field(default_factory=list)
    segments: list[Segment] = Field(default_factory=list)
    total_km: float = 0.0
    request_id: int = 0

    @property
    def is_fallback(self) -> bool:
        return self.kind == "straight_fallback"

    @property
    def is_empty(self) -> bool:
        return not self.segments


def empty_route(mode: RouteMode = "straight", request_id: int = 0) -> RouteResult:
    return RouteResult(kind=mode, requested_mode=mode, request_id=request_id)


def parse_coordinate_text(text: str, label: str = "좌표") -> float:
    """폼에서 입력된 위도/경도 문자열을 유한한 float로 변환.

    빈 문자열, 숫자가 아닌 값, NaN/inf는 InvalidCoordinateError.
    """

    raw = (text or "").strip()
    if not raw:
        raise InvalidCoordinateError(f"{label} 값이 비어 있습니다.")
    try:
        value = float(raw)
    except ValueError as exc:
        raise InvalidCoordinateError(f"{label} 값이 숫자가 아닙니다: {raw!r}") from exc
    if not math.isfinite(value):
        raise InvalidCoordinateError(f"{label} 값이 유한한 숫자가 아닙니다: {raw!r}")
    return value


class MarkerForm(BaseModel):
    """추가/수정 폼 입력값 (원문 텍스트 그대로)."""

    lat: str = Field(default="", description="위도 입력 문자열")
    lng: str = Field(default="", description="경도 입력 문자열")
    name: str = Field(default="", description="이름 (비우면 기본 이름)")
    capacity_label: str = Field(default="", description="용량 라벨")
    icon_kind: IconKind = Field(default="round")

    @property
    def is_complete(self) -> bool:
        """위도/경도가 모두 입력되었는지 (추가 버튼 활성화 조건)."""
        return bool(self.lat.strip()) and bool(self.lng.strip())

    def to_position(self) -> Coordinate:
        lat = parse_coordinate_text(self.lat, "위도")
        lng = parse_coordinate_text(self.lng, "경도")
        return make_coordinate(lat, lng)

    @classmethod
    def from_marker(cls, marker: Marker) -> MarkerForm:
        """수정 폼 초기값. 기존 마커 값을 문자열로 채운다."""
        return cls(
            lat=str(marker.lat),
            lng=str(marker.lng),
            name=marker.name,
            capacity_label=marker.capacity_label,
            icon_kind=marker.icon_kind,
        )

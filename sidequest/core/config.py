"""애플리케이션 전역 설정을 관리하는 모듈."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """환경 변수 기반 설정 모델."""

    OPENAI_API_KEY: str | None = None
    LLM_MODEL_NAME: str = "gpt-4o-mini"
    LLM_TEMPERATURE: float = 0.7
    REQUEST_TIMEOUT_SECONDS: int = 60
    QUEST_LLM_TIMEOUT_SECONDS: int = 20
    HOTEL_PRICE_LLM_TIMEOUT_SECONDS: int = 15
    EXTERNAL_API_TIMEOUT_SECONDS: int = 25
    ROUTING_TIMEOUT_SECONDS: int = 15
    OVERPASS_TIMEOUT_SECONDS: int = 25
    GEOCODING_TIMEOUT_SECONDS: int = 10
    OSRM_BASE_URL: str = "https://router.project-osrm.org"
    OVERPASS_API_URL: str = "https://overpass-api.de/api/interpreter"
    NOMINATIM_BASE_URL: str = "https://nominatim.openstreetmap.org"
    HTTP_USER_AGENT: str = "SideQuest/1.0"
    HTTP_MAX_RETRIES: int = 2
    HTTP_BACKOFF_BASE_SECONDS: float = 3.0
    HTTP_BACKOFF_MAX_SECONDS: float = 12.0
    POI_BATCH_SIZE: int = 5
    POI_BATCH_PAUSE_SECONDS: float = 0.5
    AI_QUEST_SAMPLE_INTERVAL_KM: float = 30.0
    AI_QUEST_POI_RADIUS_METERS: int = 10000
    CATALOG_PATH: str | None = None
    ITINERARY_DAY_DISTANCE_POLICY: str = "segment_sum"
    ITINERARY_MAX_DETOUR_MINUTES: int = 30
    DEFAULT_REGION_NAME: str = "Germany"
    APP_ENV: str = "development"
    EXPOSE_INTERNAL_ERRORS: bool = False
    CORS_ALLOW_ORIGINS: str = ""
    CORS_ALLOW_METHODS: str = "GET,POST,OPTIONS"
    CORS_ALLOW_HEADERS: str = "Authorization,Content-Type"
    CORS_ALLOW_CREDENTIALS: bool = False
    SECURITY_HEADERS_ENABLED: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("HTTP_MAX_RETRIES", mode="before")
    @classmethod
    def _clamp_http_max_retries(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 2
        except (TypeError, ValueError):
            numeric = 2
        return min(5, max(0, numeric))

    @field_validator("POI_BATCH_SIZE", mode="before")
    @classmethod
    def _clamp_poi_batch_size(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 5
        except (TypeError, ValueError):
            numeric = 5
        return min(10, max(1, numeric))

    @field_validator("ITINERARY_DAY_DISTANCE_POLICY", mode="before")
    @classmethod
    def _normalize_day_distance_policy(cls, value: object) -> str:
        normalized = str(value or "").strip().lower()
        if normalized in {"segment_sum", "equal_split"}:
            return normalized
        return "segment_sum"


@lru_cache
def get_settings() -> Settings:
    """Settings 인스턴스를 반환한다. 최초 호출 시에만 생성되고 이후 캐싱된다."""
    return Settings()

import logging
from zoneinfo import ZoneInfo

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class CustomSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    """

    fs42_api_url: str = ""
    tmdb_key: str = ""
    tmdb_api_url: str = "https://api.themoviedb.org/3"
    tmdb_image_base_url: str = "https://image.tmdb.org/t/p/w185"
    tmdb_certification_region: str = "US"
    tmdb_cache_max_entries: int = 1000
    tmdb_cache_ttl_sec: int = 3600  # 1 hour
    tmdb_min_interval_ms: int = 250  # 4 calls per second
    enrichment_concurrency: int = 4
    http_timeout_sec: float = 10.0
    ignore_chans: str = ""  # comma-separated channel names
    guide_timezone: str | None = None  # None uses the system local time
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("fs42_api_url", "tmdb_api_url", "tmdb_image_base_url")
    @classmethod
    def validate_urls(cls, value: str, info) -> str:
        """Validate service URLs are HTTP/HTTPS."""
        value = value.strip()
        if value and not value.lower().startswith(("http://", "https://")):
            raise ValueError(f"{info.field_name} must be an HTTP/HTTPS URL: {value}")
        return value.rstrip("/")

    @field_validator("tmdb_certification_region")
    @classmethod
    def validate_region(cls, value: str) -> str:
        """Validate ISO 3166-1 alpha-2 region code."""
        normalized = value.strip().upper()
        if len(normalized) != 2 or not normalized.isalpha():
            raise ValueError("tmdb_certification_region must be a 2-letter country code")
        return normalized

    @field_validator("tmdb_cache_max_entries", "tmdb_cache_ttl_sec", "enrichment_concurrency")
    @classmethod
    def validate_positive_ints(cls, value: int, info) -> int:
        """Ensure sizes and durations are positive integers."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return value

    @field_validator("tmdb_min_interval_ms")
    @classmethod
    def validate_min_interval(cls, value: int) -> int:
        """Validate rate limiter spacing (milliseconds)."""
        if value < 0:
            raise ValueError("tmdb_min_interval_ms must be >= 0")
        return value

    @field_validator("http_timeout_sec")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        """Validate HTTP client timeout (seconds)."""
        if value <= 0:
            raise ValueError("http_timeout_sec must be > 0")
        return value

    @field_validator("guide_timezone")
    @classmethod
    def validate_timezone(cls, value: str | None) -> str | None:
        """Validate timezone string"""
        if value is None or not value.strip():
            return None
        try:
            ZoneInfo(value.strip())
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Invalid timezone: {value}. Must be a valid IANA timezone") from exc
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate logging level name."""
        normalized = value.strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @model_validator(mode="after")
    def validate_required_services(self):
        """Warn early about missing upstream configuration."""
        if not self.fs42_api_url:
            logger.warning("FS42_API_URL is not set - the service will refuse to start")
        if not self.tmdb_key:
            logger.warning("TMDB_KEY is not set - the service will refuse to start")
        return self

    @property
    def ignored_channels(self) -> list[str]:
        """Parse comma-separated channel names."""
        return [name.strip() for name in self.ignore_chans.split(",") if name.strip()]

    @property
    def is_configured(self) -> bool:
        return bool(self.fs42_api_url and self.tmdb_key)

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  Listings API: %s", self.fs42_api_url or "not set")
        logger.info("  TMDb API: %s (key %s)", self.tmdb_api_url, "set" if self.tmdb_key else "not set")
        logger.info("  Certification Region: %s", self.tmdb_certification_region)
        logger.info(
            "  Metadata Cache: %s entries, %ss TTL",
            self.tmdb_cache_max_entries,
            self.tmdb_cache_ttl_sec,
        )
        logger.info("  TMDb Min Interval: %sms", self.tmdb_min_interval_ms)
        logger.info("  Enrichment Concurrency: %s", self.enrichment_concurrency)
        logger.info("  HTTP Timeout: %.1fs", self.http_timeout_sec)
        logger.info("  Ignored Channels: %s", ", ".join(self.ignored_channels) or "none")
        logger.info("  Guide Timezone: %s", self.guide_timezone or "system local")


settings = CustomSettings()


def setup_logging(level: str | None = None) -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

from policy_gateway.entities import ModelProfile
from policy_gateway.exceptions import ConfigurationError

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Upstream (Azure OpenAI)
    azure_openai_endpoint: str = os.getenv(
        "AZURE_OPENAI_ENDPOINT", "https://localhost.cognitiveservices.azure.com"
    )
    azure_openai_api_key: str | None = os.getenv("AZURE_OPENAI_API_KEY")
    # Full chat-completions URL; overrides endpoint + model profile route when set
    azure_openai_url: str | None = os.getenv("AZURE_OPENAI_URL")
    model_profile: str = os.getenv("MODEL_PROFILE", ModelProfile.GPT41_MYAGENT.value)
    upstream_timeout: float = float(os.getenv("UPSTREAM_TIMEOUT", "30"))

    # Cache
    cache_ttl: int = int(os.getenv("CACHE_TTL", "1800"))  # 30 minutes default
    cache_sweep_interval: float = float(os.getenv("CACHE_SWEEP_INTERVAL", "300"))
    cache_backend: str = os.getenv("CACHE_BACKEND", "memory")
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "policy_gateway")

    # Redis (only used when CACHE_BACKEND=redis)
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Policy sources
    policy_source_dir: str = os.getenv("POLICY_SOURCE_DIR", "samples/policies/welcome")
    ibm_policy_source_dir: str = os.getenv("IBM_POLICY_SOURCE_DIR", "samples/policies/ibm")
    ibm_schema_file: str = os.getenv(
        "IBM_SCHEMA_FILE", "samples/schemas/ibm/fixed-width-policy-schema.txt"
    )
    ibm_example_output_file: str | None = os.getenv("IBM_EXAMPLE_OUTPUT_FILE")

    # File watcher
    inbound_dir: str = os.getenv("INBOUND_DIR", "samples/inbound")
    outbound_dir: str = os.getenv("OUTBOUND_DIR", "samples/outbound")
    watcher_enabled: bool = os.getenv("WATCHER_ENABLED", "false").lower() == "true"
    watcher_poll_interval: float = float(os.getenv("WATCHER_POLL_INTERVAL", "5"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "9081"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def profile(self) -> ModelProfile:
        """Resolve the configured model profile.

        Returns:
            The ModelProfile matching MODEL_PROFILE
        """
        return ModelProfile(self.model_profile)

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.model_profile not in {p.value for p in ModelProfile}:
            raise ConfigurationError(
                f"MODEL_PROFILE must be one of {[p.value for p in ModelProfile]}, "
                f"got {self.model_profile!r}"
            )

        if self.cache_ttl <= 0:
            raise ConfigurationError("CACHE_TTL must be a positive number of seconds")

        if self.upstream_timeout <= 0:
            raise ConfigurationError("UPSTREAM_TIMEOUT must be positive")

        if self.cache_sweep_interval <= 0 or self.watcher_poll_interval <= 0:
            raise ConfigurationError("CACHE_SWEEP_INTERVAL and WATCHER_POLL_INTERVAL must be positive")

        if self.cache_backend not in ("memory", "redis"):
            raise ConfigurationError(
                f"CACHE_BACKEND must be 'memory' or 'redis', got {self.cache_backend!r}"
            )

    def require_api_key(self) -> str:
        """Return the upstream credential or fail at startup.

        Raises:
            ConfigurationError: If AZURE_OPENAI_API_KEY is not set
        """
        if not self.azure_openai_api_key:
            raise ConfigurationError("AZURE_OPENAI_API_KEY is not set")
        return self.azure_openai_api_key


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def get_redis_client(settings: Settings | None = None) -> redis.Redis:
    """Create a Redis client instance."""
    settings = settings or get_settings()
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )

"""
Application Configuration

Settings are read from the environment (and a local .env file, if any).
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

from match_analytics.domain.value_objects.value_objects import ModelSettings
from match_analytics.infrastructure.cache.redis_client import RedisConfig
from match_analytics.infrastructure.data_sources.remote_prediction_client import RemotePredictionConfig

# Origins always allowed by CORS (local dashboard dev servers)
BASE_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


@dataclass
class Settings:
    """Runtime settings of the service."""
    database_url: Optional[str] = None
    remote: RemotePredictionConfig = field(default_factory=RemotePredictionConfig)
    redis_enabled: bool = False
    redis: RedisConfig = field(default_factory=RedisConfig)
    model: ModelSettings = field(default_factory=ModelSettings)
    prediction_timeout_seconds: float = 5.0
    worker_max_pending: int = 32
    cache_sweep_interval_seconds: int = 300
    cors_origins: List[str] = field(default_factory=lambda: list(BASE_CORS_ORIGINS))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        extra_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
        # Combine and remove duplicates, keeping order
        origins = list(dict.fromkeys(BASE_CORS_ORIGINS + extra_origins))

        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            remote=RemotePredictionConfig(
                base_url=os.getenv("PREDICTION_API_URL") or None,
                api_key=os.getenv("PREDICTION_API_KEY") or None,
                timeout=float(os.getenv("PREDICTION_API_TIMEOUT", 10)),
            ),
            redis_enabled=_env_bool("REDIS_ENABLED"),
            redis=RedisConfig(
                host=os.getenv("REDIS_HOST", "localhost"),
                port=int(os.getenv("REDIS_PORT", 6379)),
                password=os.getenv("REDIS_PASSWORD") or None,
            ),
            prediction_timeout_seconds=float(os.getenv("PREDICTION_TIMEOUT_SECONDS", 5)),
            worker_max_pending=int(os.getenv("WORKER_MAX_PENDING", 32)),
            cache_sweep_interval_seconds=int(os.getenv("CACHE_SWEEP_INTERVAL_SECONDS", 300)),
            cors_origins=origins,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

from enum import StrEnum
from pathlib import Path
from typing import Annotated, List

import orjson
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class StoreBackend(StrEnum):
    POSTGRES = 'postgres'
    MEMORY = 'memory'


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Ticket Reservation Engine'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # CORS
    # Comma-separated or a JSON list; NoDecode hands the raw string to the validator
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and v.strip().startswith('['):
            return orjson.loads(v)
        if isinstance(v, str):
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # Storage backend: 'postgres' for multi-instance deployments,
    # 'memory' for a single process (local runs and tests)
    STORE_BACKEND: StoreBackend = StoreBackend.POSTGRES
    CREATE_TABLES_ON_STARTUP: bool = True

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'ticket_reservation'
    DATABASE_URL: str = ''  # Overrides POSTGRES_* when set (e.g. sqlite+aiosqlite:///./dev.db)

    # SQLAlchemy pool
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}'
            f'@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # Reservation policy
    HOLD_DURATION_MINUTES: int = 15
    MAX_TICKETS_PER_ORDER: int = 5
    MAX_TICKETS_PER_BUYER: int = 10  # pending + confirmed, per buyer per ticket type

    # Expiry sweepers
    ENABLE_EXPIRY_SWEEPER: bool = True
    ORDER_SWEEP_INTERVAL_SECONDS: float = 30.0
    LISTING_SWEEP_INTERVAL_SECONDS: float = 60.0
    SWEEP_BATCH_SIZE: int = 500

    @field_validator('ORDER_SWEEP_INTERVAL_SECONDS', 'LISTING_SWEEP_INTERVAL_SECONDS')
    @classmethod
    def check_sweep_interval(cls, v: float) -> float:
        if not 0 < v <= 60:
            raise ValueError('sweep interval must be within (0, 60] seconds')
        return v

    # External collaborators (empty URL selects the local implementation)
    PAYMENT_VERIFIER_URL: str = ''
    OWNERSHIP_ORACLE_URL: str = ''
    UPSTREAM_TIMEOUT_SECONDS: float = 5.0

    # Tracing (without an endpoint or console export, spans are not exported)
    OTEL_EXPORTER_OTLP_ENDPOINT: str = ''
    OTEL_CONSOLE_EXPORT: bool = False
    OTEL_SAMPLE_RATIO: float = 1.0

    @field_validator('OTEL_SAMPLE_RATIO')
    @classmethod
    def check_sample_ratio(cls, v: float) -> float:
        if not 0 <= v <= 1:
            raise ValueError('sample ratio must be within [0, 1]')
        return v


settings = Settings()  # type: ignore

"""
Configuration management for the corruption harness.

Uses pydantic-settings for type-safe environment variable handling.
Every field can be overridden from the command line (see corrupttest.cli).
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FAILPOINT = "github.com/pingcap/tidb/table/tables/corruptMutations"


class AssertionLevel(str, Enum):
    """Transaction assertion level of the target database."""

    OFF = "off"
    FAST = "fast"
    STRICT = "strict"


class Settings(BaseSettings):
    """
    Harness settings loaded from environment variables.

    The database URL may carry a password; use get_redacted_config() when logging.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORRUPTTEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Workload selection
    workload: str = Field(
        default="single",
        description="Registered workload name (single, double, t2, t3, t4)",
    )
    mutation_checker: bool = Field(
        default=True,
        description="Value of tidb_enable_mutation_checker for workload sessions",
    )
    assertion: AssertionLevel = Field(
        default=AssertionLevel.STRICT,
        description="Value of tidb_txn_assertion_level for workload sessions",
    )
    limit: int | None = Field(
        default=None,
        ge=1,
        description="Maximum number of tables to test",
    )

    # Endpoints
    database_url: str = Field(
        default="mysql://root@127.0.0.1:4000/test",
        description="Database connection URI",
    )
    status_address: str = Field(
        default="127.0.0.1:10080",
        description="host:port of the failpoint HTTP endpoint",
    )
    failpoint_name: str = Field(
        default=DEFAULT_FAILPOINT,
        description="Failpoint that corrupts generated mutations",
    )
    failpoint_timeout_s: float | None = Field(
        default=None,
        gt=0,
        description="Timeout for failpoint control calls (None waits forever)",
    )

    # Execution
    txn_mode: str | None = Field(
        default="optimistic",
        description="Transaction mode for workload sessions (optimistic, pessimistic)",
    )
    workers: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Number of concurrent workers, each with its own connection",
    )

    # Output
    log_file: Path | None = Field(default=None, description="Optional log file path")
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit JSON log lines")
    summary_csv: Path | None = Field(
        default=None,
        description="Where to write the per-injection summary table",
    )

    @field_validator("workload")
    @classmethod
    def normalize_workload(cls, v: str) -> str:
        """Workload names are case-insensitive."""
        return v.strip().lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @field_validator("txn_mode")
    @classmethod
    def validate_txn_mode(cls, v: str | None) -> str | None:
        if v is None or v == "":
            return None
        lower_v = v.lower()
        if lower_v not in {"optimistic", "pessimistic"}:
            raise ValueError(f"Invalid txn mode: {v}. Must be optimistic or pessimistic")
        return lower_v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        scheme = urlsplit(v).scheme
        if scheme not in {"mysql", "mysql+pymysql"}:
            raise ValueError(f"Unsupported database URL scheme: {scheme!r}")
        return v

    @property
    def mutation_checker_value(self) -> str:
        """Session variable value for the mutation checker."""
        return "ON" if self.mutation_checker else "OFF"

    @property
    def begin_statement(self) -> str:
        """Statement that opens a workload transaction."""
        if self.txn_mode is None:
            return "BEGIN"
        return f"BEGIN {self.txn_mode.upper()}"

    def get_redacted_config(self) -> dict[str, str | int | bool | None]:
        """
        Get configuration dict with the database password masked.
        Safe for logging.
        """
        return {
            "workload": self.workload,
            "mutation_checker": self.mutation_checker_value,
            "assertion": self.assertion.value,
            "limit": self.limit,
            "database_url": redact_url(self.database_url),
            "status_address": self.status_address,
            "failpoint_name": self.failpoint_name,
            "txn_mode": self.txn_mode,
            "workers": self.workers,
            "log_file": str(self.log_file) if self.log_file else None,
        }


def redact_url(url: str) -> str:
    """Replace the password of a URL with asterisks."""
    parts = urlsplit(url)
    if parts.password is None:
        return url
    netloc = parts.hostname or ""
    if parts.port is not None:
        netloc = f"{netloc}:{parts.port}"
    netloc = f"{parts.username}:***@{netloc}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure single instance throughout the process.
    """
    return Settings()

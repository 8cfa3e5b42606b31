"""Pydantic configuration models for treesum."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings


class EngineConfig(BaseModel):
    """Worker pool and streaming configuration."""

    workers: int = Field(default=100, ge=1, le=1024)
    chunk_size: int = Field(default=4096, ge=512, le=16 * 1024 * 1024)
    intake_size: int = Field(default=100, ge=1, le=100_000)
    result_buffer: int = Field(default=100, ge=1, le=100_000)


class WalkConfig(BaseModel):
    """Directory traversal configuration."""

    follow_symlinks: bool = False
    exclude_patterns: list[str] = Field(default_factory=list)


class DigestConfig(BaseModel):
    """Digest algorithm configuration."""

    algorithms: list[str] = Field(
        default_factory=lambda: ["md5", "sha1", "sha256", "sha512", "blake2b"],
        min_length=1,
    )
    default_algorithm: str = "sha1"

    @field_validator("algorithms")
    @classmethod
    def normalize_algorithms(cls, v: list[str]) -> list[str]:
        """Lowercase names and reject variable-length digests."""
        names = []
        for name in v:
            name = name.strip().lower()
            if not name:
                raise ValueError("algorithm names must not be empty")
            if name.startswith("shake_"):
                raise ValueError(f"variable-length digest not supported: {name}")
            if name not in names:
                names.append(name)
        return names

    @model_validator(mode="after")
    def check_default(self) -> "DigestConfig":
        """Validate the default algorithm is one of the configured ones."""
        self.default_algorithm = self.default_algorithm.lower()
        if self.default_algorithm not in self.algorithms:
            raise ValueError(
                f"default_algorithm {self.default_algorithm!r} is not in algorithms"
            )
        return self


class LoggingConfig(BaseModel):
    """Logging configuration for loguru."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    format: Literal["console", "json"] = "console"
    file: Path | None = None
    rotation: str = "10 MB"
    retention: str = "7 days"


class Config(BaseSettings):
    """Root configuration for treesum."""

    engine: EngineConfig = Field(default_factory=EngineConfig)
    walk: WalkConfig = Field(default_factory=WalkConfig)
    digest: DigestConfig = Field(default_factory=DigestConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "TREESUM_",
        "env_nested_delimiter": "__",
    }

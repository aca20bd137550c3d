"""Retriever configuration with environment overrides."""

from __future__ import annotations

import logging
import os
from typing import Mapping

from pydantic import BaseModel, Field, field_validator

from agentrecall.query_cache import DEFAULT_SEARCH_CACHE_SIZE
from agentrecall.store import DEFAULT_STORE_MAX_SIZE

ENV_PREFIX = "AGENTRECALL_"
DEFAULT_BROKER_URL = "http://localhost:8000"


class RetrieverConfig(BaseModel):
    """Constructor-time settings for a retrieval engine and its broker."""

    max_results: int = Field(default=10, ge=1, description="Entries formatted per retrieval")
    default_min_score: float = Field(default=1, description="Minimum combined score to include")
    store_max_size: int = Field(default=DEFAULT_STORE_MAX_SIZE, ge=1)
    search_cache_size: int = Field(default=DEFAULT_SEARCH_CACHE_SIZE, ge=1)
    infer_filters: bool = Field(
        default=False,
        description="Derive category/agent/tag bonuses from the query wording",
    )
    log_level: str = "INFO"
    broker_url: str = DEFAULT_BROKER_URL

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RetrieverConfig:
        """Build a config from AGENTRECALL_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            RetrieverConfig with defaults for unset variables
        """
        environ = os.environ if environ is None else environ
        overrides = {}
        for field_name in cls.model_fields:
            value = environ.get(f"{ENV_PREFIX}{field_name.upper()}")
            if value is not None:
                overrides[field_name] = value
        return cls(**overrides)

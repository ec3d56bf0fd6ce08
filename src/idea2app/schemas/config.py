"""Configuration schemas: provider settings and the project file."""

from __future__ import annotations

import os
from typing import Mapping

from pydantic import BaseModel, model_validator

from idea2app.shared.llm_client import DEFAULT_MODEL, OPENROUTER_BASE_URL


class ProviderSettings(BaseModel):
    """API keys, endpoints and models for the third-party providers.

    Built from the environment by :meth:`from_env`; components receive an
    instance through their constructors.
    """

    openrouter_api_key: str = ""
    openrouter_base_url: str = OPENROUTER_BASE_URL
    analysis_model: str = DEFAULT_MODEL
    chat_model: str = DEFAULT_MODEL

    perplexity_api_key: str = ""
    perplexity_base_url: str = "https://api.perplexity.ai"
    perplexity_model: str = "sonar-pro"

    tavily_api_key: str = ""
    tavily_extract_url: str = "https://api.tavily.com/extract"
    extraction_timeout: float = 30.0

    # Outer deadline for one whole generation, in seconds
    pipeline_timeout: float = 300.0

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "ProviderSettings":
        env = os.environ if env is None else env
        values: dict[str, str] = {}
        for field, var in (
            ("openrouter_api_key", "OPENROUTER_API_KEY"),
            ("openrouter_base_url", "OPENROUTER_BASE_URL"),
            ("analysis_model", "OPENROUTER_ANALYSIS_MODEL"),
            ("chat_model", "OPENROUTER_CHAT_MODEL"),
            ("perplexity_api_key", "PERPLEXITY_API_KEY"),
            ("perplexity_model", "PERPLEXITY_MODEL"),
            ("tavily_api_key", "TAVILY_API_KEY"),
            ("pipeline_timeout", "IDEA2APP_PIPELINE_TIMEOUT"),
        ):
            if env.get(var):
                values[field] = env[var]
        return cls(**values)


class ProjectConfig(BaseModel):
    """Top-level project file loaded from ``project.yml``.

    ``idea`` and ``name`` are required; ``credits`` seeds the local ledger
    the first time the data file is created.
    """

    project_id: str = "local-project"
    user_id: str = "local-user"
    name: str
    idea: str

    model: str = ""
    credits: int = 100

    data_file: str = "./idea2app-data.json"
    output_directory: str = "./output"

    @model_validator(mode="after")
    def check_has_idea(self) -> "ProjectConfig":
        if not self.idea.strip():
            raise ValueError("'idea' must not be empty")
        if not self.name.strip():
            raise ValueError("'name' must not be empty")
        return self

    @model_validator(mode="after")
    def check_credits(self) -> "ProjectConfig":
        if self.credits < 0:
            raise ValueError("'credits' must be zero or positive")
        return self

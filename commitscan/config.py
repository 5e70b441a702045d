"""
Environment-based configuration.

Variables (a ``.env`` file is honoured when loaded with ``load_env_file``):

    OPENAI_API_KEY              API key (required for scanning)
    OPENAI_API_MODEL            model or Azure deployment name (required)
    OPENAI_API_BASE             base URL, for proxies or Azure endpoints
    OPENAI_API_VERSION          Azure api-version; enables Azure style auth
    COMMITSCAN_CONCURRENCY      worker count (default 20)
    COMMITSCAN_TOP              size of the top results list (default 10)
    COMMITSCAN_MAX_SHOW_OUTPUT  cap on ``git show`` characters (default 12000)
    COMMITSCAN_MAX_RETRIES      attempts per API call (default 3)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Optional

from dotenv import load_dotenv

from commitscan.core.errors import ConfigurationError

if TYPE_CHECKING:
    from openai import AsyncOpenAI


def load_env_file(path: str | None = None) -> bool:
    """Load ``path`` (or a ``.env`` found from the cwd) without overriding."""
    return load_dotenv(dotenv_path=path, override=False)


def _int_var(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be an integer", variable=name, value=raw
        ) from None
    if value < 1:
        raise ConfigurationError(f"{name} must be positive", variable=name, value=raw)
    return value


@dataclass
class ScanConfig:
    """Settings for a scan run."""

    api_key: Optional[str] = None
    model: Optional[str] = None
    api_base: Optional[str] = None
    api_version: Optional[str] = None

    concurrency: int = 20
    top: int = 10
    max_show_output: int = 12000
    max_retries: int = 3

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "ScanConfig":
        env = os.environ if env is None else env
        return cls(
            api_key=env.get("OPENAI_API_KEY") or None,
            model=env.get("OPENAI_API_MODEL") or None,
            api_base=env.get("OPENAI_API_BASE") or None,
            api_version=env.get("OPENAI_API_VERSION") or None,
            concurrency=_int_var(env, "COMMITSCAN_CONCURRENCY", 20),
            top=_int_var(env, "COMMITSCAN_TOP", 10),
            max_show_output=_int_var(env, "COMMITSCAN_MAX_SHOW_OUTPUT", 12000),
            max_retries=_int_var(env, "COMMITSCAN_MAX_RETRIES", 3),
        )

    @property
    def is_azure(self) -> bool:
        return self.api_version is not None

    def validate_for_analysis(self) -> None:
        """Raise ConfigurationError unless an LLM can be called."""
        if not self.api_key:
            raise ConfigurationError(
                "No API key configured", variable="OPENAI_API_KEY"
            )
        if not self.model:
            raise ConfigurationError("No model configured", variable="OPENAI_API_MODEL")

    def to_dict(self) -> dict:
        """Loggable view; the key is masked."""
        return {
            "model": self.model,
            "api_base": self.api_base,
            "api_version": self.api_version,
            "api_key": "***" if self.api_key else None,
            "concurrency": self.concurrency,
            "top": self.top,
            "max_show_output": self.max_show_output,
            "max_retries": self.max_retries,
        }


def create_client(config: ScanConfig) -> "AsyncOpenAI":
    """
    Build the async OpenAI client.

    Azure style endpoints authenticate with an ``api-key`` header and need an
    ``api-version`` query parameter on every request.
    """
    from openai import AsyncOpenAI

    config.validate_for_analysis()
    kwargs: dict = {"api_key": config.api_key, "max_retries": 0}
    if config.api_base:
        kwargs["base_url"] = config.api_base
    if config.is_azure:
        kwargs["default_headers"] = {"api-key": config.api_key}
        kwargs["default_query"] = {"api-version": config.api_version}
    return AsyncOpenAI(**kwargs)

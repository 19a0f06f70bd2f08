"""Configuration loader for uiscout using Pydantic settings.

Config precedence (highest wins):
  1. CLI flags (where applicable)
  2. Environment variables (UISCOUT_* with __ for nesting)
  3. settings.local.toml
  4. settings.<env>.toml
  5. settings.default.toml
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = Path(os.getenv("UISCOUT_PROJECT_ROOT", _THIS_DIR.parents[2]))
CONFIG_DIR = PROJECT_ROOT / "config"

ENV_VAR_NAME = "UISCOUT_ENV"
DEFAULT_ENV = "local"


def _resolve_env() -> str:
    return (os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def _load_toml(path: Path) -> dict[str, Any]:
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


def parse_hints(raw: str | list[str] | None) -> list[str]:
    """Normalize hint keywords: lowercase, strip, drop blanks.

    Accepts either a comma-separated string (CLI / env form) or a list.
    """
    if not raw:
        return []
    items = raw.split(",") if isinstance(raw, str) else raw
    return [h.strip().lower() for h in items if h and h.strip()]


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class BrowserSettings(BaseSettings):
    """Playwright browser settings."""

    model_config = SettingsConfigDict(env_prefix="UISCOUT_BROWSER__")

    # Headed by default so an operator can authenticate during the hold.
    headless: bool = False
    timeout_ms: int = 30_000
    user_agent: str = ""
    sandbox: bool = True
    viewport_width: int = 1366
    viewport_height: int = 900


class CaptureSettings(BaseSettings):
    """Exploration loop and step-capture settings."""

    model_config = SettingsConfigDict(env_prefix="UISCOUT_CAPTURE__")

    output_dir: str = "dataset"
    max_steps: int = Field(default=10, ge=1)
    allow_destructive: bool = False
    hold_ms: int = Field(default=0, ge=0)
    hints: Annotated[list[str], NoDecode] = Field(default_factory=list)

    click_timeout_ms: int = 4_000
    settle_ms: int = 600
    spike_window_ms: int = 1_500
    spike_settle_ms: int = 400
    fill_limit: int = 3

    @field_validator("hints", mode="before")
    @classmethod
    def _split_hints(cls, v: Any) -> list[str]:
        return parse_hints(v)


class PolicySettings(BaseSettings):
    """Keyword vocabularies used by the action proposer."""

    model_config = SettingsConfigDict(env_prefix="UISCOUT_POLICY__")

    verbs: list[str] = Field(
        default_factory=lambda: [
            "create",
            "new",
            "add",
            "filter",
            "edit",
            "settings",
            "save",
            "submit",
            "next",
            "continue",
            "done",
            "apply",
        ]
    )
    destructive: list[str] = Field(default_factory=lambda: ["delete", "remove", "archive", "reset"])


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Root uiscout settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="UISCOUT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    env: str = Field(default_factory=_resolve_env)
    project_root: Path = Field(default=PROJECT_ROOT)
    debug: bool = False
    log_level: str = "INFO"

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    policy: PolicySettings = Field(default_factory=PolicySettings)

    @model_validator(mode="before")
    @classmethod
    def _merge_toml_files(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Layer TOML config files before env var overrides."""
        defaults = _load_toml(CONFIG_DIR / "settings.default.toml")
        env_name = (values.get("env") or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()
        env_overrides = _load_toml(CONFIG_DIR / f"settings.{env_name}.toml")
        local_overrides = _load_toml(CONFIG_DIR / "settings.local.toml")

        # Merge: defaults < env-specific < local < explicit values
        merged: dict[str, Any] = {}
        for layer in (defaults, env_overrides, local_overrides, values):
            for key, val in layer.items():
                if isinstance(val, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **val}
                else:
                    merged[key] = val
        return merged

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Normalize relative paths against project_root."""
        if not Path(self.capture.output_dir).is_absolute():
            self.capture.output_dir = str(self.project_root / self.capture.output_dir)
        self.log_level = self.log_level.upper()
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton settings instance (cached)."""
    return Settings()

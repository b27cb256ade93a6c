"""Application settings: environment variables, optional YAML/JSON file."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .models import GenerationSettings, OutputFormat

logger = logging.getLogger(__name__)

# env var -> AppSettings field
ENV_VARS: Dict[str, str] = {
    "OPENAI_API_KEY": "api_key",
    "OPENAI_BASE_URL": "base_url",
    "WORKSHEET_MODEL": "model",
    "WORKSHEET_TEMPERATURE": "temperature",
    "WORKSHEET_OUTPUT_FORMAT": "output_format",
    "WORKSHEET_REQUEST_TIMEOUT": "request_timeout",
    "LOG_LEVEL": "log_level",
}


class AppSettings(BaseModel):
    """Process-wide defaults for the app and the CLI."""

    api_key: str = ""
    base_url: Optional[str] = None
    model: str = "gpt-4o-mini"
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    output_format: OutputFormat = "docx"
    request_timeout: float = Field(default=120.0, gt=0)
    log_level: str = "INFO"
    user_request: str = ""
    system_prompt_file: Optional[str] = None

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper() or "INFO"

    @field_validator("output_format", mode="before")
    @classmethod
    def _lower_format(cls, v: Any) -> Any:
        return v.strip().lower().lstrip(".") if isinstance(v, str) else v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppSettings":
        environ = os.environ if environ is None else environ
        values = {
            field: environ[var]
            for var, field in ENV_VARS.items()
            if environ.get(var, "").strip()
        }
        return cls(**values)

    def merged(self, overrides: Mapping[str, Any]) -> "AppSettings":
        """Return a copy with every non-``None`` override applied."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return AppSettings(**data)

    def generation_settings(self, **overrides: Any) -> GenerationSettings:
        """Build the per-request settings, reading the prompt file if set."""
        values: Dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "output_format": self.output_format,
            "user_request": self.user_request,
        }
        if self.system_prompt_file:
            values["system_prompt_template"] = Path(self.system_prompt_file).read_text(encoding="utf-8")
        values.update({k: v for k, v in overrides.items() if v is not None})
        return GenerationSettings(**values)


def _load_file(path: Path) -> Dict[str, Any]:
    """Load configuration from YAML or JSON file."""
    with open(path, encoding="utf-8") as f:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a mapping: {path}")
    return data


def load_settings(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppSettings:
    """Environment defaults, overridden by the optional settings file."""
    settings = AppSettings.from_env(environ)
    if config_path is None:
        return settings

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {config_path}")
    file_values = _load_file(path)
    unknown = sorted(set(file_values) - set(AppSettings.model_fields))
    if unknown:
        logger.warning("Ignoring unknown settings keys: %s", ", ".join(unknown))
    logger.info("Loaded settings from %s", path)
    return settings.merged({k: v for k, v in file_values.items() if k in AppSettings.model_fields})

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings

from common.errors import ConfigurationMissing

DEFAULT_CONFIG_PATH = Path("config/config.yaml")


class AppConfig(BaseModel):
    snapshot_path: Path = Path("text/latest_policy.txt")
    timeout: int = 30
    user_agent: str = "PolicyWatch/1.0"


class DocumentConfig(BaseModel):
    name: str = "Policy document"
    target_url: str
    # Read the current document from disk instead of fetching target_url.
    source_path: Optional[Path] = None
    heading_tag: str = Field(default="h3", pattern="^h[1-6]$")
    id_attr: str = "id"
    noise_tags: List[str] = Field(default_factory=lambda: ["script", "style", "noscript"])


class DiffConfig(BaseModel):
    provider: str = Field(default="git", pattern="^(git|difflib)$")
    concurrency: int = Field(default=4, ge=1)
    word_diff: bool = True
    git_binary: str = "git"


class NotifyConfig(BaseModel):
    report_url: Optional[str] = None  # shared document holding the full diff
    timeout: int = 15


class GlobalYAMLConfig(BaseModel):
    app: AppConfig = Field(default_factory=AppConfig)
    document: DocumentConfig
    diff: DiffConfig = Field(default_factory=DiffConfig)
    notify: NotifyConfig = Field(default_factory=NotifyConfig)


def load_yaml_config(path: Path = DEFAULT_CONFIG_PATH) -> GlobalYAMLConfig:
    if not Path(path).exists():
        raise ConfigurationMissing("config file not found", path=str(path))
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return GlobalYAMLConfig(**raw)


class Secrets(BaseSettings):
    gas_shared_secret: str = Field(..., min_length=1)
    gas_webhook_url: str = Field(..., min_length=1)
    slack_webhook_url: Optional[str] = None

    class Config:
        env_file = ".env"
        extra = "ignore"


def load_secrets(env_file: Optional[Path | str] = ".env") -> Secrets:
    """
    Read notification secrets from the environment (and .env if present).
    Missing or blank required values fail here, before any network call.
    """
    try:
        return Secrets(_env_file=env_file)
    except ValidationError as e:
        names = sorted({str(err["loc"][0]).upper() for err in e.errors() if err["loc"]})
        raise ConfigurationMissing(
            "required secrets are missing", missing=names
        ) from e


@dataclass(frozen=True)
class MonitorConfig:
    settings: GlobalYAMLConfig
    secrets: Secrets

"""Provider configuration, provider catalog and YAML/env bootstrapping."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


class Provider(StrEnum):
    """Upstream vision providers the tutor can talk to."""

    GEMINI = "gemini"
    OPENAI = "openai"
    QWEN = "qwen"


class ProviderFamily(StrEnum):
    """Adapter family a provider is served by."""

    GEMINI = "gemini"
    OPENAI_COMPATIBLE = "openai_compatible"


class Language(StrEnum):
    """Target language for explanations and quizzes."""

    EN = "en"
    ZH = "zh"


@dataclass(frozen=True)
class ProviderSpec:
    """Static facts about a provider: defaults and capabilities."""

    family: ProviderFamily
    display_name: str
    default_model: str
    default_base_url: str = ""
    models: tuple[str, ...] = ()
    supports_json_mode: bool = False
    supports_image_detail: bool = False
    key_env_vars: tuple[str, ...] = ()
    key_url: str = ""


PROVIDER_CATALOG: dict[Provider, ProviderSpec] = {
    Provider.GEMINI: ProviderSpec(
        family=ProviderFamily.GEMINI,
        display_name="Google Gemini",
        default_model="gemini-2.5-flash",
        models=("gemini-2.5-flash", "gemini-3-pro-preview", "gemini-2.0-flash-exp"),
        supports_json_mode=True,
        key_env_vars=("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"),
        key_url="https://aistudio.google.com/app/apikey",
    ),
    Provider.OPENAI: ProviderSpec(
        family=ProviderFamily.OPENAI_COMPATIBLE,
        display_name="OpenAI",
        default_model="gpt-4o",
        default_base_url="https://api.openai.com/v1",
        models=("gpt-4o", "gpt-4o-mini", "gpt-4-turbo"),
        supports_json_mode=True,
        supports_image_detail=True,
        key_env_vars=("OPENAI_API_KEY",),
        key_url="https://platform.openai.com/api-keys",
    ),
    Provider.QWEN: ProviderSpec(
        family=ProviderFamily.OPENAI_COMPATIBLE,
        display_name="Qwen (Alibaba)",
        default_model="qwen-vl-max-latest",
        default_base_url="https://dashscope.aliyuncs.com/compatible-mode/v1",
        models=(
            "qwen2.5-vl-72b-instruct",
            "qwen-vl-max-latest",
            "qwen-vl-plus-latest",
            "qwen2.5-vl-7b-instruct",
        ),
        key_env_vars=("DASHSCOPE_API_KEY", "QWEN_API_KEY"),
        key_url="https://bailian.console.aliyun.com/?apiKey=1",
    ),
}


def provider_spec(provider: Provider | str) -> ProviderSpec:
    """Return the catalog entry for a provider."""
    return PROVIDER_CATALOG[Provider(provider)]


class ProviderConfig(BaseModel):
    """Active provider selection plus one credential slot per provider."""

    provider: Provider = Provider.GEMINI
    model: str = ""
    endpoint: str = ""
    credentials: dict[Provider, str] = Field(default_factory=dict)

    @field_validator("endpoint", mode="before")
    @classmethod
    def _none_endpoint(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("credentials", mode="before")
    @classmethod
    def _fill_credentials(cls, value: Any) -> dict[str, str]:
        raw = dict(value or {})
        return {p.value: str(raw.get(p.value) or raw.get(p) or "") for p in Provider}

    @property
    def credential(self) -> str:
        return self.credentials.get(self.provider, "").strip()

    @property
    def effective_model(self) -> str:
        return self.model.strip() or provider_spec(self.provider).default_model

    @property
    def spec(self) -> ProviderSpec:
        return provider_spec(self.provider)

    def switch_provider(self, provider: Provider | str) -> ProviderConfig:
        """Activate another provider without losing any stored key."""
        target = Provider(provider)
        return self.model_copy(
            update={
                "provider": target,
                "model": provider_spec(target).default_model,
                "endpoint": "",
                "credentials": dict(self.credentials),
            }
        )

    def with_credential(self, provider: Provider | str, key: str) -> ProviderConfig:
        credentials = dict(self.credentials)
        credentials[Provider(provider)] = key
        return self.model_copy(update={"credentials": credentials})

    def masked(self) -> dict[str, Any]:
        """Return a JSON-safe view with credentials hidden."""
        return {
            "provider": self.provider.value,
            "model": self.effective_model,
            "endpoint": self.endpoint,
            "credentials": {
                p.value: _mask(self.credentials.get(p, "")) for p in Provider
            },
        }


def _mask(secret: str) -> str:
    if not secret:
        return ""
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{secret[:4]}…{secret[-2:]}"


def load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML from file, returning empty mapping when missing."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge dictionaries."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def default_root() -> Path:
    return Path(__file__).resolve().parents[1]


def load_effective_config(root: Path | None = None) -> dict[str, Any]:
    """Merge config/default.yaml with the optional untracked config/local.yaml."""
    config_dir = (root or default_root()) / "config"
    default_cfg = load_yaml(config_dir / "default.yaml")
    local_cfg = load_yaml(config_dir / "local.yaml")
    return merge_dicts(default_cfg, local_cfg)


def apply_env_credentials(
    config: ProviderConfig, env: Mapping[str, str] | None = None
) -> ProviderConfig:
    """Fill empty credential slots from the environment; explicit keys win."""
    environ = os.environ if env is None else env
    credentials = dict(config.credentials)
    for provider, spec in PROVIDER_CATALOG.items():
        if credentials.get(provider, "").strip():
            continue
        for var in spec.key_env_vars:
            value = (environ.get(var) or "").strip()
            if value:
                credentials[provider] = value
                break
    return config.model_copy(update={"credentials": credentials})


def load_provider_config(
    root: Path | None = None, env: Mapping[str, str] | None = None
) -> ProviderConfig:
    """Build the ProviderConfig from YAML files and environment."""
    data = load_effective_config(root)
    config = ProviderConfig.model_validate(
        {key: data[key] for key in ("provider", "model", "endpoint", "credentials") if key in data}
    )
    return apply_env_credentials(config, env=env)


def load_language(root: Path | None = None) -> Language:
    data = load_effective_config(root)
    return Language(data.get("language") or Language.EN)

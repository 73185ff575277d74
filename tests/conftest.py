"""Shared fixtures for provider and solver tests."""

from __future__ import annotations

import pytest

from core.settings import Provider, ProviderConfig


@pytest.fixture
def qwen_config() -> ProviderConfig:
    return ProviderConfig(
        provider=Provider.QWEN,
        model="qwen-vl-max-latest",
        endpoint="",
        credentials={"qwen": "k"},
    )


@pytest.fixture
def openai_config() -> ProviderConfig:
    return ProviderConfig(
        provider=Provider.OPENAI,
        model="gpt-4o",
        credentials={"openai": "sk-test"},
    )


@pytest.fixture
def gemini_config() -> ProviderConfig:
    return ProviderConfig(
        provider=Provider.GEMINI,
        model="gemini-2.5-flash",
        credentials={"gemini": "g-key"},
    )

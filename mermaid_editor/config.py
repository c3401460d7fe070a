"""LLM, renderer and storage configuration."""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class ModelProvider(str, Enum):
    """Supported completion providers (both speak the OpenAI chat API)."""
    OPENAI = "openai"
    OLLAMA = "ollama"

    @classmethod
    def from_env(cls) -> "ModelProvider":
        """Detect provider from environment."""
        explicit = os.getenv("LLM_PROVIDER", "").lower()
        if explicit == "ollama":
            return cls.OLLAMA
        return cls.OPENAI


# Default models per provider
DEFAULT_MODELS = {
    ModelProvider.OPENAI: "gpt-4o-mini",
    ModelProvider.OLLAMA: "llama3.2",
}

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"
DEFAULT_TEMPERATURE = 0.7

DEFAULT_MERMAID_SCRIPT_URL = "https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.min.js"
DEFAULT_MERMAID_THEME = "default"

# Namespaced key under which the API key is persisted
API_KEY_STORAGE_KEY = "mermaid-editor-openai-key"


@dataclass
class ModelConfig:
    """Configuration for the completion model."""
    provider: ModelProvider
    model: str
    base_url: str
    temperature: float = DEFAULT_TEMPERATURE

    @property
    def completion_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"

    def __str__(self) -> str:
        return f"{self.provider.value}/{self.model}"


@dataclass
class EngineConfig:
    """How the Mermaid engine is fetched and initialized."""
    script_url: str = DEFAULT_MERMAID_SCRIPT_URL
    theme: str = DEFAULT_MERMAID_THEME
    headless: bool = True

    def initialize_options(self) -> dict:
        """Options passed to `mermaid.initialize`."""
        return {
            "startOnLoad": False,
            "theme": self.theme,
            "securityLevel": "loose",
        }


def get_openai_base_url() -> str:
    """Get OpenAI base URL."""
    return os.getenv("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL).rstrip("/")


def get_ollama_base_url() -> str:
    """Get Ollama base URL (OpenAI-compatible, always ends in /v1)."""
    base = os.getenv("OLLAMA_BASE_URL", DEFAULT_OLLAMA_BASE_URL)
    if not base.endswith("/v1"):
        base = base.rstrip("/") + "/v1"
    return base


def get_temperature() -> float:
    raw = os.getenv("LLM_TEMPERATURE")
    if not raw:
        return DEFAULT_TEMPERATURE
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"LLM_TEMPERATURE must be a number, got {raw!r}")


def get_model_config(provider: Optional[ModelProvider] = None) -> ModelConfig:
    """Get the completion model configuration."""
    if provider is None:
        provider = ModelProvider.from_env()

    if provider == ModelProvider.OPENAI:
        model = os.getenv("OPENAI_MODEL", DEFAULT_MODELS[provider])
        base_url = get_openai_base_url()
    else:
        model = os.getenv("OLLAMA_MODEL", DEFAULT_MODELS[provider])
        base_url = get_ollama_base_url()
    return ModelConfig(
        provider=provider, model=model, base_url=base_url, temperature=get_temperature()
    )


def get_completion_url(provider: Optional[ModelProvider] = None) -> str:
    return get_model_config(provider).completion_url


def get_engine_config() -> EngineConfig:
    """Get the Mermaid engine configuration."""
    return EngineConfig(
        script_url=os.getenv("MERMAID_SCRIPT_URL", DEFAULT_MERMAID_SCRIPT_URL),
        theme=os.getenv("MERMAID_THEME", DEFAULT_MERMAID_THEME),
    )


def get_storage_dir() -> Path:
    """Directory holding client-local durable storage."""
    home = os.getenv("MERMAID_EDITOR_HOME")
    if home:
        return Path(home).expanduser()
    return Path.home() / ".mermaid_editor"


def get_current_config(api_key_set: Optional[bool] = None) -> dict:
    """Get current configuration as a dictionary."""
    model_config = get_model_config()
    engine_config = get_engine_config()

    config = {
        "provider": model_config.provider.value,
        "model": model_config.model,
        "completion_url": model_config.completion_url,
        "temperature": model_config.temperature,
        "mermaid_script_url": engine_config.script_url,
        "mermaid_theme": engine_config.theme,
        "storage_dir": str(get_storage_dir()),
    }
    if api_key_set is not None:
        config["api_key_set"] = api_key_set
    return config


def print_config(api_key_set: Optional[bool] = None):
    """Print current configuration."""
    config = get_current_config(api_key_set)
    print(f"Provider: {config['provider']}")
    print(f"Model: {config['model']}")
    print(f"Endpoint: {config['completion_url']}")
    print(f"Mermaid: {config['mermaid_script_url']} (theme: {config['mermaid_theme']})")
    print(f"Storage: {config['storage_dir']}")
    if "api_key_set" in config:
        print(f"API Key: {'Set' if config['api_key_set'] else 'NOT SET'}")

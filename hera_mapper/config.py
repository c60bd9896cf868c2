"""Application configuration."""
import os
from dataclasses import dataclass, field
from typing import List


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AIConfig:
    """AI backend configuration."""

    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-5-sonnet-latest"
    openai_api_key: str = ""
    openai_model: str = "gpt-4-turbo-preview"
    timeout: int = 30  # Seconds per backend attempt
    max_tokens: int = 4000
    enabled: bool = True
    # AI schemas at or below this confidence fall through to the next backend
    min_confidence: float = 0.7
    # Backend names, tried in order
    backend_order: List[str] = field(default_factory=lambda: ["anthropic", "openai"])

    @classmethod
    def from_env(cls) -> "AIConfig":
        """Load config from environment variables."""
        return cls(
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            anthropic_model=os.getenv("HERA_ANTHROPIC_MODEL", "claude-3-5-sonnet-latest"),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_model=os.getenv("HERA_OPENAI_MODEL", "gpt-4-turbo-preview"),
            timeout=int(os.getenv("HERA_AI_TIMEOUT", "30")),
            enabled=_env_bool("HERA_AI_ENABLED", True),
        )

    def is_available(self) -> bool:
        """True when AI is enabled and at least one backend has credentials."""
        return self.enabled and bool(self.anthropic_api_key or self.openai_api_key)


@dataclass
class AppConfig:
    """Application configuration."""

    output_dir: str = "./output"
    registry_dir: str = "./registry"
    max_upload_bytes: int = 5 * 1024 * 1024
    ai: AIConfig = None

    def __post_init__(self):
        """Fill default values."""
        if self.ai is None:
            self.ai = AIConfig.from_env()

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load config from environment variables."""
        return cls(
            output_dir=os.getenv("HERA_OUTPUT_DIR", "./output"),
            registry_dir=os.getenv("HERA_REGISTRY_DIR", "./registry"),
            max_upload_bytes=int(os.getenv("HERA_MAX_UPLOAD_BYTES", str(5 * 1024 * 1024))),
            ai=AIConfig.from_env(),
        )


# Global instance
app_config = AppConfig.from_env()

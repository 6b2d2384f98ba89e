# artifact_studio/core/config.py
"""
Application configuration - single source of truth for all settings.
"""
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class LLMSettings:
    """Text-generation provider configuration."""
    default_provider: str = field(default_factory=lambda: os.getenv("DEFAULT_LLM_PROVIDER", "deepseek"))
    default_model: str = field(default_factory=lambda: os.getenv("DEFAULT_LLM_MODEL", "deepseek-chat"))
    deepseek_api_key: Optional[str] = field(default_factory=lambda: os.getenv("DEEPSEEK_API_KEY"))
    deepseek_base_url: str = field(default_factory=lambda: os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com"))
    openai_api_key: Optional[str] = field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))
    gemini_api_key: Optional[str] = field(default_factory=lambda: os.getenv("GEMINI_API_KEY"))
    # Generation is slow: a single call may take minutes
    request_timeout: float = field(default_factory=lambda: float(os.getenv("LLM_REQUEST_TIMEOUT", "180")))

    def api_key_for(self, provider: str) -> Optional[str]:
        return {
            "deepseek": self.deepseek_api_key,
            "openai": self.openai_api_key,
            "gemini": self.gemini_api_key,
        }.get(provider)


@dataclass
class GenerationSettings:
    """Artifact generation run configuration."""
    min_artifacts: int = field(default_factory=lambda: int(os.getenv("MIN_ARTIFACTS", "30")))
    test_min_artifacts: int = 1
    test_mode: bool = field(default_factory=lambda: (
        _env_flag("ARTIFACT_STUDIO_TEST_MODE") or os.getenv("APP_ENV", "").lower() == "test"
    ))

    # Pacing between artifacts (seconds)
    step_delay: float = field(default_factory=lambda: float(os.getenv("STEP_DELAY_SECONDS", "3")))
    failure_delay_multiplier: float = 1.5

    # Retry backoff (seconds)
    initial_backoff: float = 5.0
    backoff_multiplier: float = 1.5

    # Finished runs kept in memory for polling; older ones are evicted
    max_finished_runs: int = field(default_factory=lambda: int(os.getenv("MAX_FINISHED_RUNS", "20")))

    # Attempt budgets per call type
    artifact_max_attempts: int = 2
    bootstrap_max_attempts: int = 2
    documentation_max_attempts: int = 2

    # Sampling per call type: short and focused for code, longer for prose
    artifact_temperature: float = 0.3
    artifact_max_tokens: int = 3000
    bootstrap_temperature: float = 0.2
    bootstrap_max_tokens: int = 2000
    documentation_temperature: float = 0.5
    documentation_max_tokens: int = 6000

    catalog_path: Path = field(default_factory=lambda: Path(os.getenv(
        "CATALOG_PATH",
        str(Path(__file__).parent.parent / "catalog" / "catalog.yaml")
    )))

    @property
    def configured_minimum(self) -> int:
        """Minimum number of artifacts per run (reduced in test mode)."""
        return self.test_min_artifacts if self.test_mode else self.min_artifacts


@dataclass
class Settings:
    """Main application settings."""
    llm: LLMSettings = field(default_factory=LLMSettings)
    generation: GenerationSettings = field(default_factory=GenerationSettings)
    port: int = field(default_factory=lambda: int(os.getenv("PORT", 8000)))
    debug: bool = field(default_factory=lambda: _env_flag("DEBUG"))
    cors_origins: List[str] = field(default_factory=lambda: (
        ["*"] if os.getenv("CORS_ORIGINS", "*") == "*" else os.getenv("CORS_ORIGINS", "").split(",")
    ))
    rate_limit: str = field(default_factory=lambda: os.getenv("RATE_LIMIT", "100/minute"))


# Singleton instance
settings = Settings()

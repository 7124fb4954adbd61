"""
Configuration module using Pydantic Settings.
"""

from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class GoogleVisionConfig(BaseSettings):
    api_key: SecretStr | None = Field(default=None, alias="GOOGLE_VISION_API_KEY")
    endpoint: str = "https://vision.googleapis.com/v1/images:annotate"
    max_results: int = 10


class GeminiConfig(BaseSettings):
    api_key: SecretStr | None = Field(default=None, alias="GEMINI_API_KEY")
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = Field(default="gemini-1.5-flash", alias="GEMINI_MODEL")
    temperature: float = 0.4
    top_k: int = 32
    top_p: float = 1.0
    max_output_tokens: int = 4096
    safety_threshold: str = "BLOCK_MEDIUM_AND_ABOVE"


class StorageConfig(BaseSettings):
    root: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent.parent / "storage",
        alias="STORAGE_DIR",
    )
    public_base_url: str = Field(default="http://localhost:8000/images", alias="PUBLIC_BASE_URL")
    bucket: str = "images"
    cache_control: str = "3600"


@dataclass(frozen=True)
class ProviderConfig:
    """Credentials and request knobs for the emotion providers, fixed at startup."""

    vision_api_key: str | None = None
    vision_endpoint: str = "https://vision.googleapis.com/v1/images:annotate"
    vision_max_results: int = 10
    gemini_api_key: str | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-1.5-flash"
    gemini_temperature: float = 0.4
    gemini_top_k: int = 32
    gemini_top_p: float = 1.0
    gemini_max_output_tokens: int = 4096
    gemini_safety_threshold: str = "BLOCK_MEDIUM_AND_ABOVE"
    fallback_delay: float = 0.0

    @property
    def credentials(self) -> dict[str, bool]:
        return {
            "google_vision": bool(self.vision_api_key),
            "gemini": bool(self.gemini_api_key),
        }


class Settings(BaseSettings):
    """Application-wide settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    BASE_DIR: Path = Path(__file__).parent.parent.parent
    DATABASE_URL: str = "sqlite+aiosqlite:///./petspace.db"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    REQUEST_TIMEOUT_SECONDS: float = 15.0
    # The original edge function slept here to fake model latency
    FALLBACK_DELAY_SECONDS: float = 0.0

    # Sub-configs
    vision: GoogleVisionConfig = Field(default_factory=GoogleVisionConfig)
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    def provider_config(self) -> ProviderConfig:
        """Snapshot the provider settings the emotion engine is built from."""
        vision_key = self.vision.api_key.get_secret_value() if self.vision.api_key else None
        gemini_key = self.gemini.api_key.get_secret_value() if self.gemini.api_key else None
        return ProviderConfig(
            vision_api_key=vision_key or None,
            vision_endpoint=self.vision.endpoint,
            vision_max_results=self.vision.max_results,
            gemini_api_key=gemini_key or None,
            gemini_base_url=self.gemini.base_url,
            gemini_model=self.gemini.model,
            gemini_temperature=self.gemini.temperature,
            gemini_top_k=self.gemini.top_k,
            gemini_top_p=self.gemini.top_p,
            gemini_max_output_tokens=self.gemini.max_output_tokens,
            gemini_safety_threshold=self.gemini.safety_threshold,
            fallback_delay=self.FALLBACK_DELAY_SECONDS,
        )


settings = Settings()

"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
Values are read from environment variables (prefix ``AI_CMD_``) and a ``.env``
file in the working directory.

Nested properties use a double underscore as delimiter. For example,
``AI_CMD_AI__MODEL`` maps to ``settings.ai.model``. List values (``plugins``,
``extensions``) are given as JSON arrays.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Completion Provider Configuration
# =====================================================================

PROVIDER_DEFAULTS = {
    "ollama": {"base_url": "http://localhost:11434/v1", "model": "deepseek-coder-v2:16b"},
    "deepseek": {"base_url": "https://api.deepseek.com", "model": "deepseek-reasoner"},
    "openai": {"base_url": "https://api.openai.com/v1", "model": "gpt-4o"},
}


class AIProviderConfig(BaseModel):
    """Completion provider configuration.

    All supported provider types speak the OpenAI chat-completions protocol;
    ``type`` only selects defaults for ``base_url`` and ``model``.
    """

    type: str = Field(default="deepseek", description="Provider type (ollama, deepseek, openai or a custom name)")
    base_url: Optional[str] = Field(default=None, description="API base URL; defaults per provider type")
    model: Optional[str] = Field(default=None, description="Model name; defaults per provider type")
    api_key: Optional[SecretStr] = Field(default=None, description="API key for the provider")
    temperature: float = Field(default=1.0, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=8192, gt=0, description="Maximum tokens in a completion")
    stream: bool = Field(default=True, description="Character-paced output for text answers")

    model_config = {"populate_by_name": True}

    @field_validator("type")
    @classmethod
    def _normalize_type(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def resolved_base_url(self) -> Optional[str]:
        """Configured base URL, or the default for the provider type."""
        if self.base_url:
            return self.base_url
        return PROVIDER_DEFAULTS.get(self.type, {}).get("base_url")

    @property
    def resolved_model(self) -> str:
        """Configured model name, or the default for the provider type."""
        if self.model:
            return self.model
        defaults = PROVIDER_DEFAULTS.get(self.type)
        if defaults is None:
            raise ValueError(f"No default model for provider type '{self.type}'; set AI_CMD_AI__MODEL")
        return defaults["model"]

    @property
    def resolved_api_key(self) -> str:
        """API key value; local ollama servers accept any non-empty key."""
        if self.api_key is not None and self.api_key.get_secret_value():
            return self.api_key.get_secret_value()
        return "ollama" if self.type == "ollama" else ""


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are bound from environment variables and the ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="AI_CMD_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    ai: AIProviderConfig = Field(default_factory=AIProviderConfig, description="Completion provider settings")

    # =====================================================================
    # Engine Configuration
    # =====================================================================
    output_ai_result: bool = Field(default=False, description="Echo the parsed plan before executing it")
    plugins: List[str] = Field(default_factory=list, description="Plugins to load, as 'module:Attr' or 'file.py:Attr'")
    extensions: List[str] = Field(
        default_factory=list, description="Capability extensions to load, as 'module:Attr' or 'file.py:Attr'"
    )
    file_encoding: str = Field(default="utf-8", description="Encoding used by the built-in file capabilities")
    stream_delay_ms: int = Field(default=10, ge=0, description="Base delay per character for paced output")
    command_timeout: float = Field(default=300.0, gt=0, description="Timeout in seconds for shell commands")
    max_recursion_depth: int = Field(default=5, ge=0, description="Maximum nesting of recurse steps")

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(default="WARNING", description="Console logging level")
    log_format: str = Field(default="simple", description="Log line format (simple, detailed, json)")
    log_file_dir: Optional[str] = Field(default=None, description="Directory for the log file; unset disables it")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process settings, loading them on first use."""
    return Settings()

"""Configuration management for panelgen."""

import os
import json
import getpass
import logging
import datetime
from pathlib import Path
from typing import Optional, Union, List

import keyring
from keyring.errors import KeyringError
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.prompt_style import (
    DEFAULT_ANTI_PATTERNS,
    DEFAULT_KPI_DEFAULTS,
    DEFAULT_ROUND_FRAMINGS,
    LanguageHint,
    PromptStyle,
)
from .services.llm import CompletionClient, LLMProvider, create_completion_client

logger = logging.getLogger(__name__)

DEFAULT_PANELGEN_DIR = os.getenv('PANELGEN_DIR', str(Path.home() / '.panelgen'))

class PathManager:
    """Manages all file paths used by the application."""

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

        self.subdirs = {
            "output": self.base_dir / "output",  # Saved dialogue results
            "data": self.base_dir / "data",      # Persona records
            "logs": self.base_dir / "logs",
        }
        for subdir in self.subdirs.values():
            subdir.mkdir(parents=True, exist_ok=True)

        logger.debug(f"Initialized path manager with base directory: {self.base_dir}")

    def get_path(self, category: str) -> Path:
        """Get the path for a specific category."""
        if category not in self.subdirs:
            new_path = self.base_dir / category
            new_path.mkdir(parents=True, exist_ok=True)
            self.subdirs[category] = new_path
        return self.subdirs[category]

    def get_file_path(self, category: str, filename: str) -> Path:
        return self.get_path(category) / filename

    def get_log_path(self, log_name: str) -> Path:
        return self.get_file_path("logs", f"{log_name}.log")

    def get_unique_output_path(self, prefix: str, suffix: str = ".json") -> Path:
        """Generate a unique output path with timestamp."""
        timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
        return self.get_file_path("output", f"{prefix}_{timestamp}{suffix}")

    def save_json(self, path: Path, data: dict) -> Path:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        return path

class SecureKeyManager:
    """Manages secure storage and retrieval of API keys."""

    APP_NAME = "panelgen"

    @staticmethod
    def get_key(service_name: str) -> Optional[str]:
        try:
            return keyring.get_password(SecureKeyManager.APP_NAME, service_name)
        except KeyringError as e:
            logger.error(f"Failed to retrieve key for {service_name}: {e}")
            return None

    @staticmethod
    def set_key(service_name: str, key: str) -> bool:
        try:
            keyring.set_password(SecureKeyManager.APP_NAME, service_name, key)
            return True
        except KeyringError as e:
            logger.error(f"Failed to store key for {service_name}: {e}")
            return False

    @staticmethod
    def delete_key(service_name: str) -> bool:
        try:
            keyring.delete_password(SecureKeyManager.APP_NAME, service_name)
            return True
        except KeyringError as e:
            logger.error(f"Failed to delete key for {service_name}: {e}")
            return False

    @staticmethod
    def prompt_for_key(service_name: str) -> Optional[str]:
        """Prompt user for API key and store it securely."""
        print(f"Please enter your {service_name} API key (input will be hidden):")
        key = getpass.getpass()
        if key:
            SecureKeyManager.set_key(service_name, key)
            return key
        return None

class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env."""

    panelgen_dir: Path = Field(DEFAULT_PANELGEN_DIR)

    # Completion service
    llm_provider: LLMProvider = Field(LLMProvider.OPENAI)
    llm_model: str = Field("gpt-4o-mini")
    llm_temperature: float = Field(0.8, ge=0.0, le=2.0)
    ollama_host: str = Field("http://localhost:11434")
    openai_api_key_ref: str = Field("openai-api")

    # Dialogue limits
    round_timeout: float = Field(30.0, gt=0)
    context_max_chars: int = Field(400, ge=0)
    question_max_chars: int = Field(300, ge=1)
    history_limit: int = Field(10, ge=0)
    max_insights: int = Field(8, ge=1, le=8)

    # Prompt style
    language_hint: LanguageHint = Field(LanguageHint.AUTO)
    anti_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_ANTI_PATTERNS))
    kpi_defaults: List[str] = Field(default_factory=lambda: list(DEFAULT_KPI_DEFAULTS))
    round_framings: List[str] = Field(default_factory=lambda: list(DEFAULT_ROUND_FRAMINGS))

    # Logging
    log_level: str = Field("INFO")
    log_file: Optional[Path] = Field(None)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    _paths: Optional[PathManager] = PrivateAttr(default=None)

    @property
    def paths(self) -> PathManager:
        if self._paths is None:
            self._paths = PathManager(self.panelgen_dir)
        return self._paths

    def prompt_style(self) -> PromptStyle:
        return PromptStyle(
            language_hint=self.language_hint,
            anti_patterns=self.anti_patterns,
            kpi_defaults=self.kpi_defaults,
            round_framings=self.round_framings,
        )

    def get_openai_api_key(self, prompt_if_missing: bool = False) -> Optional[str]:
        """Get the OpenAI key from the environment, then the keyring."""
        env_key = os.environ.get("OPENAI_API_KEY")
        if env_key:
            return env_key

        key = SecureKeyManager.get_key(self.openai_api_key_ref)
        if key:
            return key

        if prompt_if_missing:
            return SecureKeyManager.prompt_for_key(self.openai_api_key_ref)
        return None

    def setup_logging(self, debug: bool = False):
        """Everything goes to the log file; only warnings reach the console."""
        level = logging.DEBUG if debug else getattr(logging, self.log_level.upper(), logging.INFO)
        log_file = self.log_file or self.paths.get_log_path("panelgen")

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        root_logger.addHandler(file_handler)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        root_logger.addHandler(console_handler)

        logger.info(f"Logging to file: {log_file}")

    def get_completion_client(self, force_demo: bool = False) -> CompletionClient:
        """Create the configured completion client.

        Without an OpenAI key the demo client is used instead.
        """
        provider = LLMProvider.DEMO if force_demo else self.llm_provider
        api_key = None
        if provider == LLMProvider.OPENAI:
            api_key = self.get_openai_api_key()
            if not api_key:
                logger.warning("No OpenAI API key configured, falling back to demo responses")
                provider = LLMProvider.DEMO

        return create_completion_client(
            provider=provider,
            model_name=self.llm_model,
            api_key=api_key,
            host=self.ollama_host
        )

# Create global settings instance
settings = Settings()

"""
Configuration management for the Audio Library Browse Server
Centralized configuration using environment variables with sensible defaults
"""
import os
import logging
from pathlib import Path
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseSettings):
    """Server configuration with environment variable support"""

    model_config = SettingsConfigDict(
        # Read .env file if it exists (local dev), gracefully ignore if missing (production)
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Identity
    server_name: str = "Audio Server"
    server_version: str = "1.0"

    # Server Runtime
    server_host: str = "0.0.0.0"
    server_port: int = int(os.getenv("PORT", "3000"))

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"

    # Audio library
    mp3_path: str = "./music"
    cdg_path: str | None = None  # Secondary asset library (karaoke CDG files)

    # Public URLs handed back to clients (scheme only, host comes from the request)
    external_protocol: Literal["http", "https"] = "https"

    # Response cache
    cache_ttl_seconds: int = 300
    cache_clear_token: str | None = None

    # CORS Configuration
    enable_cors: bool = True
    cors_origins: str = "*"  # Comma-separated origins in production
    cors_allow_methods: str = "GET,OPTIONS"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into list"""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def cors_allow_methods_list(self) -> list[str]:
        """Parse CORS methods string into list"""
        return [method.strip() for method in self.cors_allow_methods.split(",") if method.strip()]

    @property
    def library_root(self) -> Path:
        """Absolute path of the audio library root"""
        return Path(self.mp3_path).expanduser().resolve()

    @property
    def asset_root(self) -> Path | None:
        """Absolute path of the secondary asset library, if configured"""
        if not self.cdg_path:
            return None
        return Path(self.cdg_path).expanduser().resolve()

    @property
    def log_level_int(self) -> int:
        """Convert log level string to logging constant"""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    def configure_logging(self) -> None:
        """Configure application logging based on settings"""
        if self.log_format == "json":
            # JSON format for structured logging
            log_format = '{"timestamp":"%(asctime)s","logger":"%(name)s","level":"%(levelname)s","message":"%(message)s","module":"%(module)s","function":"%(funcName)s","line":%(lineno)d}'
        else:
            log_format = '%(asctime)s - %(name)s - %(levelname)s - [%(module)s.%(funcName)s:%(lineno)d] - %(message)s'

        logging.basicConfig(
            level=self.log_level_int,
            format=log_format,
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # uvicorn access logs are noisy at DEBUG
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# Global configuration instance
config = ServerConfig()

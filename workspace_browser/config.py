"""
Configuration management for the Git Workspace Browser.

Uses Pydantic Settings for:
- Type-safe configuration
- Automatic environment variable loading
- Validation at startup
"""

import tempfile
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    
    All settings can be overridden via environment variables or .env file.
    The .env file is automatically loaded from the project root.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # WORKSPACES_ROOT == workspaces_root
    )
    
    # ===================
    # Workspace Configuration
    # ===================
    # One git repository per subdirectory, named after the workspace.
    # Repositories under this root are only ever read.
    workspaces_root: str = "./workspaces"
    
    # Per-query checkouts are created (and removed) under this directory
    scratch_root: str = tempfile.gettempdir()
    
    # ===================
    # Server Configuration
    # ===================
    server_host: str = "127.0.0.1"
    server_port: int = 3030
    cors_origins: list[str] = ["*"]
    
    # ===================
    # Logging
    # ===================
    log_level: str = "INFO"
    
    @property
    def workspaces_path(self) -> Path:
        """Workspaces root as an absolute Path object."""
        return Path(self.workspaces_root).resolve()
    
    @property
    def scratch_path(self) -> Path:
        """Scratch root as an absolute Path object."""
        return Path(self.scratch_root).resolve()


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    
    Settings are loaded once per process. Tests that change the
    environment call ``get_settings.cache_clear()`` first.
    """
    return Settings()

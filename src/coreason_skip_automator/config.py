# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_skip_automator

"""
Configuration management for the Skip Automator.
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration using environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="SKIP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Tunable Settings
    presubmit_config_path: Path = Field(
        default=Path("presubmits.yaml"), description="YAML file holding the presubmit definitions per org/repo."
    )
    honor_ok_to_test: bool = Field(
        default=False, description="Treat '/ok-to-test' like '/test all' when computing the trigger overlap."
    )
    gh_executable: str = Field(default="gh", description="GitHub CLI executable used for API calls.")
    command_timeout: int = Field(default=60, description="Timeout in seconds for a single GitHub API call.")
    enabled_plugins_by_repo: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Plugins enabled per 'org' or 'org/repo'. Repositories without an entry run every plugin.",
    )
    log_level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Minimum level written to stderr."
    )

    # Optional Secrets
    GITHUB_TOKEN: Optional[SecretStr] = Field(default=None, validation_alias="GITHUB_TOKEN")
    WEBHOOK_SECRET: Optional[SecretStr] = Field(default=None, validation_alias="SKIP_WEBHOOK_SECRET")

    @field_validator("gh_executable")
    @classmethod
    def validate_executable(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("gh_executable must not be empty.")
        return v.strip()

    @field_validator("command_timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("command_timeout must be positive.")
        return v

    def plugins_for(self, org: str, repo: str) -> Optional[List[str]]:
        """
        Returns the plugins enabled for a repository, or None when every plugin is enabled.
        A repository entry takes precedence over its org entry.
        """
        full_name = f"{org}/{repo}"
        if full_name in self.enabled_plugins_by_repo:
            return self.enabled_plugins_by_repo[full_name]
        return self.enabled_plugins_by_repo.get(org)


@lru_cache
def get_settings() -> Settings:
    """
    Returns a cached instance of the Settings class.
    """
    return Settings()

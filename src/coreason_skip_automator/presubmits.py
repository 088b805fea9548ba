"""
Presubmit configuration: which checks are configured for a repository.

The configuration is a YAML file keyed by 'org/repo':

    presubmits:
      my-org/my-repo:
        - name: unit
          context: ci/unit
          always_run: true
        - name: lint
          context: ci/lint
          optional: true

The file is re-read whenever its modification time changes.
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from coreason_skip_automator.domain.models import CheckDefinition
from coreason_skip_automator.exceptions import ConfigurationError
from coreason_skip_automator.utils.logger import logger


def _compile(pattern: str) -> None:
    try:
        re.compile(pattern)
    except re.error as e:
        raise ValueError(f"invalid regular expression {pattern!r}: {e}") from e


class PresubmitSpec(BaseModel):
    """One presubmit entry as written in the YAML file."""

    name: str
    context: Optional[str] = None
    optional: bool = False
    skip_report: bool = False
    always_run: bool = False
    run_if_changed: Optional[str] = None
    skip_if_only_changed: Optional[str] = None
    branches: List[str] = Field(default_factory=list)
    skip_branches: List[str] = Field(default_factory=list)
    trigger: Optional[str] = None

    model_config = {"extra": "ignore"}

    @field_validator("run_if_changed", "skip_if_only_changed", "trigger")
    @classmethod
    def validate_pattern(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            _compile(v)
        return v

    @field_validator("branches", "skip_branches")
    @classmethod
    def validate_branch_patterns(cls, v: List[str]) -> List[str]:
        for pattern in v:
            _compile(pattern)
        return v

    def to_check(self) -> CheckDefinition:
        # A job that is optional or does not report is never required for merge
        return CheckDefinition(
            name=self.name,
            context=self.context or self.name,
            required=not (self.optional or self.skip_report),
            always_run=self.always_run,
            run_if_changed=self.run_if_changed,
            skip_if_only_changed=self.skip_if_only_changed,
            branches=self.branches,
            skip_branches=self.skip_branches,
            trigger=self.trigger,
        )


class PresubmitConfigFile(BaseModel):
    presubmits: Dict[str, List[PresubmitSpec]] = Field(default_factory=dict)


def parse_presubmits(raw: Any) -> Dict[str, List[CheckDefinition]]:
    """
    Validates parsed YAML and converts it into check definitions per 'org/repo'.

    Raises:
        ConfigurationError: If the document is invalid or a context is configured twice for a repository.
    """
    try:
        document = PresubmitConfigFile.model_validate(raw or {})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid presubmit configuration: {e}") from e

    presubmits: Dict[str, List[CheckDefinition]] = {}
    for repo, specs in document.presubmits.items():
        checks = [spec.to_check() for spec in specs]
        seen: Dict[str, str] = {}
        for check in checks:
            if check.context in seen:
                raise ConfigurationError(
                    f"Presubmits {seen[check.context]!r} and {check.name!r} in {repo} share context {check.context!r}"
                )
            seen[check.context] = check.name
        presubmits[repo] = checks
    return presubmits


class PresubmitConfig:
    """Resolves the configured checks of a repository from a YAML file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._mtime: Optional[float] = None
        self._presubmits: Dict[str, List[CheckDefinition]] = {}

    def _reload_if_changed(self) -> None:
        try:
            mtime = self.path.stat().st_mtime
        except OSError as e:
            raise ConfigurationError(f"Cannot read presubmit configuration {self.path}: {e}") from e
        if mtime == self._mtime:
            return

        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot load presubmit configuration {self.path}: {e}") from e
        self._presubmits = parse_presubmits(raw)
        self._mtime = mtime
        logger.info(f"Loaded presubmit configuration for {len(self._presubmits)} repositories from {self.path}")

    def get_presubmits(self, org: str, repo: str) -> List[CheckDefinition]:
        """
        Returns the checks configured for org/repo in configuration order.

        Raises:
            ConfigurationError: If the configuration file cannot be loaded or is invalid.
        """
        self._reload_if_changed()
        return list(self._presubmits.get(f"{org}/{repo}", []))

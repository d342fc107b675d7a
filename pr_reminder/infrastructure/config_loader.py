"""Configuration loading from the environment and a YAML repository list."""
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
import yaml
from dotenv import load_dotenv
from pr_reminder.domain.errors import ConfigError
from pr_reminder.domain.models import ReminderConfig, RepositoryConfig


logger = logging.getLogger(__name__)


TRUE_VALUES = {"1", "true", "yes", "on"}

# Applied whenever a repository entry and the file's defaults block omit a key
REPOSITORY_DEFAULTS = {
    "display_name": "PR Reminder",
    "icon": ":robot_face:",
    "ignore_labels": [],
    "deployment_footer": False,
}


def load_environment() -> None:
    """Load environment variables from .env or env file."""
    load_dotenv('.env') or load_dotenv('env')


def _env_flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "").lower() in TRUE_VALUES


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Process level settings read from the environment."""
    github_token: str
    slack_webhook_url: Optional[str]
    config_path: str = "reminder.yml"
    max_concurrency: int = 5
    github_timeout: int = 5
    dry_run: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Create settings from environment variables.

        Raises:
            ConfigError: When a required variable is missing or malformed
        """
        env = os.environ if env is None else env

        github_token = env.get("GITHUB_TOKEN")
        if not github_token:
            raise ConfigError("GITHUB_TOKEN environment variable is required")

        dry_run = _env_flag(env, "DRY_RUN")
        slack_webhook_url = env.get("SLACK_WEBHOOK_URL") or None
        if not slack_webhook_url and not dry_run:
            raise ConfigError("SLACK_WEBHOOK_URL environment variable is required unless DRY_RUN is set")

        max_concurrency = _env_int(env, "MAX_CONCURRENCY", 5)
        if max_concurrency < 1:
            raise ConfigError("MAX_CONCURRENCY must be at least 1")

        return cls(
            github_token=github_token,
            slack_webhook_url=slack_webhook_url,
            config_path=env.get("REMINDER_CONFIG") or "reminder.yml",
            max_concurrency=max_concurrency,
            github_timeout=_env_int(env, "GITHUB_TIMEOUT", 5),
            dry_run=dry_run,
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )


def _parse_repository(entry: Any, index: int, company: str, defaults: Dict[str, Any]) -> RepositoryConfig:
    if not isinstance(entry, dict):
        raise ConfigError(f"repositories[{index}] must be a mapping")

    merged = {**REPOSITORY_DEFAULTS, **defaults, **entry}

    for key in ("name", "channel"):
        if not merged.get(key):
            raise ConfigError(f"repositories[{index}] is missing '{key}'")

    for key in ("display_name", "icon"):
        value = merged.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"repositories[{index}].{key} must be a non-empty string")

    ignore_labels = merged.get("ignore_labels") or []
    if isinstance(ignore_labels, str) or not isinstance(ignore_labels, (list, tuple, set)):
        raise ConfigError(f"repositories[{index}].ignore_labels must be a list of label names")

    deployment_footer = merged.get("deployment_footer")
    if not isinstance(deployment_footer, bool):
        raise ConfigError(f"repositories[{index}].deployment_footer must be true or false")

    return RepositoryConfig(
        owner=str(merged.get("owner") or company),
        name=str(merged["name"]),
        channel=str(merged["channel"]),
        display_name=merged["display_name"],
        icon=merged["icon"],
        ignore_labels=frozenset(str(label) for label in ignore_labels),
        deployment_footer=deployment_footer,
    )


def parse_reminder_config(data: Any) -> ReminderConfig:
    """Build a ReminderConfig from parsed YAML.

    Args:
        data: Mapping with ``company``, optional ``defaults`` and ``repositories``

    Returns:
        ReminderConfig with repositories in file order

    Raises:
        ConfigError: When the structure is invalid
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    company = data.get("company")
    if not company:
        raise ConfigError("Configuration is missing 'company'")

    defaults = data.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise ConfigError("'defaults' must be a mapping")

    entries = data.get("repositories")
    if not isinstance(entries, list) or not entries:
        raise ConfigError("Configuration must list at least one repository under 'repositories'")

    repositories = tuple(
        _parse_repository(entry, index, str(company), defaults)
        for index, entry in enumerate(entries)
    )
    return ReminderConfig(company=str(company), repositories=repositories)


def load_reminder_config(path: str) -> ReminderConfig:
    """Load the repository list from a YAML file.

    Raises:
        ConfigError: When the file is missing, unreadable or invalid
    """
    if not os.path.exists(path):
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    config = parse_reminder_config(data)
    logger.info(f"Loaded {len(config.repositories)} repositories from {path}")
    return config

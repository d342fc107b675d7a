"""Tests for configuration loading."""
import pytest
from pr_reminder.domain.errors import ConfigError
from pr_reminder.infrastructure.config_loader import (
    Settings,
    load_reminder_config,
    parse_reminder_config,
)


CONFIG_YAML = """
company: acme
defaults:
  display_name: Review Bot
  icon: ":eyes:"
  ignore_labels: ["do not merge"]
repositories:
  - name: web
    channel: "#web-dev"
    ignore_labels: ["wip", "do not merge"]
    deployment_footer: true
  - name: tools
    owner: acme-labs
    channel: "@bob"
"""


def test_load_reminder_config(tmp_path):
    """Test loading repositories from a YAML file."""
    path = tmp_path / "reminder.yml"
    path.write_text(CONFIG_YAML)

    config = load_reminder_config(str(path))

    assert config.company == "acme"
    assert [repo.full_name for repo in config.repositories] == ["acme/web", "acme-labs/tools"]
    web, tools = config.repositories
    assert web.ignore_labels == frozenset({"wip", "do not merge"})
    assert web.deployment_footer is True
    assert web.display_name == "Review Bot"
    assert tools.ignore_labels == frozenset({"do not merge"})
    assert tools.icon == ":eyes:"
    assert tools.deployment_footer is False


def test_load_reminder_config_missing_file(tmp_path):
    """Test a missing configuration file."""
    with pytest.raises(ConfigError, match="not found"):
        load_reminder_config(str(tmp_path / "missing.yml"))


def test_load_reminder_config_invalid_yaml(tmp_path):
    """Test a file that is not valid YAML."""
    path = tmp_path / "reminder.yml"
    path.write_text("company: [acme\n")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_reminder_config(str(path))


def test_parse_reminder_config_uses_builtin_defaults():
    """Test an entry with only the required keys."""
    config = parse_reminder_config({
        "company": "acme",
        "repositories": [{"name": "web", "channel": "#web"}],
    })

    repo = config.repositories[0]
    assert repo.owner == "acme"
    assert repo.display_name == "PR Reminder"
    assert repo.icon == ":robot_face:"
    assert repo.ignore_labels == frozenset()
    assert repo.deployment_footer is False


@pytest.mark.parametrize("data,message", [
    ([], "must be a mapping"),
    ({"repositories": [{"name": "web", "channel": "#web"}]}, "missing 'company'"),
    ({"company": "acme"}, "at least one repository"),
    ({"company": "acme", "repositories": []}, "at least one repository"),
    ({"company": "acme", "repositories": ["web"]}, r"repositories\[0\] must be a mapping"),
    ({"company": "acme", "repositories": [{"channel": "#web"}]}, "missing 'name'"),
    ({"company": "acme", "repositories": [{"name": "web"}]}, "missing 'channel'"),
    ({"company": "acme", "repositories": [{"name": "web", "channel": "#web", "ignore_labels": "wip"}]},
     "ignore_labels"),
    ({"company": "acme", "repositories": [{"name": "web", "channel": "#web", "deployment_footer": "yes"}]},
     "deployment_footer"),
    ({"company": "acme", "repositories": [{"name": "web", "channel": "#web", "display_name": None}]},
     r"repositories\[0\]\.display_name must be a non-empty string"),
    ({"company": "acme", "defaults": {"icon": ""}, "repositories": [{"name": "web", "channel": "#web"}]},
     r"repositories\[0\]\.icon must be a non-empty string"),
    ({"company": "acme", "repositories": [{"name": "web", "channel": "#web", "icon": 5}]},
     r"repositories\[0\]\.icon must be a non-empty string"),
    ({"company": "acme", "defaults": ["x"], "repositories": [{"name": "web", "channel": "#web"}]},
     "'defaults' must be a mapping"),
])
def test_parse_reminder_config_errors(data, message):
    """Test that malformed configuration is rejected."""
    with pytest.raises(ConfigError, match=message):
        parse_reminder_config(data)


def test_settings_from_env():
    """Test reading settings from environment variables."""
    settings = Settings.from_env({
        "GITHUB_TOKEN": "ghp_test",
        "SLACK_WEBHOOK_URL": "https://hooks.slack.com/services/T/B/X",
        "REMINDER_CONFIG": "repos.yml",
        "MAX_CONCURRENCY": "3",
        "LOG_LEVEL": "debug",
    })

    assert settings.github_token == "ghp_test"
    assert settings.config_path == "repos.yml"
    assert settings.max_concurrency == 3
    assert settings.github_timeout == 5
    assert settings.dry_run is False
    assert settings.log_level == "DEBUG"


def test_settings_dry_run_without_webhook():
    """Test that dry runs do not need a webhook."""
    settings = Settings.from_env({"GITHUB_TOKEN": "ghp_test", "DRY_RUN": "true"})

    assert settings.dry_run is True
    assert settings.slack_webhook_url is None
    assert settings.config_path == "reminder.yml"


@pytest.mark.parametrize("env,message", [
    ({}, "GITHUB_TOKEN"),
    ({"GITHUB_TOKEN": "ghp_test"}, "SLACK_WEBHOOK_URL"),
    ({"GITHUB_TOKEN": "ghp_test", "DRY_RUN": "1", "MAX_CONCURRENCY": "many"}, "MAX_CONCURRENCY"),
    ({"GITHUB_TOKEN": "ghp_test", "DRY_RUN": "1", "MAX_CONCURRENCY": "0"}, "at least 1"),
])
def test_settings_from_env_errors(env, message):
    """Test missing or malformed environment variables."""
    with pytest.raises(ConfigError, match=message):
        Settings.from_env(env)


def test_load_reminder_config_blank_display_name(tmp_path):
    """Test that a display name left empty in YAML is rejected."""
    path = tmp_path / "reminder.yml"
    path.write_text(
        "company: acme\n"
        "repositories:\n"
        "  - name: web\n"
        "    channel: '#web-dev'\n"
        "    display_name:\n"
    )

    with pytest.raises(ConfigError, match="display_name"):
        load_reminder_config(str(path))

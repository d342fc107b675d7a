"""Verify that the setup is correct before running the reminder."""
import os
import sys
from dotenv import load_dotenv
from pr_reminder.domain.errors import ConfigError
from pr_reminder.infrastructure.config_loader import Settings, load_reminder_config

# Load environment variables from .env or env file
load_dotenv('.env') or load_dotenv('env')


def check_environment_variables():
    """Check required environment variables."""
    print("Checking environment variables...")

    required_vars = ["GITHUB_TOKEN"]
    if os.getenv("DRY_RUN", "").lower() not in {"1", "true", "yes", "on"}:
        required_vars.append("SLACK_WEBHOOK_URL")
    optional_vars = ["REMINDER_CONFIG", "MAX_CONCURRENCY", "GITHUB_TIMEOUT", "DRY_RUN", "LOG_LEVEL"]

    missing = []
    for var in required_vars:
        if not os.getenv(var):
            missing.append(var)

    if missing:
        print(f"❌ Missing required environment variables: {', '.join(missing)}")
        return False

    print("✅ Required environment variables set")

    for var in optional_vars:
        if os.getenv(var):
            print(f"   {var}: {os.getenv(var)}")

    return True


def check_repository_config():
    """Check the repository list file."""
    print("\nChecking repository configuration...")

    path = os.getenv("REMINDER_CONFIG", "reminder.yml")
    try:
        config = load_reminder_config(path)
    except ConfigError as e:
        print(f"❌ {e}")
        return False

    print(f"✅ Loaded {len(config.repositories)} repositories for {config.company}")
    for repo in config.repositories:
        ignored = ", ".join(sorted(repo.ignore_labels)) or "none"
        print(f"   {repo.full_name} -> {repo.channel} (ignore: {ignored})")

    return True


def check_run_settings():
    """Check the values the reminder run will use."""
    print("\nChecking run settings...")

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        print(f"❌ {e}")
        return False

    print(f"✅ Up to {settings.max_concurrency} repositories will be processed at once")
    print(f"   GitHub request timeout: {settings.github_timeout}s")
    print(f"   Log level: {settings.log_level}")
    if settings.dry_run:
        print("   DRY_RUN is set, reminders will be logged and not posted")

    # Classic and fine-grained personal access tokens
    if not settings.github_token.startswith(("ghp_", "github_pat_")):
        print("⚠️  GITHUB_TOKEN is not a personal access token, it needs read access to pull requests")

    return True


def check_slack_webhook():
    """Verify the Slack webhook URL looks like an incoming webhook."""
    print("\nChecking Slack webhook...")

    url = os.getenv("SLACK_WEBHOOK_URL")
    if not url:
        print("⚠️  SLACK_WEBHOOK_URL not set, messages will only be logged")
        return True

    if url.startswith("https://hooks.slack.com/"):
        print("✅ Slack webhook URL looks valid")
        return True
    else:
        print("⚠️  Webhook URL does not point at hooks.slack.com")
        return True


def main():
    """Run all verification checks."""
    print("=" * 60)
    print("Pull Request Reminder - Setup Verification")
    print("=" * 60)

    checks = [
        ("Environment Variables", check_environment_variables),
        ("Repository Configuration", check_repository_config),
        ("Run Settings", check_run_settings),
        ("Slack Webhook", check_slack_webhook),
    ]

    results = {}
    for name, check_func in checks:
        try:
            results[name] = check_func()
        except Exception as e:
            print(f"❌ {name} check failed with exception: {e}")
            results[name] = False

    failed = [name for name, passed in results.items() if not passed]

    print("\n" + "=" * 60)
    print(f"{len(results) - len(failed)}/{len(results)} checks passed")

    if not failed:
        print("Ready: python remind_pull_requests.py (set DRY_RUN=true for a first run)")
        sys.exit(0)

    print(f"Fix before running: {', '.join(failed)}")
    sys.exit(1)


if __name__ == "__main__":
    main()

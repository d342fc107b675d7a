"""Main entry point for the pull request reminder.

This script sends one reminder per configured repository using the application service.
"""
import asyncio
import logging
import sys
from pr_reminder.application.reminder_service import ReminderService
from pr_reminder.domain.errors import ConfigError
from pr_reminder.infrastructure.config_loader import (
    Settings,
    load_environment,
    load_reminder_config,
)
from pr_reminder.infrastructure.github_client import GitHubGraphQLClient
from pr_reminder.infrastructure.slack_notifier import SlackWebhookNotifier

# Load environment variables from .env or env file
load_environment()


logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


async def main():
    """Execute the reminder run."""
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        configure_logging("INFO")
        logger.error(str(e))
        sys.exit(1)

    configure_logging(settings.log_level)

    try:
        config = load_reminder_config(settings.config_path)
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    # Initialize infrastructure components
    github_client = GitHubGraphQLClient(
        settings.github_token,
        user_agent=config.company,
        timeout_seconds=settings.github_timeout
    )
    notifier = SlackWebhookNotifier(settings.slack_webhook_url, dry_run=settings.dry_run)

    # Initialize application service
    reminder = ReminderService(
        github_client=github_client,
        notifier=notifier,
        max_concurrency=settings.max_concurrency
    )

    try:
        report = await reminder.run(config.repositories)

        # Log results
        logger.info("=" * 50)
        logger.info("Reminder Summary:")
        logger.info(f"  Repositories: {len(report.outcomes)}")
        logger.info(f"  Succeeded: {len(report.succeeded)}")
        logger.info(f"  Failed: {len(report.failed)}")
        for outcome in report.outcomes:
            if not outcome.succeeded:
                logger.info(f"    {outcome.repository}: {outcome.error}")
        logger.info(f"  Duration: {report.duration_seconds:.2f} seconds")
        logger.info("=" * 50)

    except Exception as e:
        logger.error(f"Reminder run failed: {e}", exc_info=True)
        sys.exit(1)
    finally:
        await reminder.close()


if __name__ == "__main__":
    asyncio.run(main())

#!/usr/bin/env python3
"""Script to rebuild the markdown leaderboard from the repository list."""

import logging
import sys
import os

# Add repository root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dotenv import load_dotenv

from leaderboard.infrastructure.github_client import GitHubRestClient
from leaderboard.infrastructure.list_loader import load_access_token, load_identifiers
from leaderboard.infrastructure.markdown_writer import MarkdownLeaderboardWriter
from leaderboard.application.leaderboard_service import LeaderboardService

logger = logging.getLogger(__name__)


def _int_env(name: str, default: str) -> int:
    value = os.getenv(name, default)
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def configure_logging():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def main():
    """Fetch every listed repository and rewrite the leaderboard file."""
    load_dotenv()
    configure_logging()

    try:
        list_file = os.getenv("REPO_LIST_FILE", "list.txt")
        output_file = os.getenv("OUTPUT_FILE", "README.md")
        token_file = os.getenv("ACCESS_TOKEN_FILE", "access_token.txt")
        timeout = _int_env("REQUEST_TIMEOUT", str(GitHubRestClient.DEFAULT_TIMEOUT_SECONDS))
        max_workers = _int_env("MAX_WORKERS", "1")
        if max_workers < 1:
            raise ValueError(f"MAX_WORKERS must be at least 1, got {max_workers}")

        github_client = GitHubRestClient(
            token=load_access_token(token_file),
            base_url=os.getenv("GITHUB_API_URL", GitHubRestClient.DEFAULT_BASE_URL),
            timeout=timeout,
            auth_style=os.getenv("GITHUB_AUTH_STYLE", "query"),
        )
        writer = MarkdownLeaderboardWriter(
            title=os.getenv("LEADERBOARD_TITLE", "Top Repositories"),
            description=os.getenv(
                "LEADERBOARD_DESCRIPTION",
                "A list of popular github projects (ranked by stars automatically)"
            ),
            list_name=os.path.basename(list_file),
        )
        service = LeaderboardService(github_client, writer, max_workers=max_workers)

        identifiers = load_identifiers(list_file)
        try:
            result = service.build(identifiers, output_file)
        finally:
            github_client.close()

        logger.info(
            f"Leaderboard run finished: {result.rows} rows from "
            f"{result.repositories}/{result.identifiers} repositories"
        )
        return 0 if result.written else 1

    except Exception as e:
        logger.error(f"Leaderboard build failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

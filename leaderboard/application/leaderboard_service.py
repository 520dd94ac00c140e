"""Application service that fetches repositories and renders the leaderboard."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from leaderboard.domain.repository import Repository
from leaderboard.infrastructure.github_client import GitHubRestClient, RequestError
from leaderboard.infrastructure.markdown_writer import FileError, MarkdownLeaderboardWriter, sort_repositories

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class LeaderboardResult:
    """Summary of one leaderboard run."""

    identifiers: int
    repositories: int
    rows: int
    output_path: str
    written: bool


class LeaderboardService:
    """Service for fetching repository data and writing the markdown leaderboard."""

    def __init__(
        self,
        github_client: GitHubRestClient,
        writer: MarkdownLeaderboardWriter,
        max_workers: int = 1
    ):
        """
        Initialize leaderboard service.

        Args:
            github_client: GitHub API client
            writer: Markdown writer for the output file
            max_workers: Requests in flight per fetch pass. 1 fetches one at a time.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.github_client = github_client
        self.writer = writer
        self.max_workers = max_workers

    def _fetch_all(self, fetch: Callable[[T], R], items: Sequence[T]) -> List[Tuple[T, Optional[R], Optional[RequestError]]]:
        """Call ``fetch`` for every item, returning outcomes in input order."""
        def attempt(item: T) -> Tuple[T, Optional[R], Optional[RequestError]]:
            try:
                return item, fetch(item), None
            except RequestError as e:
                return item, None, e

        if self.max_workers == 1 or len(items) < 2:
            return [attempt(item) for item in items]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(attempt, items))

    def collect_repositories(self, identifiers: Sequence[str]) -> List[Repository]:
        """
        Fetch metadata for every identifier.

        Failed identifiers are logged and skipped.

        Returns:
            Fetched repositories in identifier order
        """
        logger.info(f"Fetching metadata for {len(identifiers)} repositories")

        repositories = []
        for identifier, repository, error in self._fetch_all(self.github_client.fetch_repository, identifiers):
            if error is not None:
                logger.warning(f"Skipping {identifier}: {type(error).__name__}: {error}")
                continue
            repositories.append(repository)

        logger.info(f"Fetched {len(repositories)}/{len(identifiers)} repositories")
        return repositories

    def attach_latest_commits(self, repositories: Sequence[Repository]) -> int:
        """
        Attach the latest default-branch commit to every repository in place.

        Repositories whose commit cannot be fetched keep ``commit`` unset.

        Returns:
            Number of repositories a commit was attached to
        """
        attached = 0
        for repository, commit, error in self._fetch_all(self.github_client.fetch_commit, repositories):
            if error is not None:
                logger.warning(f"No commit for {repository.full_name}: {type(error).__name__}: {error}")
                continue
            repository.attach_commit(commit)
            attached += 1

        logger.info(f"Attached latest commits to {attached}/{len(repositories)} repositories")
        return attached

    def build(self, identifiers: Sequence[str], output_path: str, now: Optional[datetime] = None) -> LeaderboardResult:
        """
        Fetch all repositories and commits, then write the leaderboard.

        Args:
            identifiers: ``owner/name`` identifiers in list order
            output_path: Markdown file to overwrite
            now: Generation time for the footer, defaults to the current time

        Returns:
            Summary of the run. ``written`` is False when the file could not be written.
        """
        repositories = self.collect_repositories(identifiers)
        self.attach_latest_commits(repositories)
        ranked = sort_repositories(repositories)

        try:
            rows = self.writer.write(ranked, output_path, now=now)
        except FileError as e:
            logger.error(f"Could not write leaderboard: {e}")
            return LeaderboardResult(len(identifiers), len(repositories), 0, output_path, False)

        return LeaderboardResult(len(identifiers), len(repositories), rows, output_path, True)

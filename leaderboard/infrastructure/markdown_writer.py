"""Markdown rendering of the repository leaderboard."""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from leaderboard.domain.repository import Repository

logger = logging.getLogger(__name__)

DISPLAY_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

TABLE_HEADER = "| Project Name | Stars | Forks | Open Issues | Description | Last Commit |"
TABLE_SEPARATOR = "| ------------ | ----- | ----- | ----------- | ----------- | ----------- |"
FOOTER_PREFIX = "*Last Automatic Update: "


class FileError(Exception):
    """Raised when the output file cannot be created or appended to."""
    pass


def sort_repositories(repositories: Iterable[Repository]) -> List[Repository]:
    """Order by stars, most first. Equal star counts keep their input order."""
    return sorted(repositories, key=lambda repo: repo.stars, reverse=True)


def _escape_cell(text: str) -> str:
    return " ".join(text.split()).replace("|", "\\|")


class MarkdownLeaderboardWriter:
    """Writes the leaderboard table, header and footer to a markdown file."""

    def __init__(
        self,
        title: str = "Top Repositories",
        description: str = "A list of popular github projects (ranked by stars automatically)",
        list_name: Optional[str] = "list.txt",
    ):
        self.title = title
        self.description = description
        self.list_name = list_name

    def header_lines(self) -> List[str]:
        lines = [f"# {self.title}", self.description]
        if self.list_name:
            lines.append(f"Please update **{self.list_name}** (via Pull Request)")
        lines.extend(["", TABLE_HEADER, TABLE_SEPARATOR])
        return lines

    def render_row(self, repo: Repository) -> str:
        return (
            f"| [{_escape_cell(repo.name)}]({repo.html_url}) | {repo.stars} | {repo.forks} "
            f"| {repo.open_issues} | {_escape_cell(repo.description)} "
            f"| {repo.last_commit_at.strftime(DISPLAY_DATE_FORMAT)} |"
        )

    def footer_lines(self, now: datetime) -> List[str]:
        return ["", f"{FOOTER_PREFIX}{now.strftime(DISPLAY_DATE_FORMAT)}*"]

    def render_lines(self, repositories: Iterable[Repository], now: datetime) -> List[str]:
        """
        Render the whole document.

        Repositories without an attached commit are left out.

        Args:
            repositories: Records in any order
            now: Generation time shown in the footer

        Returns:
            Document lines without trailing newlines
        """
        lines = self.header_lines()
        for repo in sort_repositories(repositories):
            if repo.commit is None:
                continue
            lines.append(self.render_row(repo))
        lines.extend(self.footer_lines(now))
        return lines

    def write(self, repositories: Iterable[Repository], path: str, now: Optional[datetime] = None) -> int:
        """
        Overwrite ``path`` with the rendered leaderboard, one line at a time.

        Returns:
            Number of table rows written

        Raises:
            FileError: If the file cannot be created or written. Lines already
                written stay on disk.
        """
        repositories = list(repositories)
        row_count = sum(1 for repo in repositories if repo.commit is not None)
        lines = self.render_lines(repositories, now or datetime.now())

        try:
            with open(path, "w", encoding="utf-8") as f:
                for line in lines:
                    f.write(line + "\n")
        except OSError as e:
            raise FileError(f"Could not update {path}: {e}") from e

        logger.info(f"Wrote {row_count} repositories to {path}")
        return row_count

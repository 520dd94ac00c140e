from datetime import datetime

import pytest

from leaderboard.domain.repository import Commit, Repository
from leaderboard.infrastructure.markdown_writer import (
    TABLE_HEADER,
    TABLE_SEPARATOR,
    FileError,
    MarkdownLeaderboardWriter,
    sort_repositories,
)

from github_fakes import commit_payload, repo_payload

NOW = datetime(2026, 10, 18, 9, 15, 0)


def make_repo(full_name, stars, date="2018-07-05T12:30:45Z", **kwargs):
    repo = Repository.from_api(repo_payload(full_name, stars, **kwargs))
    if date is not None:
        repo.attach_commit(Commit.from_api(commit_payload(date)))
    return repo


def data_rows(lines):
    start = lines.index(TABLE_SEPARATOR) + 1
    return [line for line in lines[start:] if line.startswith("| [")]


def test_document_layout():
    writer = MarkdownLeaderboardWriter(title="Top Swift Web Frameworks", description="Ranked by stars")

    lines = writer.render_lines([make_repo("vapor/vapor", 20000, forks=1400, open_issues=90, description="Server-side Swift")], NOW)

    assert lines == [
        "# Top Swift Web Frameworks",
        "Ranked by stars",
        "Please update **list.txt** (via Pull Request)",
        "",
        TABLE_HEADER,
        TABLE_SEPARATOR,
        "| [vapor](https://github.com/vapor/vapor) | 20000 | 1400 | 90 | Server-side Swift | 2018-07-05 12:30:45 |",
        "",
        "*Last Automatic Update: 2026-10-18 09:15:00*",
    ]


def test_rows_sorted_by_stars_descending():
    repos = [make_repo("c/d", 50), make_repo("a/b", 100), make_repo("e/f", 75)]

    rows = data_rows(MarkdownLeaderboardWriter().render_lines(repos, NOW))

    assert [row.split("]")[0] for row in rows] == ["| [b", "| [f", "| [d"]


def test_equal_stars_keep_input_order():
    repos = [make_repo("x/first", 10), make_repo("x/second", 10), make_repo("x/top", 11), make_repo("x/third", 10)]

    assert [repo.name for repo in sort_repositories(repos)] == ["top", "first", "second", "third"]


def test_repository_without_commit_is_skipped():
    repos = [make_repo("a/b", 100, date=None), make_repo("c/d", 50)]

    rows = data_rows(MarkdownLeaderboardWriter().render_lines(repos, NOW))

    assert len(rows) == 1
    assert rows[0].startswith("| [d](https://github.com/c/d)")


def test_description_cannot_break_table():
    repo = make_repo("a/b", 1, description="fast | small\nand simple")

    row = MarkdownLeaderboardWriter().render_row(repo)

    assert "fast \\| small and simple" in row
    assert "\n" not in row


def test_header_without_list_name():
    writer = MarkdownLeaderboardWriter(list_name=None)

    assert not any("Please update" in line for line in writer.header_lines())


def test_write_overwrites_file(tmp_path):
    path = tmp_path / "README.md"
    path.write_text("stale content that is much longer than anything\n" * 50, encoding="utf-8")

    rows = MarkdownLeaderboardWriter().write([make_repo("a/b", 100), make_repo("c/d", 50, date=None)], str(path), now=NOW)

    content = path.read_text(encoding="utf-8")
    assert rows == 1
    assert "stale" not in content
    assert content.endswith("*Last Automatic Update: 2026-10-18 09:15:00*\n")


def test_empty_leaderboard_has_header_and_footer_only(tmp_path):
    path = tmp_path / "README.md"
    writer = MarkdownLeaderboardWriter()

    rows = writer.write([], str(path), now=NOW)

    assert rows == 0
    assert path.read_text(encoding="utf-8").splitlines() == writer.header_lines() + writer.footer_lines(NOW)


def test_unwritable_path_raises_file_error(tmp_path):
    with pytest.raises(FileError):
        MarkdownLeaderboardWriter().write([make_repo("a/b", 1)], str(tmp_path / "missing" / "README.md"), now=NOW)

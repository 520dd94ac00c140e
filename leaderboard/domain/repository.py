"""Domain entities for GitHub repositories and their latest commits."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

COMMIT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _require(payload: Dict[str, Any], key: str) -> Any:
    if key not in payload:
        raise KeyError(f"missing field '{key}'")
    return payload[key]


def _require_str(payload: Dict[str, Any], key: str) -> str:
    value = _require(payload, key)
    if not isinstance(value, str):
        raise TypeError(f"field '{key}' must be a string, got {type(value).__name__}")
    return value


def _require_count(payload: Dict[str, Any], key: str) -> int:
    value = _require(payload, key)
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"field '{key}' must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"field '{key}' must be non-negative, got {value}")
    return value


def _require_object(payload: Any, key: Optional[str] = None) -> Dict[str, Any]:
    value = payload if key is None else _require(payload, key)
    if not isinstance(value, dict):
        where = f"field '{key}'" if key else "payload"
        raise TypeError(f"{where} must be an object, got {type(value).__name__}")
    return value


def parse_commit_date(value: str) -> datetime:
    """Parse a ``YYYY-MM-DDTHH:MM:SSZ`` timestamp into an aware UTC datetime."""
    try:
        parsed = datetime.strptime(value, COMMIT_DATE_FORMAT)
    except ValueError as e:
        raise ValueError(f"cannot decode date string {value!r}") from e
    return parsed.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class Commit:
    """Immutable committer information for the head of a branch."""

    name: str
    email: str
    date: datetime

    @classmethod
    def from_api(cls, payload: Any) -> "Commit":
        """
        Build a commit from a ``GET /repos/{owner}/{repo}/commits/{ref}`` body.

        Raises:
            KeyError, TypeError, ValueError: If the payload does not match the schema
        """
        commit = _require_object(_require_object(payload), "commit")
        committer = _require_object(commit, "committer")
        return cls(
            name=_require_str(committer, "name"),
            email=_require_str(committer, "email"),
            date=parse_commit_date(_require_str(committer, "date")),
        )


@dataclass
class Repository:
    """Repository entity, completed by attaching its latest commit."""

    name: str
    full_name: str
    default_branch: str
    html_url: str
    stars: int
    forks: int
    open_issues: int
    description: str
    commit: Optional[Commit] = None

    @classmethod
    def from_api(cls, payload: Any) -> "Repository":
        """
        Build a repository from a ``GET /repos/{owner}/{repo}`` body.

        Wire names are mapped onto attributes here, e.g. ``stargazers_count``
        becomes ``stars``. A null description decodes to an empty string.

        Raises:
            KeyError, TypeError, ValueError: If the payload does not match the schema
        """
        data = _require_object(payload)
        description = _require(data, "description")
        if description is None:
            description = ""
        elif not isinstance(description, str):
            raise TypeError(f"field 'description' must be a string, got {type(description).__name__}")

        return cls(
            name=_require_str(data, "name"),
            full_name=_require_str(data, "full_name"),
            default_branch=_require_str(data, "default_branch"),
            html_url=_require_str(data, "html_url"),
            stars=_require_count(data, "stargazers_count"),
            forks=_require_count(data, "forks_count"),
            open_issues=_require_count(data, "open_issues_count"),
            description=description,
        )

    def attach_commit(self, commit: Commit):
        self.commit = commit

    @property
    def last_commit_at(self) -> Optional[datetime]:
        return self.commit.date if self.commit else None

"""GitHub REST API client for repository metadata and latest commits."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote, urlparse

import requests

from leaderboard.domain.repository import Commit, Repository

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[^/\s]+/[^/\s]+$")


class RequestError(Exception):
    """Base class for failures of a single API request."""
    pass


class UrlError(RequestError):
    """Raised when the endpoint URL cannot be built."""
    pass


class ServerError(RequestError):
    """Raised on transport failure or a non-200 response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MappingError(RequestError):
    """Raised when a response body does not decode against the expected schema."""
    pass


@dataclass(frozen=True)
class RepositoryRequest:
    """Repository metadata for one ``owner/name`` identifier."""

    full_name: str

    def path(self) -> str:
        if not IDENTIFIER_PATTERN.match(self.full_name):
            raise UrlError(f"Invalid repository identifier: {self.full_name!r}")
        return f"repos/{quote(self.full_name)}"

    def decode(self, payload: Any) -> Repository:
        return Repository.from_api(payload)


@dataclass(frozen=True)
class CommitRequest:
    """Latest commit on the default branch of a fetched repository."""

    repository: Repository

    def path(self) -> str:
        full_name = self.repository.full_name
        branch = self.repository.default_branch
        if not IDENTIFIER_PATTERN.match(full_name):
            raise UrlError(f"Invalid repository identifier: {full_name!r}")
        if not branch or branch != branch.strip():
            raise UrlError(f"Invalid default branch for {full_name}: {branch!r}")
        return f"repos/{quote(full_name)}/commits/{quote(branch, safe='')}"

    def decode(self, payload: Any) -> Commit:
        return Commit.from_api(payload)


class GitHubRestClient:
    """Blocking client for the two GitHub REST endpoints the leaderboard needs."""

    DEFAULT_BASE_URL = "https://api.github.com"
    DEFAULT_TIMEOUT_SECONDS = 30
    AUTH_STYLES = ("query", "header")

    def __init__(
        self,
        token: str = "",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        auth_style: str = "query",
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize GitHub REST client.

        Args:
            token: Access token. Sent with every request unless empty.
            base_url: API root, e.g. ``https://api.github.com``
            timeout: Seconds to wait for each response
            auth_style: ``query`` sends the token as the ``access_token`` parameter,
                ``header`` sends it as an ``Authorization`` header
            session: Optional pre-built session, mainly for tests
        """
        if auth_style not in self.AUTH_STYLES:
            raise ValueError(f"Unknown auth style: {auth_style!r}")
        if timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {timeout}")

        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.auth_style = auth_style
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "repo-leaderboard",
        })

        if self.token and self.auth_style == "header":
            self.session.headers["Authorization"] = f"token {self.token}"

        if not self.token:
            logger.warning("No GitHub token configured. Requests are unauthenticated.")

    def close(self):
        self.session.close()

    def _build_url(self, path: str) -> str:
        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise UrlError(f"Invalid API base URL: {self.base_url!r}")
        return f"{self.base_url}/{path}"

    def _execute_request(self, path: str, decode: Callable[[Any], Any]) -> Any:
        """
        Perform one GET request and decode its JSON body.

        Args:
            path: Endpoint path relative to the base URL
            decode: Callable turning the parsed JSON into a domain object

        Returns:
            The decoded domain object

        Raises:
            UrlError: If the URL cannot be built
            ServerError: If the request fails or the status is not 200
            MappingError: If the body is not JSON or does not match the schema
        """
        url = self._build_url(path)
        params: Dict[str, str] = {}
        if self.token and self.auth_style == "query":
            params["access_token"] = self.token

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ServerError(f"Request to {url} failed: {e}") from e

        if response.status_code != 200:
            raise ServerError(
                f"Unexpected status {response.status_code} from {url}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MappingError(f"Response from {url} is not valid JSON") from e

        try:
            return decode(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise MappingError(f"Cannot decode response from {url}: {e}") from e

    def fetch_repository(self, full_name: str) -> Repository:
        """Fetch metadata for the repository named ``owner/name``."""
        request = RepositoryRequest(full_name)
        repository = self._execute_request(request.path(), request.decode)
        logger.debug(f"Fetched {repository.full_name} ({repository.stars} stars)")
        return repository

    def fetch_commit(self, repository: Repository) -> Commit:
        """Fetch the latest commit on the repository's default branch."""
        request = CommitRequest(repository)
        commit = self._execute_request(request.path(), request.decode)
        logger.debug(f"Fetched latest commit of {repository.full_name} at {commit.date.isoformat()}")
        return commit

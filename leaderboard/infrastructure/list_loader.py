"""Loading of the repository list and the access token from local files."""

import logging
import os
from typing import List

logger = logging.getLogger(__name__)

GITHUB_URL_PREFIX = "https://github.com/"


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def load_identifiers(path: str, prefix: str = GITHUB_URL_PREFIX) -> List[str]:
    """
    Read ``owner/name`` identifiers from a newline-delimited list of repository URLs.

    Lines that do not start with ``prefix`` are ignored. Duplicates are kept.
    A missing or unreadable file yields an empty list.

    Args:
        path: Path of the list file
        prefix: Host URL every repository line starts with

    Returns:
        Identifiers in file order
    """
    try:
        content = _read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read repository list {path}: {e}. Treating it as empty.")
        return []

    identifiers = []
    for line in content.splitlines():
        if not line.startswith(prefix):
            continue
        identifier = line.strip()[len(prefix):].strip()
        if identifier:
            identifiers.append(identifier)

    logger.info(f"Loaded {len(identifiers)} repository identifiers from {path}")
    return identifiers


def load_access_token(path: str, env_var: str = "GITHUB_TOKEN") -> str:
    """Return the trimmed token file contents, else the env var, else an empty string."""
    try:
        return _read_text(path).strip()
    except FileNotFoundError:
        logger.debug(f"Token file {path} not found, falling back to {env_var}")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read token file {path}: {e}")
    return os.getenv(env_var, "").strip()

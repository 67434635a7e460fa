"""Download OpenAPI/Swagger documents over HTTP with a size ceiling."""

import json
import logging
from urllib.parse import urlparse

import requests
import yaml

from swagger_docs.config import FETCH_TIMEOUT, MAX_DOCUMENT_SIZE, USER_AGENT

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class DocumentFetchError(Exception):
    """A remote document could not be retrieved or is not usable.

    ``status_code`` is the HTTP status a web front-end should answer with.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


def is_url(source: str) -> bool:
    parsed = urlparse(source)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def fetch_document(url: str, timeout: float = FETCH_TIMEOUT, max_size: int = MAX_DOCUMENT_SIZE) -> dict:
    """Fetch and parse a remote document. Raises DocumentFetchError on any failure."""
    if not is_url(url):
        raise DocumentFetchError("Invalid URL format", 400)

    limit_mb = max_size / 1024 / 1024
    logger.info("Fetching document from %s", url)
    try:
        with requests.get(
            url,
            timeout=timeout,
            stream=True,
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        ) as response:
            response.raise_for_status()

            declared = response.headers.get("Content-Length")
            if declared and declared.isdigit() and int(declared) > max_size:
                raise DocumentFetchError(
                    f"Response too large: Maximum allowed size is {limit_mb:g}MB", 413
                )

            body = bytearray()
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                body.extend(chunk)
                if len(body) > max_size:
                    raise DocumentFetchError(
                        f"Response too large: Maximum allowed size is {limit_mb:g}MB", 413
                    )
    except requests.HTTPError as e:
        raise DocumentFetchError(
            f"Failed to fetch swagger document from URL: HTTP {e.response.status_code}", 400
        ) from e
    except requests.Timeout as e:
        raise DocumentFetchError("Request timeout when fetching swagger document", 408) from e
    except requests.ConnectionError as e:
        raise DocumentFetchError(f"Failed to connect to URL: {e}", 400) from e
    except requests.RequestException as e:
        raise DocumentFetchError(f"Failed to fetch swagger document from URL: {e}", 400) from e

    document = _parse_body(bytes(body))
    if not isinstance(document, dict):
        raise DocumentFetchError("Invalid JSON response from URL", 400)

    logger.info("Fetched %d bytes from %s", len(body), url)
    return document


def _parse_body(body: bytes):
    text = body.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError:
        return None

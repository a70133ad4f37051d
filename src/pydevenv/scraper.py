"""Page-title scraper built on requests and BeautifulSoup.

Design follows Function Core / Imperative Shell:
- Pure functions: extract_title, _validate_url
- Imperative shell: WebScraper.fetch, WebScraper.get_title, fetch_title
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_USER_AGENT = "pydevenv-scraper/0.1"

_ALLOWED_SCHEMES = frozenset({"http", "https"})


class ScraperError(Exception):
    """Failed to fetch a page."""


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def _validate_url(url: str) -> None:
    """Reject URLs that requests should never be handed.

    Raises:
        ValueError: If the scheme is not http/https or the host is missing.
    """
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES or not parsed.netloc:
        msg = f"Unsupported URL {url!r}: expected an http:// or https:// address"
        raise ValueError(msg)


def extract_title(html: str) -> str | None:
    """Return the stripped ``<title>`` text of *html*, or None if absent or blank."""
    soup = BeautifulSoup(html, "html.parser")
    if soup.title is None:
        return None
    # get_text joins every text node, so comments or markup inside <title> don't hide it.
    title = " ".join(soup.title.get_text().split())
    return title or None


# ---------------------------------------------------------------------------
# Imperative shell
# ---------------------------------------------------------------------------


class WebScraper:
    """Fetch pages over HTTP with a shared session."""

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout
        self.user_agent = user_agent

    def fetch(self, url: str) -> str:
        """GET *url* and return the response body.

        Raises:
            ValueError: If *url* is not an http(s) URL.
            ScraperError: On connection errors, timeouts and HTTP error statuses.
        """
        _validate_url(url)
        logger.debug("Fetching %s", url)
        try:
            response = self.session.get(
                url,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Request to %s failed: %s", url, e)
            msg = f"Failed to fetch {url}: {e}"
            raise ScraperError(msg) from e
        return response.text

    def get_title(self, url: str) -> str | None:
        return extract_title(self.fetch(url))


def fetch_title(url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> str | None:
    """Fetch *url* with a one-off scraper and return its page title."""
    return WebScraper(timeout=timeout).get_title(url)

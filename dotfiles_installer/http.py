"""HTTP downloads for installer scripts."""

import logging

import requests

from dotfiles_installer.errors import NetworkError
from dotfiles_installer.retry import DOWNLOAD_RETRY_CONFIG, RetryManager

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


class HTTPClient:
    """Thin requests wrapper that only accepts 200 responses."""

    def __init__(self, session: requests.Session | None = None, retry_manager: RetryManager | None = None):
        self.session = session or requests.Session()
        self.retry_manager = retry_manager or RetryManager(DOWNLOAD_RETRY_CONFIG)

    def get_text(self, url: str, timeout: float = DEFAULT_TIMEOUT) -> str:
        """Download a URL and return its body.

        Raises:
            NetworkError: On connection failure or a non-200 status
        """
        logger.debug(f"GET {url}")
        try:
            response = self.retry_manager.execute(self.session.get, url, timeout=timeout)
        except requests.RequestException as e:
            raise NetworkError(f"failed to download {url}: {e}") from e

        if response.status_code != 200:
            raise NetworkError(
                f"failed to download {url}: HTTP status {response.status_code}",
                hint="Check your network connection and try again",
            )
        return response.text

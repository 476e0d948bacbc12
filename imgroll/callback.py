"""
CallbackClient - Delivers photo descriptors to an HTTP callback.
"""

import logging
from typing import Optional

import urllib3

from .descriptor import PhotoDescriptor
from .errors import CallbackError


class CallbackClient:
    """
    POSTs descriptor JSON to the URL the uploader asked to be notified at.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        retries: int = 3,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize callback client.

        Args:
            timeout: Total request timeout in seconds
            retries: Connection-level retries
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self._http = urllib3.PoolManager(
            timeout=urllib3.Timeout(total=timeout),
            retries=urllib3.Retry(total=retries, backoff_factor=0.5),
        )

    def send(self, url: str, descriptor: PhotoDescriptor) -> int:
        """
        Deliver a descriptor.

        Returns:
            HTTP status code

        Raises:
            CallbackError: On transport failure or a 4xx/5xx response
        """
        body = descriptor.to_json().encode('utf-8')
        try:
            response = self._http.request(
                'POST',
                url,
                body=body,
                headers={'Content-Type': 'application/json'},
            )
        except urllib3.exceptions.HTTPError as e:
            raise CallbackError(f"Unable to do callback request to {url}: {e}") from e

        if response.status >= 400:
            raise CallbackError(f"Callback {url} answered HTTP {response.status}")

        self.logger.info(f"Callback {url} answered HTTP {response.status}")
        return response.status

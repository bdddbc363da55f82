"""
Client for the remote transformation service.
Posts the raw XML document and returns the type,key,value text body.
"""
import time
from typing import Optional

import requests
import urllib3
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)

from core.config import get_settings
from core.exceptions import ConfigurationError, RemoteTierError
from core.logger import setup_logger

logger = setup_logger(__name__)


def extract_error_message(response: Optional[requests.Response]) -> Optional[str]:
    """
    Pull the upstream error message out of an error response.

    Prefers a JSON body of the form {"error": {"message": ...}} or
    {"message": ...}; falls back to the start of the plain text body.
    """
    if response is None:
        return None

    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])

    text = (response.text or "").strip()
    return text[:200] if text else None


class RemoteTransformClient:
    """REST client for the remote XML transformation endpoint."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        content_type: Optional[str] = None,
        verify_ssl: Optional[bool] = None,
        max_attempts: Optional[int] = None,
    ):
        """Initialize client; unset arguments come from settings."""
        settings = get_settings()

        self.url = url or settings.remote_url
        self.timeout = timeout if timeout is not None else settings.remote_timeout
        self.content_type = content_type or settings.remote_content_type
        self.verify_ssl = settings.remote_verify_ssl if verify_ssl is None else verify_ssl
        self.max_attempts = max_attempts or settings.remote_max_attempts

        if not self.url:
            raise ConfigurationError(
                "REMOTE_TRANSFORM_URL is not set",
                details={"required_key": "REMOTE_TRANSFORM_URL"}
            )

        if not self.verify_ssl:
            # Local development endpoints use self-signed certificates
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        logger.info(f"Initialized remote transform client: {self.url} (timeout={self.timeout}s)")

    def transform(self, xml_text: str, timeout: Optional[float] = None) -> str:
        """
        Send the XML document and return the text body.

        `timeout` is a deadline for the whole call. Connection errors are
        retried up to max_attempts while time remains; no attempt starts
        after the deadline. Timeouts and HTTP errors are not retried.

        Args:
            xml_text: Raw XML document
            timeout: Per-call override of the configured deadline (seconds)

        Returns:
            Response body text (may be empty)

        Raises:
            RemoteTierError: On timeout, transport or HTTP error
        """
        call_timeout = timeout if timeout is not None else self.timeout
        deadline = time.monotonic() + call_timeout

        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts) | stop_after_delay(call_timeout),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
            retry=retry_if_exception_type(requests.exceptions.ConnectionError),
            reraise=True,
        )

        try:
            response = retrying(self._post, xml_text, deadline)
            response.raise_for_status()

        except requests.exceptions.Timeout as e:
            logger.error(f"Remote transform timeout after {call_timeout}s: {e}")
            raise RemoteTierError(
                f"Request timed out after {call_timeout}s",
                details={"url": self.url, "timeout": call_timeout}
            )

        except requests.exceptions.HTTPError as e:
            status_code = getattr(e.response, "status_code", None)
            upstream = extract_error_message(e.response)
            logger.error(f"Remote transform HTTP {status_code}: {upstream}")
            raise RemoteTierError(
                upstream or f"Service returned HTTP {status_code}",
                details={"url": self.url, "status_code": status_code}
            )

        except requests.exceptions.RequestException as e:
            logger.error(f"Remote transform request failed: {e}")
            raise RemoteTierError(
                f"Failed to connect to service: {e}",
                details={"url": self.url, "error": str(e)}
            )

        body = response.text or ""
        logger.debug(f"Remote transform returned {len(body)} characters")
        return body

    def _post(self, xml_text: str, deadline: float) -> requests.Response:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise requests.exceptions.Timeout("Deadline expired before the request was sent")
        return requests.post(
            self.url,
            data=xml_text.encode("utf-8"),
            headers={"Content-Type": self.content_type},
            verify=self.verify_ssl,
            timeout=remaining,
        )


# Singleton client instance
_client: Optional[RemoteTransformClient] = None


def get_client() -> RemoteTransformClient:
    """
    Get or create the remote transform client singleton.

    Returns:
        RemoteTransformClient instance
    """
    global _client
    if _client is None:
        _client = RemoteTransformClient()
    return _client


def reset_client() -> None:
    """Reset client singleton (useful for testing)."""
    global _client
    _client = None

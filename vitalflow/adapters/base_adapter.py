from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from vitalflow.logger import get_logger
from vitalflow.utils.errors import UpstreamError

logger = get_logger(__name__)


def to_data_url(b64_data: str, mime_type: Optional[str] = None) -> str:
    return f"data:{mime_type or 'image/png'};base64,{b64_data}"


class ImageAdapter(ABC):
    """
    An abstract base class that defines the standard interface for all
    image-generation providers. Each provider builds its own request and
    knows how to pull an image out of its own response shapes.
    """

    def __init__(self, url: str, timeout_seconds: float):
        self.url = url
        self.timeout_seconds = timeout_seconds

    @abstractmethod
    def build_payload(self, prompt: str) -> Dict[str, Any]:
        """Builds the JSON body sent to the provider."""
        pass

    @abstractmethod
    def extract_image(self, payload: Dict[str, Any]) -> Optional[str]:
        """
        Returns an image URL or data URL from the provider response,
        or None when no known response shape matches.
        """
        pass

    @abstractmethod
    def _get_auth_headers(self) -> Dict[str, str]:
        pass

    def generate_image(self, prompt: str) -> Optional[str]:
        """
        Blocking call to the provider. Raises UpstreamError on transport
        failures and non-success statuses.
        """
        try:
            response = requests.post(
                self.url,
                json=self.build_payload(prompt),
                headers={"Content-Type": "application/json", **self._get_auth_headers()},
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.Timeout as e:
            raise UpstreamError("Image request timed out", timeout_seconds=self.timeout_seconds) from e
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"Image request failed: {e}") from e

        if not response.ok:
            raise UpstreamError(
                f"Image request failed: {response.status_code} {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError:
            logger.warning("Image provider returned a non-JSON body.")
            return None
        if not isinstance(data, dict):
            return None
        return self.extract_image(data)

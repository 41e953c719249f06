"""PSA public API integration for cert images."""

from typing import Optional

from ..core.constants import PLACEHOLDER_IMAGE
from ..core.types import Credentials, ImagePair
from ..utils.config import settings
from ..utils.http import ApiClient


class PSAImageClient(ApiClient):
    """Fetch front/back scan URLs for a cert."""

    service = "images"

    def __init__(self, images_url: Optional[str] = None, timeout_s: Optional[float] = None):
        super().__init__(timeout_s)
        self.images_url = (images_url or settings.PSA_IMAGES_URL).rstrip("/")

    async def get_images(self, cert_number: str, credentials: Credentials) -> ImagePair:
        """Return the image pair; unexpected bodies degrade to placeholders."""
        headers = {
            "Authorization": f"Bearer {credentials.image_api_token or ''}",
            "Content-Type": "application/json",
        }
        status, data = await self._request_with_backoff(
            "GET", f"{self.images_url}/{cert_number}", headers, raise_for_status=False
        )

        if not isinstance(data, list):
            self.logger.warning(
                "Unexpected image response format",
                cert_number=cert_number, status=status, body_type=type(data).__name__
            )
            return ImagePair()

        front = next((img for img in data if isinstance(img, dict) and img.get("IsFrontImage") is True), None)
        back = next((img for img in data if isinstance(img, dict) and img.get("IsFrontImage") is False), None)

        return ImagePair(
            front_image_url=(front or {}).get("ImageURL") or PLACEHOLDER_IMAGE,
            back_image_url=(back or {}).get("ImageURL") or PLACEHOLDER_IMAGE,
        )

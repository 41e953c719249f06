"""CardLadder integration for cert valuation."""

from typing import Any, Dict, Optional

from ..core.constants import DEFAULT_CONDITION
from ..core.types import Credentials, Grader, ValuationResult
from ..utils.config import settings
from ..utils.http import ApiClient


def _result_of(body: Any) -> Dict[str, Any]:
    """Return the nested ``result`` object of a callable-function response."""
    if isinstance(body, dict) and isinstance(body.get("result"), dict):
        return body["result"]
    return {}


class CardLadderClient(ApiClient):
    """Two-step valuation: cert search for a gemRateId, then estimate by id."""

    service = "valuation"

    def __init__(
        self,
        search_url: Optional[str] = None,
        estimate_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ):
        super().__init__(timeout_s)
        self.search_url = search_url or settings.CARDLADDER_SEARCH_URL
        self.estimate_url = estimate_url or settings.CARDLADDER_ESTIMATE_URL

    @staticmethod
    def _headers(credentials: Credentials) -> Dict[str, str]:
        return {
            "accept": "*/*",
            "content-type": "application/json",
            "authorization": credentials.auth_token or "",
            "x-firebase-appcheck": credentials.app_check_token or "",
        }

    async def search(self, cert_number: str, grader: Grader, credentials: Credentials) -> Dict[str, Any]:
        payload = {"data": {"cert": cert_number, "grader": grader.value.lower()}}
        _, body = await self._request_with_backoff(
            "POST", self.search_url, self._headers(credentials), payload
        )
        return _result_of(body)

    async def estimate(
        self, gem_rate_id: str, grader: Grader, condition: str, credentials: Credentials
    ) -> Optional[Dict[str, Any]]:
        payload = {
            "data": {
                "gemRateId": gem_rate_id,
                "gradingCompany": grader.value.lower(),
                "condition": condition,
            }
        }
        _, body = await self._request_with_backoff(
            "POST", self.estimate_url, self._headers(credentials), payload
        )
        if isinstance(body, dict) and isinstance(body.get("result"), dict):
            return body["result"]
        return None

    async def get_valuation(
        self, cert_number: str, grader: Grader, credentials: Credentials
    ) -> Optional[ValuationResult]:
        """Value a cert, or return None when the service has no match for it."""
        context = self.log_start("valuation", cert_number=cert_number, grader=grader.value)

        found = await self.search(cert_number, grader, credentials)
        gem_rate_id = found.get("gemRateId")
        if not gem_rate_id:
            self.logger.info("No gemRateId found", cert_number=cert_number, grader=grader.value)
            return None
        condition = found.get("condition") or DEFAULT_CONDITION

        result = await self.estimate(gem_rate_id, grader, condition, credentials)
        if result is None:
            self.logger.info("No estimate returned", cert_number=cert_number, gem_rate_id=gem_rate_id)
            return None

        valuation = ValuationResult.from_api(result, gem_rate_id=gem_rate_id)
        self.log_success(context, gem_rate_id=gem_rate_id, estimated_value=valuation.estimated_value)
        return valuation

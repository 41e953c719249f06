from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Dict, Any

from .constants import PLACEHOLDER_IMAGE, PAYOUT_RATE


class Grader(str, Enum):
    PSA = "PSA"
    SGC = "SGC"
    BGS = "BGS"


@dataclass(frozen=True)
class CertRequest:
    grader: Grader
    cert_number: str


@dataclass
class ValuationResult:
    gem_rate_id: Optional[str] = None
    description: Optional[str] = None
    grade: Optional[str] = None
    estimated_value: Optional[float] = None
    confidence: Optional[Any] = None
    index: Optional[str] = None
    index_id: Optional[str] = None
    population: Optional[Any] = None
    index_percent_change: Optional[Any] = None
    last_sale_date: Optional[str] = None

    @classmethod
    def from_api(cls, result: Dict[str, Any], gem_rate_id: Optional[str] = None) -> "ValuationResult":
        """Build from the estimate endpoint's ``result`` object."""
        return cls(
            gem_rate_id=result.get("gemRateId", gem_rate_id),
            description=result.get("description"),
            grade=result.get("grade"),
            estimated_value=result.get("estimatedValue"),
            confidence=result.get("confidence"),
            index=result.get("index"),
            index_id=result.get("indexId"),
            population=result.get("population"),
            index_percent_change=result.get("indexPercentChange"),
            last_sale_date=result.get("lastSaleDate"),
        )


@dataclass
class ImagePair:
    front_image_url: str = PLACEHOLDER_IMAGE
    back_image_url: str = PLACEHOLDER_IMAGE


@dataclass(frozen=True)
class Credentials:
    auth_token: Optional[str] = None
    app_check_token: Optional[str] = None
    image_api_token: Optional[str] = None

    @property
    def has_valuation_tokens(self) -> bool:
        return bool(self.auth_token and self.app_check_token)


def compute_payout(estimated_value: Any) -> str:
    """90% of the estimate to two decimals, or "" when there is nothing to pay on."""
    if not estimated_value:
        return ""
    try:
        return f"{float(estimated_value) * PAYOUT_RATE:.2f}"
    except (TypeError, ValueError):
        return ""


@dataclass
class LedgerRow:
    cert: CertRequest
    valuation: ValuationResult
    images: ImagePair = field(default_factory=ImagePair)

    @property
    def payout(self) -> str:
        return compute_payout(self.valuation.estimated_value)

    def as_dict(self) -> Dict[str, Any]:
        """Flatten into ledger column keys; None becomes an empty cell."""
        values = asdict(self.valuation)
        values.pop("gem_rate_id", None)
        values.update(asdict(self.images))
        values["cert_number"] = self.cert.cert_number
        values["grader"] = self.cert.grader.value
        values["payout"] = self.payout
        return {k: ("" if v is None else v) for k, v in values.items()}

from typing import Final, List, Tuple

# Ledger columns as (row key, header title), in file order
LEDGER_COLUMNS: Final[List[Tuple[str, str]]] = [
    ("cert_number", "Cert Number"),
    ("estimated_value", "Estimated Value"),
    ("payout", "Payout"),
    ("last_sale_date", "Last Sale Date"),
    ("confidence", "Confidence"),
    ("grader", "Grader"),
    ("index", "Index"),
    ("index_id", "Index ID"),
    ("description", "Description"),
    ("grade", "Grade"),
    ("population", "Population"),
    ("index_percent_change", "Index % Change"),
    ("front_image_url", "Front Image URL"),
    ("back_image_url", "Back Image URL"),
]
LEDGER_HEADER: Final[List[str]] = [title for _, title in LEDGER_COLUMNS]
LEDGER_PREFIX: Final[str] = "SCAN_"

PLACEHOLDER_IMAGE: Final[str] = "./No-Image-Placeholder.svg.png"

PAYOUT_RATE: Final[float] = 0.90
DEFAULT_CONDITION: Final[str] = "g10"
MIN_CERT_DIGITS: Final[int] = 6

PROGRESS_BAR_WIDTH: Final[int] = 30

RETRYABLE_STATUS: Final[Tuple[int, ...]] = (429, 500, 502, 503, 504)
BACKOFF_S = [0.2, 1.0, 3.0]

# Browser login capture
SIGN_IN_URL_FRAGMENT: Final[str] = "identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"
SEARCH_URL_FRAGMENT: Final[str] = "search-zzvl7ri3bq-uc.a.run.app/search"
BROWSER_USER_AGENT: Final[str] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)
BROWSER_VIEWPORT = {"width": 1366, "height": 768}
INPUT_DELAY_S: Final[float] = 1.0
LOGIN_SETTLE_S: Final[float] = 10.0
SELECTOR_TIMEOUT_MS: Final[int] = 10000

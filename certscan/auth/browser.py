"""Token capture by driving a real CardLadder login in Chromium.

The login page is watched for two outgoing requests: the identity
provider's password sign-in, which carries the app-check token, and the
first valuation search after login, which carries the bearer token. Both
headers are lifted straight off the wire, so nothing here depends on how
the web app stores its session.
"""

import asyncio
import dataclasses
from typing import Dict, Optional

from playwright.async_api import async_playwright

from ..core.constants import (
    BROWSER_USER_AGENT,
    BROWSER_VIEWPORT,
    INPUT_DELAY_S,
    LOGIN_SETTLE_S,
    SEARCH_URL_FRAGMENT,
    SELECTOR_TIMEOUT_MS,
    SIGN_IN_URL_FRAGMENT,
)
from ..core.types import Credentials
from ..utils.config import Settings, settings as default_settings
from ..utils.error_handler import ErrorContext, TokenRefreshError, validate_required_fields
from ..utils.log import LoggerMixin
from .tokens import IMAGES, Prompt, StaticTokenProvider, TokenProvider

STEALTH_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
window.chrome = { runtime: {} };
"""

EMAIL_SELECTOR = "#email"
PASSWORD_SELECTOR = "#password"
SUBMIT_SELECTOR = "button.btn.primary.block"


class TokenCapture(LoggerMixin):
    """Request observer that records each token the first time it is seen."""

    def __init__(self):
        self.tokens: Dict[str, str] = {}
        self._complete = asyncio.Event()

    @property
    def complete(self) -> bool:
        return self._complete.is_set()

    async def observe(self, request) -> None:
        """Playwright ``request`` event handler."""
        if request.method == "OPTIONS":
            return

        url = request.url
        if SIGN_IN_URL_FRAGMENT not in url and SEARCH_URL_FRAGMENT not in url:
            return
        headers = await request.all_headers()

        if SIGN_IN_URL_FRAGMENT in url and "app_check" not in self.tokens:
            app_check = headers.get("x-firebase-appcheck")
            if app_check:
                self.tokens["app_check"] = app_check
                self.logger.info("Captured app-check token")

        if SEARCH_URL_FRAGMENT in url and "authorization" not in self.tokens:
            authorization = headers.get("authorization")
            if authorization:
                self.tokens["authorization"] = authorization
                self.logger.info("Captured authorization token")

        if "app_check" in self.tokens and "authorization" in self.tokens:
            self._complete.set()

    async def wait(self, timeout_s: float) -> Dict[str, str]:
        """Block until both tokens are in, or raise TokenRefreshError."""
        try:
            await asyncio.wait_for(self._complete.wait(), timeout=timeout_s)
        except asyncio.TimeoutError as e:
            raise TokenRefreshError(
                "Timed out waiting for login tokens",
                details={"captured": sorted(self.tokens), "timeout_s": timeout_s},
            ) from e
        return dict(self.tokens)


class BrowserLogin(LoggerMixin):
    """Fill and submit the login form until the app lets us past it."""

    def __init__(self, email: str, password: str, max_attempts: int = 0,
                 input_delay_s: float = INPUT_DELAY_S, settle_s: float = LOGIN_SETTLE_S):
        self.email = email
        self.password = password
        self.max_attempts = max_attempts
        self.input_delay_s = input_delay_s
        self.settle_s = settle_s

    async def perform(self, page) -> int:
        """Log in on an already-open login page; returns attempts used.

        A rejected login leaves the page on the login URL; the page is
        reloaded and the form filled again. ``max_attempts`` of 0 never
        gives up.
        """
        attempt = 0
        while True:
            attempt += 1
            await page.wait_for_selector(EMAIL_SELECTOR, timeout=SELECTOR_TIMEOUT_MS)

            await asyncio.sleep(self.input_delay_s)
            await page.type(EMAIL_SELECTOR, self.email)
            await asyncio.sleep(self.input_delay_s)
            await page.type(PASSWORD_SELECTOR, self.password)
            await asyncio.sleep(self.input_delay_s)
            await page.click(SUBMIT_SELECTOR)
            self.logger.info("Login submitted", attempt=attempt)

            await asyncio.sleep(self.settle_s)

            if "login" not in page.url:
                self.logger.info("Login accepted", attempt=attempt, url=page.url)
                return attempt

            if self.max_attempts and attempt >= self.max_attempts:
                raise TokenRefreshError(
                    "Login rejected", details={"attempts": attempt}
                )

            self.logger.warning("Login rejected, reloading", attempt=attempt)
            await page.reload(wait_until="networkidle")


class BrowserTokenProvider(TokenProvider):
    """Acquire valuation tokens from a scripted browser login.

    The PSA image token cannot be captured this way, so image expiry
    falls back to manual re-entry.
    """

    def __init__(self, config: Optional[Settings] = None, prompt: Optional[Prompt] = None):
        self.config = config or default_settings
        self.manual = StaticTokenProvider(config=self.config, prompt=prompt)

    def _login(self) -> BrowserLogin:
        validate_required_fields(
            {
                "CARDLADDER_EMAIL": self.config.CARDLADDER_EMAIL,
                "CARDLADDER_PASSWORD": self.config.CARDLADDER_PASSWORD,
            },
            ["CARDLADDER_EMAIL", "CARDLADDER_PASSWORD"],
            ErrorContext(operation="browser login", module=__name__, function="_login"),
        )
        return BrowserLogin(
            self.config.CARDLADDER_EMAIL,
            self.config.CARDLADDER_PASSWORD,
            max_attempts=self.config.LOGIN_MAX_ATTEMPTS,
        )

    async def capture(self) -> Dict[str, str]:
        """Run one login and return {"authorization", "app_check"}."""
        login = self._login()
        capture = TokenCapture()
        context = self.log_start("browser token capture", url=self.config.CARDLADDER_LOGIN_URL)

        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=self.config.BROWSER_HEADLESS)
            try:
                browser_context = await browser.new_context(
                    viewport=BROWSER_VIEWPORT,
                    device_scale_factor=1,
                    is_mobile=False,
                    has_touch=False,
                    user_agent=BROWSER_USER_AGENT,
                    locale="en-US",
                )
                await browser_context.add_init_script(STEALTH_SCRIPT)
                page = await browser_context.new_page()
                page.on("request", capture.observe)

                await page.goto(self.config.CARDLADDER_LOGIN_URL, wait_until="networkidle")
                await login.perform(page)
                tokens = await capture.wait(self.config.TOKEN_CAPTURE_TIMEOUT_S)
            except Exception as e:
                self.log_error(context, e)
                raise
            finally:
                await browser.close()

        self.log_success(context)
        return tokens

    async def load(self) -> Credentials:
        static = await self.manual.load()
        if static.has_valuation_tokens:
            return static
        tokens = await self.capture()
        return dataclasses.replace(
            static, auth_token=tokens["authorization"], app_check_token=tokens["app_check"]
        )

    async def refresh(self, current: Credentials, service: str) -> Credentials:
        if service == IMAGES:
            return await self.manual.refresh(current, service)
        tokens = await self.capture()
        return dataclasses.replace(
            current, auth_token=tokens["authorization"], app_check_token=tokens["app_check"]
        )

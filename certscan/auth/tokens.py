"""Credential sources and the shared credentials context."""

import asyncio
import dataclasses
from pathlib import Path
from typing import Callable, Optional

from dotenv import set_key
from rich.console import Console

from ..core.types import Credentials
from ..ui.prompt import ask
from ..utils.config import Settings, settings as default_settings
from ..utils.error_handler import CertScanError, TokenRefreshError
from ..utils.log import LoggerMixin

Prompt = Callable[[str], str]

IMAGES = "images"


def console_prompt(console: Optional[Console] = None) -> Prompt:
    """Build a prompt callable that reads a line from the terminal."""
    console = console or Console()
    return lambda question: console.input(question)


class TokenProvider(LoggerMixin):
    """Interface for anything that can produce a Credentials set."""

    async def load(self) -> Credentials:
        raise NotImplementedError

    async def refresh(self, current: Credentials, service: str) -> Credentials:
        raise NotImplementedError


class StaticTokenProvider(TokenProvider):
    """Tokens come from settings; expiry is fixed by pasting new ones.

    Pasted tokens are written back into the env file so the next run
    starts with them.
    """

    def __init__(self, config: Optional[Settings] = None, prompt: Optional[Prompt] = None,
                 env_file: Optional[str] = None):
        self.config = config or default_settings
        self.prompt = prompt or console_prompt()
        self.env_file = Path(env_file or self.config.ENV_FILE)

    async def load(self) -> Credentials:
        return Credentials(
            auth_token=self.config.CARDLADDER_AUTHORIZATION,
            app_check_token=self.config.CARDLADDER_APP_CHECK,
            image_api_token=self.config.PSA_API_TOKEN,
        )

    async def _ask(self, question: str) -> str:
        answer = (await ask(self.prompt, question) or "").strip()
        if not answer:
            raise TokenRefreshError("No token entered", details={"prompt": question.strip()})
        return answer

    def persist(self, **values: str) -> None:
        self.env_file.touch(exist_ok=True)
        for key, value in values.items():
            set_key(str(self.env_file), key, value, quote_mode="never")
        self.logger.info("Env file updated", env_file=str(self.env_file), keys=sorted(values))

    async def refresh(self, current: Credentials, service: str) -> Credentials:
        if service == IMAGES:
            token = await self._ask("Paste new PSA_API_TOKEN: ")
            self.persist(PSA_API_TOKEN=token)
            return dataclasses.replace(current, image_api_token=token)

        authorization = await self._ask("Paste new CARDLADDER_AUTHORIZATION token: ")
        app_check = await self._ask("Paste new CARDLADDER_APP_CHECK token: ")
        self.persist(CARDLADDER_AUTHORIZATION=authorization, CARDLADDER_APP_CHECK=app_check)
        return dataclasses.replace(current, auth_token=authorization, app_check_token=app_check)


class CredentialsContext(LoggerMixin):
    """The one mutable home for credentials during a session.

    Clients receive ``context.current`` on every call. Refreshes go
    through a lock so only one acquisition runs at a time, and the frozen
    Credentials object is swapped in one assignment.
    """

    def __init__(self, provider: TokenProvider, credentials: Optional[Credentials] = None):
        self.provider = provider
        self._credentials = credentials
        self._lock = asyncio.Lock()
        self.refresh_count = 0

    @property
    def current(self) -> Credentials:
        if self._credentials is None:
            raise TokenRefreshError("Credentials have not been loaded")
        return self._credentials

    async def load(self) -> Credentials:
        async with self._lock:
            if self._credentials is None:
                try:
                    self._credentials = await self.provider.load()
                except CertScanError:
                    raise
                except Exception as e:
                    raise TokenRefreshError(f"Could not load credentials: {e}") from e
            return self._credentials

    async def refresh(self, service: str) -> Credentials:
        async with self._lock:
            context = self.log_start("credential refresh", service=service)
            try:
                fresh = await self.provider.refresh(self._credentials or Credentials(), service)
            except TokenRefreshError as e:
                self.log_error(context, e)
                raise
            except Exception as e:
                self.log_error(context, e)
                raise TokenRefreshError(f"Could not refresh {service} credentials: {e}") from e
            self._credentials = fresh
            self.refresh_count += 1
            self.log_success(context)
            return fresh


def build_token_provider(config: Optional[Settings] = None, prompt: Optional[Prompt] = None) -> TokenProvider:
    """Pick the provider named by TOKEN_SOURCE."""
    config = config or default_settings
    if config.TOKEN_SOURCE == "browser":
        from .browser import BrowserTokenProvider
        return BrowserTokenProvider(config=config, prompt=prompt)
    return StaticTokenProvider(config=config, prompt=prompt)

"""
Registration flow for a license server.

Drives the fixed call sequence:
1. GET the license server welcome page (retried until the server is up)
2. Extract the sign-in link and GET the account service authorization page
3. Extract the login form action and POST the credentials to it
4. Extract the registration form action, customer ID and server UID
5. Build the registration callback URL
6. Poll the callback until the account service answers (retried)

Each extracted value is recorded once in a FlowState and feeds the next
request. Scrape failures are fatal. Steps 1 and 6 retry only while the
connection itself fails; once a server answers, any non-2xx status (a 503
included) ends the flow with UnexpectedResponseError.
"""

from __future__ import annotations

import time
import urllib.parse
from collections.abc import Callable

from ...core.di import resolve_or_default
from ...core.exceptions import FetchError, RetryExhaustedError, UnexpectedResponseError
from ...core.interfaces.fetcher import FetchResult, IPageFetcher
from ...core.interfaces.logger import ILogger
from ...core.models.flow import FlowStage, FlowState
from ...core.models.registration import (
    Credentials,
    FlowConfig,
    RegistrationTarget,
    ServerIdentity,
)
from ..extraction import AUTHORIZE_PAGE, WELCOME_PAGE, Extractor, PageShape, registration_data_page
from ..retry import ConnectRetrier

# Characters left unescaped in callback query values so the originating
# server URL reads literally (url=http://host:port)
CALLBACK_SAFE_CHARS = ":/"


def build_callback_url(registration_url: str, target: RegistrationTarget) -> str:
    """Build <registration_url>?customer=..&url=..&server_uid=.. in that order."""
    query = urllib.parse.urlencode(
        [
            ("customer", target.customer_id),
            ("url", target.server_url),
            ("server_uid", target.server_uid),
        ],
        safe=CALLBACK_SAFE_CHARS,
    )
    base = registration_url.split("#", 1)[0]
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{query}"


class RegistrationFlow:
    """
    One-shot registration of a license server with the account service.

    Follows constructor injection: the fetcher, retrier and extractor can all
    be replaced, and FlowConfig carries the registration host and the retry
    budget so tests never touch shared state.
    """

    def __init__(
        self,
        config: FlowConfig | None = None,
        fetcher: IPageFetcher | None = None,
        retrier: ConnectRetrier | None = None,
        extractor: Extractor | None = None,
        logger: ILogger | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the flow.

        Args:
            config: Registration host and retry budget (production defaults when omitted)
            fetcher: Page fetcher. If None, resolves from DI container.
            retrier: Retry loop. If None, one is built around fetcher and config.retry.
            extractor: Extractor for page values
            logger: Logger instance. If None, resolves from DI container.
            sleep: Blocking wait used by the default retrier
        """
        from ...http_client import PageFetcher
        from ..logging import NullLogger

        self.config = config or FlowConfig()
        self._logger = logger or resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]
        self._fetcher = fetcher or resolve_or_default(IPageFetcher, PageFetcher)  # type: ignore[type-abstract]
        self._retrier = retrier or ConnectRetrier(
            self._fetcher, budget=self.config.retry, sleep=sleep, logger=self._logger
        )
        self._extractor = extractor or Extractor()
        self.state = FlowState()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _resolve_on_host(self, link: str) -> str:
        return urllib.parse.urljoin(self.config.registration_host + "/", link)

    def _check_status(self, stage: FlowStage, result: FetchResult) -> str:
        if not result.is_success:
            raise UnexpectedResponseError(
                f"Unexpected response at stage {stage.value}: HTTP {result.status}",
                stage=stage.value,
                url=result.url,
                status_code=result.status,
            )
        return result.body

    def _fetch(
        self,
        stage: FlowStage,
        method: str,
        url: str,
        form_values: dict[str, str] | None = None,
    ) -> str:
        """Single, non-retried request for a scrape stage."""
        result = self._fetcher.fetch(method, url, form_values)
        if not result.ok:
            raise FetchError(
                f"Request failed at stage {stage.value}: {result.error}",
                url=url,
                stage=stage.value,
            )
        return self._check_status(stage, result)

    def _retry_get(self, stage: FlowStage, url: str) -> str:
        try:
            result = self._retrier.retry_get(url)
        except RetryExhaustedError as e:
            raise RetryExhaustedError(
                f"{e.message} at stage {stage.value}",
                url=e.url,
                attempts=e.attempts,
                stage=stage.value,
                last_error=e.last_error,
                cause=e,
            ) from e
        return self._check_status(stage, result)

    def _extract(self, stage: FlowStage, shape: PageShape, body: str) -> dict[str, str]:
        values, missing = self._extractor.extract_page(shape, body)
        if missing:
            expected = ", ".join(shape.pattern(name).describe() for name in missing)
            raise UnexpectedResponseError(
                f"Unexpected response at stage {stage.value}: "
                f"{shape.name} page has no {expected}",
                stage=stage.value,
                missing=", ".join(missing),
            )
        return values

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def open_server_site(self, server_url: str) -> str:
        """Wait for the license server to come up and return its welcome page."""
        self._logger.info("Waiting for license server at %s", server_url)
        return self._retry_get(FlowStage.FETCHED_WELCOME, server_url)

    def _fetch_welcome(self, server: ServerIdentity) -> None:
        body = self.open_server_site(server.server_url)
        values = self._extract(FlowStage.FETCHED_WELCOME, WELCOME_PAGE, body)
        auth_link = urllib.parse.urljoin(server.server_url + "/", values["auth_link"])
        self.state.record("auth_link", auth_link)
        self.state.advance(FlowStage.FETCHED_WELCOME)
        self._logger.debug("Authorization link: %s", auth_link)

    def _fetch_auth_page(self) -> None:
        stage = FlowStage.FETCHED_AUTH_PAGE
        body = self._fetch(stage, "GET", self.state.require("auth_link"))
        values = self._extract(stage, AUTHORIZE_PAGE, body)
        login_url = self._resolve_on_host(values["login_action"])
        self.state.record("login_url", login_url)
        self.state.advance(stage)
        self._logger.debug("Login form posts to %s", login_url)

    def _submit_credentials(self, credentials: Credentials) -> str:
        stage = FlowStage.SUBMITTED_CREDENTIALS
        self._logger.redact(credentials.password)
        self._logger.info("Signing in as %s", credentials.username)
        body = self._fetch(
            stage, "POST", self.state.require("login_url"), credentials.form_values()
        )
        self.state.advance(stage)
        return body

    def _read_registration_data(self, server: ServerIdentity, body: str) -> None:
        stage = FlowStage.RECEIVED_REGISTRATION_DATA
        values = self._extract(stage, registration_data_page(server.server_name), body)
        self.state.record("registration_url", self._resolve_on_host(values["registration_action"]))
        self.state.record(
            "target",
            RegistrationTarget(
                server_url=server.server_url,
                customer_id=values["customer_id"],
                server_uid=values["server_uid"],
            ),
        )
        self.state.advance(stage)
        self._logger.debug(
            "Server %r has UID %s (customer %s)",
            server.server_name,
            values["server_uid"],
            values["customer_id"],
        )

    def _build_callback(self) -> None:
        callback_url = build_callback_url(
            self.state.require("registration_url"), self.state.require("target")
        )
        self.state.record("callback_url", callback_url)
        self.state.advance(FlowStage.BUILT_CALLBACK_URL)

    def _confirm(self) -> None:
        stage = FlowStage.CONFIRMED
        callback_url = self.state.require("callback_url")
        self._logger.info("Confirming registration via %s", callback_url)
        self._retry_get(stage, callback_url)
        self.state.advance(stage)

    def run(self, credentials: Credentials, server: ServerIdentity) -> FlowState:
        """
        Run the whole flow.

        Returns:
            The final FlowState (stage CONFIRMED)

        Raises:
            RetryExhaustedError: The license server or callback never answered
            FetchError: A scrape-stage request could not be sent
            UnexpectedResponseError: A page lacked an expected value or had a non-2xx status
        """
        self._fetch_welcome(server)
        self._fetch_auth_page()
        body = self._submit_credentials(credentials)
        self._read_registration_data(server, body)
        self._build_callback()
        self._confirm()
        self._logger.info("Registered %s with %s", server.server_url, self.config.registration_host)
        return self.state

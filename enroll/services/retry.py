"""
Bounded retry loop for GET requests against a server that may not be up yet.

Used to wait for the license server to start and to poll the registration
callback until the account service confirms it. Only network failures are
retried; any HTTP response ends the loop.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from ..core.di import resolve_or_default
from ..core.exceptions import RetryExhaustedError
from ..core.interfaces.fetcher import FetchResult, IPageFetcher
from ..core.interfaces.logger import ILogger
from ..core.models.registration import RetryBudget


class ConnectRetrier:
    """
    Retries a GET up to budget.max_attempts times with a fixed pause.

    The pause is a blocking sleep between failed attempts; there is no pause
    after the final attempt and no cancellation once the loop has started.
    """

    def __init__(
        self,
        fetcher: IPageFetcher,
        budget: RetryBudget | None = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: ILogger | None = None,
    ):
        """
        Args:
            fetcher: Page fetcher used for every attempt
            budget: Default retry budget (production default when omitted)
            sleep: Blocking wait between attempts (injectable for tests)
            logger: Logger instance. If None, resolves from DI container.
        """
        self._fetcher = fetcher
        self.budget = budget or RetryBudget()
        self._sleep = sleep
        from .logging import NullLogger

        self._logger = logger or resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]

    def retry_get(self, url: str, budget: RetryBudget | None = None) -> FetchResult:
        """
        GET url until it answers or the budget runs out.

        Returns:
            The first FetchResult with ok=True; no further attempts are made.

        Raises:
            RetryExhaustedError: If every attempt failed at the network level
        """
        budget = budget or self.budget
        last: FetchResult | None = None

        for attempt in range(1, budget.max_attempts + 1):
            result = self._fetcher.fetch("GET", url)
            if result.ok:
                if attempt > 1:
                    self._logger.info("%s answered after %d attempts", url, attempt)
                return result

            last = result
            self._logger.debug(
                "[%d/%d] Waiting for %s ... (%s)",
                attempt,
                budget.max_attempts,
                url,
                result.error,
            )
            if attempt < budget.max_attempts:
                self._sleep(budget.delay)

        self._logger.warning("Giving up on %s after %d attempts", url, budget.max_attempts)
        raise RetryExhaustedError(
            f"Server unreachable after {budget.max_attempts} attempts",
            url=url,
            attempts=budget.max_attempts,
            last_error=last.error if last else None,
        )

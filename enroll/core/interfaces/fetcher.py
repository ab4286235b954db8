"""
Page fetcher interface.

The registration flow and ConnectRetrier only depend on this interface, so
tests can script responses without a network.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one HTTP round trip.

    ok is False only for network-level failures (nothing was received). Any
    HTTP response, whatever its status, is ok=True; callers inspect status.
    """

    ok: bool
    body: str = ""
    status: int | None = None
    url: str = ""
    error: str | None = None

    @property
    def is_success(self) -> bool:
        """True for a 2xx response."""
        return self.ok and self.status is not None and 200 <= self.status < 300


class IPageFetcher(ABC):
    """Issues a single GET or POST and returns the response body as text."""

    @abstractmethod
    def fetch(
        self,
        method: str,
        url: str,
        form_values: dict[str, str] | None = None,
    ) -> FetchResult:
        """
        Perform exactly one request.

        Args:
            method: "GET" or "POST"
            url: Absolute URL
            form_values: Fields sent as an URL-encoded form body (POST only)

        Returns:
            FetchResult; never raises for network failures.
        """
        pass

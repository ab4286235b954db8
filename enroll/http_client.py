"""HTTP page fetcher for talking to the license server and the account service."""

import http.client
import urllib.error
import urllib.parse
import urllib.request
from http.cookiejar import CookieJar

from .core.interfaces.fetcher import FetchResult, IPageFetcher
from .core.interfaces.logger import ILogger

DEFAULT_TIMEOUT = 30.0
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def _get_logger() -> ILogger:
    from .core.di import resolve_or_default
    from .services.logging import NullLogger

    return resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]


def _decode_body(raw: bytes, charset: str | None) -> str:
    try:
        return raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        # Unknown charset announced by the server
        return raw.decode("utf-8", errors="replace")


class PageFetcher(IPageFetcher):
    """Fetches pages with urllib, one connection per call.

    Cookies set by any response are kept in a per-instance jar and sent with
    later requests, so the session established by the credentials POST
    carries over to the registration callback.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str | None = None,
        cookie_jar: CookieJar | None = None,
        logger: ILogger | None = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self.cookie_jar = cookie_jar if cookie_jar is not None else CookieJar()
        self._opener = urllib.request.build_opener(
            urllib.request.HTTPCookieProcessor(self.cookie_jar)
        )
        self._logger = logger

    @property
    def logger(self) -> ILogger:
        if self._logger is None:
            self._logger = _get_logger()
        return self._logger

    def _build_request(
        self,
        method: str,
        url: str,
        form_values: dict[str, str] | None,
    ) -> urllib.request.Request:
        method = method.upper()
        if method not in ("GET", "POST"):
            raise ValueError(f"Unsupported method: {method}")

        data = None
        if method == "POST":
            data = urllib.parse.urlencode(form_values or {}).encode()

        req = urllib.request.Request(url, data=data, method=method)
        if data is not None:
            req.add_header("Content-Type", FORM_CONTENT_TYPE)
        if self.user_agent:
            req.add_header("User-Agent", self.user_agent)
        return req

    def fetch(
        self,
        method: str,
        url: str,
        form_values: dict[str, str] | None = None,
    ) -> FetchResult:
        """Perform one request. Returns ok=False only when nothing was received."""
        req = self._build_request(method, url, form_values)

        self.logger.debug("HTTP request: %s %s", req.get_method(), url)

        try:
            with self._opener.open(req, timeout=self.timeout) as resp:
                body = _decode_body(resp.read(), resp.headers.get_content_charset())
                self.logger.debug(
                    "HTTP response: %s %s -> HTTP %d (%d bytes)",
                    req.get_method(),
                    url,
                    resp.status,
                    len(body),
                )
                return FetchResult(ok=True, body=body, status=resp.status, url=resp.geturl())
        except urllib.error.HTTPError as e:
            # A response with an error status is still a response
            raw = e.read() if e.fp else b""
            body = _decode_body(raw, e.headers.get_content_charset() if e.headers else None)
            self.logger.debug("HTTP response: %s %s -> HTTP %d", req.get_method(), url, e.code)
            return FetchResult(ok=True, body=body, status=e.code, url=e.geturl() or url)
        except urllib.error.URLError as e:
            self.logger.debug("Connection error to %s: %s", url, e.reason)
            return FetchResult(ok=False, url=url, error=f"Connection error: {e.reason}")
        except (http.client.HTTPException, OSError) as e:
            # Timeouts and dropped connections
            self.logger.debug("Request to %s failed: %s", url, e)
            return FetchResult(ok=False, url=url, error=f"{type(e).__name__}: {e}")

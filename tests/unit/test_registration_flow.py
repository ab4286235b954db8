"""
Unit tests for RegistrationFlow.

Drives the flow with a scripted fetcher so every request, its order and
each failure stage can be checked without a network.
"""

from unittest.mock import MagicMock, call

import pytest

from enroll.core.exceptions import (
    FetchError,
    FlowStateError,
    RetryExhaustedError,
    UnexpectedResponseError,
)
from enroll.core.interfaces.fetcher import FetchResult, IPageFetcher
from enroll.core.models.flow import FlowStage
from enroll.core.models.registration import (
    DEFAULT_REGISTRATION_HOST,
    Credentials,
    FlowConfig,
    RegistrationTarget,
    RetryBudget,
    ServerIdentity,
)
from enroll.http_client import PageFetcher
from enroll.services.registration import RegistrationFlow
from enroll.services.registration.flow import build_callback_url

SERVER_URL = "http://127.0.0.1:8111"
HOST = "http://account.test"
AUTH_URL = f"{HOST}/auth"
LOGIN_URL = f"{HOST}/authorize"
CALLBACK_URL = (
    f"{HOST}/server-registration"
    f"?customer=XYZcustomer&url={SERVER_URL}&server_uid=XYZserver"
)


def ok(body="", status=200, url=""):
    return FetchResult(ok=True, body=body, status=status, url=url)


def refused(url=""):
    return FetchResult(ok=False, url=url, error="Connection error: [Errno 111] Connection refused")


class ScriptedFetcher(IPageFetcher):
    """Answers (method, url) pairs from a script; the last entry repeats."""

    def __init__(self, script):
        self.script = {key: list(value) for key, value in script.items()}
        self.calls = []

    def fetch(self, method, url, form_values=None):
        self.calls.append((method, url, form_values))
        responses = self.script.get((method, url))
        if not responses:
            return refused(url)
        if len(responses) > 1:
            return responses.pop(0)
        return responses[0]


@pytest.fixture
def pages(load_page):
    return {
        "welcome": load_page("welcome.html") % AUTH_URL,
        "authorize": load_page("authorize.html"),
        "registration_data": load_page("registrationData.html") % "SERVER_NAME",
    }


@pytest.fixture
def script(pages):
    return {
        ("GET", SERVER_URL): [ok(pages["welcome"])],
        ("GET", AUTH_URL): [ok(pages["authorize"])],
        ("POST", LOGIN_URL): [ok(pages["registration_data"])],
        ("GET", CALLBACK_URL): [ok("registered")],
    }


@pytest.fixture
def credentials():
    return Credentials(username="me@example.com", password="s3cret")


@pytest.fixture
def server():
    return ServerIdentity(server_url=SERVER_URL, server_name="SERVER_NAME")


@pytest.fixture
def sleep():
    return MagicMock()


@pytest.fixture
def make_flow(sleep):
    def _make(script, max_attempts=3, delay=0.5):
        fetcher = ScriptedFetcher(script)
        config = FlowConfig(
            registration_host=HOST,
            retry=RetryBudget(max_attempts=max_attempts, delay=delay),
        )
        return RegistrationFlow(config=config, fetcher=fetcher, sleep=sleep), fetcher

    return _make


class TestHappyPath:
    def test_requests_in_order(self, make_flow, script, credentials, server):
        flow, fetcher = make_flow(script)

        flow.run(credentials, server)

        assert fetcher.calls == [
            ("GET", SERVER_URL, None),
            ("GET", AUTH_URL, None),
            ("POST", LOGIN_URL, {"username": "me@example.com", "password": "s3cret"}),
            ("GET", CALLBACK_URL, None),
        ]

    def test_final_state(self, make_flow, script, credentials, server):
        flow, _ = make_flow(script)

        state = flow.run(credentials, server)

        assert state.stage is FlowStage.CONFIRMED
        assert state.auth_link == AUTH_URL
        assert state.login_url == LOGIN_URL
        assert state.registration_url == f"{HOST}/server-registration"
        assert state.target == RegistrationTarget(
            server_url=SERVER_URL, customer_id="XYZcustomer", server_uid="XYZserver"
        )
        assert state.callback_url == CALLBACK_URL

    def test_server_comes_up_late(self, make_flow, script, credentials, server, sleep):
        script[("GET", SERVER_URL)] = [refused(), refused(), script[("GET", SERVER_URL)][0]]
        flow, fetcher = make_flow(script, max_attempts=3, delay=0.5)

        flow.run(credentials, server)

        assert fetcher.calls.count(("GET", SERVER_URL, None)) == 3
        assert sleep.call_args_list == [call(0.5), call(0.5)]

    def test_callback_polled_until_it_answers(self, make_flow, script, credentials, server):
        script[("GET", CALLBACK_URL)] = [refused(), ok("registered")]
        flow, fetcher = make_flow(script)

        assert flow.run(credentials, server).stage is FlowStage.CONFIRMED
        assert fetcher.calls.count(("GET", CALLBACK_URL, None)) == 2

    def test_relative_auth_link_resolves_against_server(
        self, make_flow, script, pages, load_page, credentials, server
    ):
        local_auth = f"{SERVER_URL}/auth"
        script[("GET", SERVER_URL)] = [ok(load_page("welcome.html") % "/auth")]
        script[("GET", local_auth)] = script.pop(("GET", AUTH_URL))
        flow, _ = make_flow(script)

        assert flow.run(credentials, server).auth_link == local_auth

    def test_uses_server_name_to_pick_uid(self, make_flow, script, pages, credentials):
        staging_callback = CALLBACK_URL.replace("XYZserver", "OTHERserver")
        script[("GET", staging_callback)] = [ok("registered")]
        flow, _ = make_flow(script)

        state = flow.run(
            credentials, ServerIdentity(server_url=SERVER_URL, server_name="Staging server")
        )

        assert state.target.server_uid == "OTHERserver"
        assert state.callback_url == staging_callback


class TestFailureStages:
    def test_server_never_comes_up(self, make_flow, credentials, server, sleep):
        flow, fetcher = make_flow({}, max_attempts=4, delay=0.25)

        with pytest.raises(RetryExhaustedError) as exc_info:
            flow.run(credentials, server)

        err = exc_info.value
        assert err.stage == "fetched_welcome"
        assert err.attempts == 4
        assert "at stage fetched_welcome" in str(err)
        assert len(fetcher.calls) == 4
        assert sleep.call_count == 3
        assert flow.state.stage is FlowStage.START

    def test_welcome_without_register_link(self, make_flow, script, credentials, server):
        script[("GET", SERVER_URL)] = [ok("<html>already registered</html>")]
        flow, fetcher = make_flow(script)

        with pytest.raises(UnexpectedResponseError) as exc_info:
            flow.run(credentials, server)

        err = exc_info.value
        assert err.stage == "fetched_welcome"
        assert err.missing == "auth_link"
        assert 'welcome page has no <a id="register-link"> @href' in str(err)
        assert len(fetcher.calls) == 1

    def test_welcome_error_status(self, make_flow, script, credentials, server):
        script[("GET", SERVER_URL)] = [ok("starting up", status=503, url=SERVER_URL)]
        flow, fetcher = make_flow(script)

        with pytest.raises(UnexpectedResponseError) as exc_info:
            flow.run(credentials, server)

        assert exc_info.value.status_code == 503
        assert exc_info.value.stage == "fetched_welcome"
        assert len(fetcher.calls) == 1

    def test_auth_page_unreachable_is_not_retried(self, make_flow, script, credentials, server):
        del script[("GET", AUTH_URL)]
        flow, fetcher = make_flow(script)

        with pytest.raises(FetchError) as exc_info:
            flow.run(credentials, server)

        assert exc_info.value.stage == "fetched_auth_page"
        assert exc_info.value.url == AUTH_URL
        assert fetcher.calls.count(("GET", AUTH_URL, None)) == 1
        assert flow.state.stage is FlowStage.FETCHED_WELCOME

    def test_auth_page_without_login_form(self, make_flow, script, credentials, server):
        script[("GET", AUTH_URL)] = [ok("<form id='other' action='/x'></form>")]
        flow, _ = make_flow(script)

        with pytest.raises(UnexpectedResponseError) as exc_info:
            flow.run(credentials, server)

        assert exc_info.value.stage == "fetched_auth_page"
        assert exc_info.value.missing == "login_action"

    def test_rejected_credentials(self, make_flow, script, credentials, server):
        script[("POST", LOGIN_URL)] = [ok("Invalid credentials", status=401)]
        flow, fetcher = make_flow(script)

        with pytest.raises(UnexpectedResponseError) as exc_info:
            flow.run(credentials, server)

        assert exc_info.value.stage == "submitted_credentials"
        assert exc_info.value.status_code == 401
        assert fetcher.calls[-1][0] == "POST"

    def test_unknown_server_name(self, make_flow, script, credentials):
        flow, fetcher = make_flow(script)

        with pytest.raises(UnexpectedResponseError) as exc_info:
            flow.run(credentials, ServerIdentity(server_url=SERVER_URL, server_name="Nope"))

        assert exc_info.value.stage == "received_registration_data"
        assert exc_info.value.missing == "server_uid"
        assert flow.state.stage is FlowStage.SUBMITTED_CREDENTIALS
        assert not flow.state.is_recorded("target")
        assert len(fetcher.calls) == 3

    def test_login_response_reports_every_missing_value(
        self, make_flow, script, credentials, server
    ):
        script[("POST", LOGIN_URL)] = [ok("<html>signed in</html>")]
        flow, _ = make_flow(script)

        with pytest.raises(UnexpectedResponseError) as exc_info:
            flow.run(credentials, server)

        assert exc_info.value.missing == "registration_action, customer_id, server_uid"

    def test_callback_never_answers(self, make_flow, script, credentials, server):
        del script[("GET", CALLBACK_URL)]
        flow, fetcher = make_flow(script, max_attempts=2, delay=0.0)

        with pytest.raises(RetryExhaustedError) as exc_info:
            flow.run(credentials, server)

        assert exc_info.value.stage == "confirmed"
        assert fetcher.calls.count(("GET", CALLBACK_URL, None)) == 2
        assert flow.state.stage is FlowStage.BUILT_CALLBACK_URL

    def test_callback_error_status_is_not_retried(self, make_flow, script, credentials, server):
        script[("GET", CALLBACK_URL)] = [ok("busy", status=503, url=CALLBACK_URL), ok("registered")]
        flow, fetcher = make_flow(script)

        with pytest.raises(UnexpectedResponseError) as exc_info:
            flow.run(credentials, server)

        assert exc_info.value.status_code == 503
        assert exc_info.value.stage == "confirmed"
        assert fetcher.calls.count(("GET", CALLBACK_URL, None)) == 1
        assert flow.state.stage is FlowStage.BUILT_CALLBACK_URL

    def test_flow_cannot_run_twice(self, make_flow, script, credentials, server):
        flow, _ = make_flow(script)
        flow.run(credentials, server)

        with pytest.raises(FlowStateError):
            flow.run(credentials, server)


class TestLogging:
    def test_password_is_redacted_before_sign_in(self, script, credentials, server, sleep):
        logger = MagicMock()
        flow = RegistrationFlow(
            config=FlowConfig(registration_host=HOST, retry=RetryBudget(max_attempts=1)),
            fetcher=ScriptedFetcher(script),
            logger=logger,
            sleep=sleep,
        )

        flow.run(credentials, server)

        logger.redact.assert_called_once_with("s3cret")


class TestOpenServerSite:
    def test_returns_welcome_body(self, make_flow, script, pages):
        flow, _ = make_flow(script)
        assert flow.open_server_site(SERVER_URL) == pages["welcome"]


class TestBuildCallbackUrl:
    @pytest.fixture
    def target(self):
        return RegistrationTarget(
            server_url=SERVER_URL, customer_id="XYZcustomer", server_uid="XYZserver"
        )

    def test_parameter_order_and_literal_url(self, target):
        assert build_callback_url(f"{HOST}/server-registration", target) == CALLBACK_URL

    def test_appends_to_existing_query(self, target):
        url = build_callback_url(f"{HOST}/server-registration?lang=en", target)
        assert url.startswith(f"{HOST}/server-registration?lang=en&customer=XYZcustomer&")

    def test_drops_fragment(self, target):
        url = build_callback_url(f"{HOST}/server-registration#top", target)
        assert url == CALLBACK_URL

    def test_escapes_reserved_characters(self):
        target = RegistrationTarget(
            server_url="http://build.example.com:8111/lic",
            customer_id="a b&c",
            server_uid="uid=1",
        )
        url = build_callback_url(f"{HOST}/r", target)
        assert url == (
            f"{HOST}/r?customer=a+b%26c&url=http://build.example.com:8111/lic&server_uid=uid%3D1"
        )


class TestFlowDefaults:
    def test_production_config(self):
        config = FlowConfig()
        assert config.registration_host == DEFAULT_REGISTRATION_HOST
        assert config.registration_host == "https://account.jetbrains.com"
        assert config.retry.max_attempts == 60
        assert config.retry.delay == 1.0

    def test_host_trailing_slash_is_stripped(self):
        assert FlowConfig(registration_host="http://account.test/").registration_host == HOST

    def test_host_must_be_http(self):
        with pytest.raises(ValueError):
            FlowConfig(registration_host="ftp://account.test")

    def test_fetcher_defaults_to_page_fetcher(self):
        flow = RegistrationFlow()
        assert isinstance(flow._fetcher, PageFetcher)
        assert flow.config == FlowConfig()

"""Pytest configuration and fixtures."""

import json
from urllib.parse import parse_qs, urlsplit

import pytest
import requests

from config import RetryConfig, reset_config
from connection import Connection
from executor import BackoffPolicy, LockedRequestExecutor
from plugins.registry import reset_registry

HOST = "https://tsuru.example.com"
TOKEN = "bearer secret-token"


def make_response(status_code=200, body=""):
    """Build a requests.Response with the given status and body."""
    response = requests.Response()
    response.status_code = status_code
    if not isinstance(body, (str, bytes)):
        body = json.dumps(body)
    response._content = body.encode("utf-8") if isinstance(body, str) else body
    response.encoding = "utf-8"
    return response


def callback_of(url):
    """Extract the decoded callback path from a proxy URL."""
    return parse_qs(urlsplit(url).query)["callback"][0]


class FakeSession:
    """
    Stand-in for requests.Session returning scripted outcomes.

    Outcomes are consumed in order; the last one repeats forever.
    Exceptions are raised instead of returned.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes) or [make_response()]
        self.sent = []
        self.timeouts = []

    def prepare_request(self, request):
        return request.prepare()

    def send(self, prepared, timeout=None):
        self.sent.append(prepared)
        self.timeouts.append(timeout)
        if len(self.outcomes) > 1:
            outcome = self.outcomes.pop(0)
        else:
            outcome = self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeClock:
    """Monotonic clock advanced only by sleep()."""

    def __init__(self, now=0.0):
        self.now = now
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset global config and registry around each test."""
    reset_config()
    reset_registry()
    yield
    reset_config()
    reset_registry()


@pytest.fixture
def connection():
    return Connection(host=HOST, token=TOKEN)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def retry_config():
    return RetryConfig(
        create_timeout=120,
        delete_timeout=120,
        safety_margin=60,
        backoff_base_delay=0.5,
        backoff_max_delay=10.0,
        backoff_jitter_factor=0.0,
    )


@pytest.fixture
def make_executor(clock, retry_config):
    """Factory building an executor around a FakeSession."""

    def _make(*outcomes):
        session = FakeSession(*outcomes)
        executor = LockedRequestExecutor(
            session=session,
            backoff=BackoffPolicy(
                base_delay=retry_config.backoff_base_delay,
                max_delay=retry_config.backoff_max_delay,
                jitter_factor=retry_config.backoff_jitter_factor,
            ),
            request_timeout=retry_config.request_timeout,
            clock=clock,
            sleep=clock.sleep,
        )
        return executor, session

    return _make

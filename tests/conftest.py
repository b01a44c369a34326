import asyncio
from contextlib import asynccontextmanager
from typing import Callable, List, Optional
from urllib.parse import parse_qs, urlparse

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from emcc_verifier.config import Settings
from emcc_verifier.errors import EngineUnavailable

DIRECTORY_URL = "https://directory.test/directory"


def make_settings(**overrides) -> Settings:
    values = {
        "directory_url": DIRECTORY_URL,
        "navigation_timeout_ms": 1000,
        "settle_delay_ms": 0,
        "max_concurrent_sessions": 4,
    }
    values.update(overrides)
    return Settings(**values)


def reference_from_url(url: str) -> str:
    return parse_qs(urlparse(url).query).get("reference", [""])[0]


def directory_listing(url: str) -> str:
    """Stub directory that lists the searched reference"""
    reference = reference_from_url(url)
    return f"<html><body><div class='coach'><span>{reference}</span> Jane Doe</div></body></html>"


def empty_directory(url: str) -> str:
    return "<html><body><p>No results found</p></body></html>"


class FakeResponse:
    def __init__(self, status: int = 200):
        self.status = status

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class FakePage:
    def __init__(
        self,
        render: Callable[[str], str] = directory_listing,
        status: int = 200,
        goto_error: Optional[Exception] = None,
        content_error: Optional[Exception] = None,
        close_on_goto: bool = False,
        goto_delay: float = 0,
    ):
        self._render = render
        self._status = status
        self._goto_error = goto_error
        self._content_error = content_error
        self._close_on_goto = close_on_goto
        self._goto_delay = goto_delay
        self._closed = False
        self.html = ""
        self.visited: List[str] = []
        self.goto_kwargs: List[dict] = []
        self.waits: List[int] = []

    async def goto(self, url: str, **kwargs):
        self.visited.append(url)
        self.goto_kwargs.append(kwargs)
        if self._goto_delay:
            await asyncio.sleep(self._goto_delay)
        if self._close_on_goto:
            self._closed = True
        if self._goto_error is not None:
            raise self._goto_error
        self.html = self._render(url)
        return FakeResponse(self._status)

    async def wait_for_timeout(self, timeout: int):
        self.waits.append(timeout)

    async def content(self) -> str:
        if self._content_error is not None:
            raise self._content_error
        return self.html

    def is_closed(self) -> bool:
        return self._closed


class FakeContext:
    def __init__(self):
        self.init_scripts: List[str] = []

    async def add_init_script(self, script: str):
        self.init_scripts.append(script)


class FakeSession:
    def __init__(self, page: FakePage):
        self.page = page
        self.context = FakeContext()
        self.closed = False


class FakeSessionFactory:
    """
    Stands in for `launch_session`: hands out fake sessions and counts
    how many were opened, closed and alive at once.
    """

    def __init__(self, page_factory: Callable[[], FakePage] = FakePage, launch_error: Optional[Exception] = None):
        self._page_factory = page_factory
        self._launch_error = launch_error
        self.opened = 0
        self.closed = 0
        self.active = 0
        self.max_active = 0
        self.sessions: List[FakeSession] = []
        self.launch_kwargs: List[dict] = []

    @asynccontextmanager
    async def __call__(self, fingerprint, **kwargs):
        self.launch_kwargs.append(kwargs)
        if self._launch_error is not None:
            raise self._launch_error
        session = FakeSession(self._page_factory())
        self.sessions.append(session)
        self.opened += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            yield session
        finally:
            session.closed = True
            self.active -= 1
            self.closed += 1


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def session_factory():
    return FakeSessionFactory()


@pytest.fixture
def timeout_error():
    return PlaywrightTimeoutError("Timeout 60000ms exceeded.\n=========================== logs ===========================")


@pytest.fixture
def dns_error():
    return PlaywrightError("net::ERR_NAME_NOT_RESOLVED at https://directory.test/directory")


@pytest.fixture
def engine_error():
    return EngineUnavailable("Chromium failed to launch: Executable doesn't exist")

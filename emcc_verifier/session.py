"""
EMCC Verifier - Session Launcher

One isolated Chromium process, context and page per verification request.
`launch_session()` is the only way the gateway acquires a browser, and it
closes everything on the way out, success or failure.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from loguru import logger
from playwright.async_api import Browser, BrowserContext, Page, async_playwright

from emcc_verifier.errors import EngineUnavailable
from emcc_verifier.stealth import DEFAULT_FINGERPRINT, BrowserFingerprint, get_stealth_launch_args


class BrowserSession:
    """
    Owns one Playwright driver, browser, context and page.

    Exclusively owned by the request that launched it. Once closed the handle
    is dead; `close()` is idempotent and never raises.
    """

    def __init__(self, playwright: Any, browser: Browser, context: BrowserContext, page: Page):
        self._playwright = playwright
        self.browser = browser
        self.context = context
        self.page = page
        self.closed = False

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            await self.browser.close()
        except Exception as e:
            logger.warning(f"⚠️ Browser close failed: {e}")
        try:
            await self._playwright.stop()
        except Exception as e:
            logger.warning(f"⚠️ Playwright driver stop failed: {e}")


def build_launch_options(headless: bool = True, channel: Optional[str] = None) -> Dict[str, Any]:
    """Keyword arguments for `chromium.launch()`"""
    launch_opts: Dict[str, Any] = {"headless": headless, "args": get_stealth_launch_args()}
    if channel:
        launch_opts["channel"] = channel
    return launch_opts


async def start_session(
    fingerprint: BrowserFingerprint = DEFAULT_FINGERPRINT,
    headless: bool = True,
    channel: Optional[str] = None,
) -> BrowserSession:
    """
    Launch Chromium and open a fingerprinted context and page.

    Raises:
        EngineUnavailable: the driver or browser could not be started
    """
    try:
        playwright = await async_playwright().start()
    except Exception as e:
        raise EngineUnavailable(f"Playwright driver failed to start: {e}") from e

    try:
        browser = await playwright.chromium.launch(**build_launch_options(headless, channel))
    except Exception as e:
        try:
            await playwright.stop()
        except Exception as stop_error:
            logger.warning(f"⚠️ Playwright driver stop failed: {stop_error}")
        raise EngineUnavailable(f"Chromium failed to launch: {e}") from e

    try:
        context = await browser.new_context(**fingerprint.context_options())
        page = await context.new_page()
    except Exception as e:
        await BrowserSession(playwright, browser, None, None).close()
        raise EngineUnavailable(f"Browser context could not be created: {e}") from e

    logger.debug(f"🚀 Chromium launched (headless={headless}, channel={channel or 'bundled'})")
    return BrowserSession(playwright, browser, context, page)


@asynccontextmanager
async def launch_session(
    fingerprint: BrowserFingerprint = DEFAULT_FINGERPRINT,
    headless: bool = True,
    channel: Optional[str] = None,
) -> AsyncIterator[BrowserSession]:
    """Scoped browser session: closed on every exit path"""
    session = await start_session(fingerprint, headless=headless, channel=channel)
    try:
        yield session
    finally:
        await session.close()
        logger.debug("🧹 Browser session closed")

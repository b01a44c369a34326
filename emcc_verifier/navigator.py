"""
EMCC Verifier - Navigator

Drives the page to the directory search URL. Navigation is best-effort: the
directory often serves partial or redirected loads that still carry the
listing, so failures are logged and extraction goes ahead regardless.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote_plus

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from emcc_verifier.errors import NavigationWarning

NAVIGATION_TIMEOUT_MS = 60000
SETTLE_DELAY_MS = 5000


@dataclass(frozen=True)
class NavigationOutcome:
    """What the navigation step reached"""
    url: str
    loaded: bool
    status: Optional[int] = None
    warning: Optional[NavigationWarning] = None


def build_search_url(base_url: str, reference_id: str) -> str:
    """Directory search URL: `<base>?reference=<id>`"""
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}reference={quote_plus(reference_id)}"


async def navigate(
    page: Page,
    url: str,
    timeout_ms: int = NAVIGATION_TIMEOUT_MS,
    settle_ms: int = SETTLE_DELAY_MS,
) -> NavigationOutcome:
    """
    Load `url`, wait for the load event, then wait `settle_ms` for the
    directory's AJAX results to render.

    Timeouts, DNS failures and non-2xx answers come back as a warning on the
    outcome. Only a page that has been closed underneath us raises.
    """
    logger.info(f"🧭 Navigating to: {url}")

    try:
        response = await page.goto(url, wait_until="load", timeout=timeout_ms)
    except PlaywrightError as e:
        if page.is_closed():
            raise
        warning = NavigationWarning(str(e).splitlines()[0] if str(e) else type(e).__name__)
        logger.warning(f"⚠️ Navigation completed with warnings: {warning}")
        return NavigationOutcome(url=url, loaded=False, warning=warning)

    status = response.status if response is not None else None
    warning = None
    if response is not None and not response.ok:
        warning = NavigationWarning(f"Directory answered HTTP {status}")
        logger.warning(f"⚠️ Navigation completed with warnings: {warning}")
    else:
        logger.info("✅ Page loaded successfully")

    # No selector to wait on: the directory markup is not ours and changes
    try:
        await page.wait_for_timeout(settle_ms)
    except PlaywrightError as e:
        if page.is_closed():
            raise
        logger.warning(f"⚠️ Settle wait interrupted: {e}")

    return NavigationOutcome(url=url, loaded=True, status=status, warning=warning)

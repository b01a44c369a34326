"""
EMCC Verifier - Content Extractor
"""

from dataclasses import dataclass

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from emcc_verifier.errors import ExtractionFailure


@dataclass(frozen=True)
class ExtractedContent:
    html: str
    html_length: int
    contains_reference: bool


def check_containment(html: str, reference_id: str) -> ExtractedContent:
    """Exact, case-sensitive substring test over the raw markup"""
    return ExtractedContent(
        html=html,
        html_length=len(html),
        contains_reference=reference_id in html,
    )


async def extract_content(page: Page, reference_id: str) -> ExtractedContent:
    """
    Read the fully rendered document and check it for the reference id.

    Raises:
        ExtractionFailure: the page or browser went away before content was read
    """
    try:
        html = await page.content()
    except PlaywrightError as e:
        raise ExtractionFailure(str(e)) from e

    extracted = check_containment(html, reference_id)
    logger.info(f"📄 Successfully fetched HTML ({extracted.html_length} chars)")
    logger.info(f"🔎 HTML contains EIA: {extracted.contains_reference}")
    return extracted

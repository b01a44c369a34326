"""
EMCC Verifier - Gateway

Runs one verification end to end:

    Idle -> Validated -> Launched -> Stealth-Ready -> Navigated -> Extracted -> Responded

with Failed reachable from any step. The browser session is scoped with
`async with`, so it is closed before the result leaves this module whichever
way the request ends.
"""

import asyncio
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Callable, Optional

from loguru import logger

from emcc_verifier.config import Settings, get_settings
from emcc_verifier.extractor import extract_content
from emcc_verifier.models import VerificationRequest, VerificationResult
from emcc_verifier.navigator import build_search_url, navigate
from emcc_verifier.session import launch_session
from emcc_verifier.stealth import DEFAULT_FINGERPRINT, BrowserFingerprint, apply_stealth_patches


class Stage(Enum):
    """Where a verification is in its lifecycle"""
    IDLE = "idle"
    VALIDATED = "validated"
    LAUNCHED = "launched"
    STEALTH_READY = "stealth_ready"
    NAVIGATED = "navigated"
    EXTRACTED = "extracted"
    RESPONDED = "responded"
    FAILED = "failed"


class VerificationGateway:
    """
    Orchestrates launch, stealth, navigation and extraction for each request.

    Holds no per-request state. Concurrent sessions are capped by
    `max_concurrent_sessions`; requests past the cap wait for a slot.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fingerprint: BrowserFingerprint = DEFAULT_FINGERPRINT,
        session_factory: Optional[Callable] = None,
    ):
        self.settings = settings or get_settings()
        self.fingerprint = fingerprint
        self._session_factory = session_factory or launch_session

        limit = self.settings.max_concurrent_sessions
        self._slots: Optional[asyncio.Semaphore] = asyncio.Semaphore(limit) if limit > 0 else None

    @asynccontextmanager
    async def _session_slot(self) -> AsyncIterator[None]:
        if self._slots is None:
            yield
            return
        async with self._slots:
            yield

    @staticmethod
    def _advance(reference_id: str, current: Stage, target: Stage) -> Stage:
        logger.debug(f"🔁 EIA {reference_id}: {current.value} -> {target.value}")
        return target

    async def verify(self, request: VerificationRequest) -> VerificationResult:
        """
        Fetch the directory page for `request.reference_id`.

        Raises:
            EngineUnavailable: Chromium could not be started
            ExtractionFailure: page content could not be read
        """
        reference_id = request.reference_id
        stage = self._advance(reference_id, Stage.IDLE, Stage.VALIDATED)
        logger.info(f"🔍 Starting verification for EIA: {reference_id}")

        async with self._session_slot():
            try:
                async with self._session_factory(
                    self.fingerprint,
                    headless=self.settings.headless,
                    channel=self.settings.chromium_channel,
                ) as session:
                    stage = self._advance(reference_id, stage, Stage.LAUNCHED)
                    await apply_stealth_patches(session.context, self.fingerprint)
                    stage = self._advance(reference_id, stage, Stage.STEALTH_READY)

                    search_url = build_search_url(self.settings.directory_url, reference_id)
                    await navigate(
                        session.page,
                        search_url,
                        timeout_ms=self.settings.navigation_timeout_ms,
                        settle_ms=self.settings.settle_delay_ms,
                    )
                    stage = self._advance(reference_id, stage, Stage.NAVIGATED)

                    extracted = await extract_content(session.page, reference_id)
                    stage = self._advance(reference_id, stage, Stage.EXTRACTED)
            except Exception as e:
                logger.error(f"❌ Verification for EIA {reference_id} failed after stage '{stage.value}': {e}")
                self._advance(reference_id, stage, Stage.FAILED)
                raise

        result = VerificationResult.succeeded(
            reference_id=reference_id,
            html=extracted.html,
            contains_reference=extracted.contains_reference,
        )
        self._advance(reference_id, stage, Stage.RESPONDED)
        logger.info(f"✅ Verification for EIA {reference_id} complete (containsEIA={result.contains_reference})")
        return result

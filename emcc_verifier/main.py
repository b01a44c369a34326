"""
EMCC Verifier API

Playwright-backed fetch service called by the verify-emcc edge functions.
Returns the rendered EMCC directory page for an EIA number plus a raw
containment check; matching and scoring happen downstream.
"""

import sys
import traceback
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from emcc_verifier import SERVICE_NAME, __version__
from emcc_verifier.config import get_settings
from emcc_verifier.errors import ValidationError, VerifierError
from emcc_verifier.gateway import VerificationGateway
from emcc_verifier.models import VerificationRequest, VerificationResult


def configure_logging(level: str = "INFO") -> None:
    """Single stderr sink at the configured level"""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function} - {message}",
        backtrace=False,
        diagnose=False,
    )


settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(
    title="EMCC Verifier API",
    description="Stealth Playwright fetch gateway for EMCC directory verification",
    version=__version__,
)

# CORS for the Supabase edge functions
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allow_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)

gateway = VerificationGateway(settings)


@app.on_event("startup")
async def startup():
    logger.info(f"🦾 [Playwright Service] Running on port {settings.port}")
    logger.info(f"   Health check: http://localhost:{settings.port}/health")
    logger.info(f"   Verify endpoint: http://localhost:{settings.port}/verify-emcc")
    logger.info(f"   Environment: {settings.environment}")
    logger.info(f"   Directory: {settings.directory_url}")
    logger.info(f"   Max concurrent sessions: {settings.max_concurrent_sessions or 'unbounded'}")


@app.get("/health")
async def health():
    """Liveness probe - never touches the browser"""
    return {"status": "ok", "service": SERVICE_NAME}


def _error_response(status_code: int, message: str, stack: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=VerificationResult.failed(message, stack=stack).to_response(),
    )


@app.post("/verify-emcc")
async def verify_emcc(request: Request):
    """
    Fetch the EMCC directory page for an EIA number.

    Body: {"eiaNumber": "EIA20123456", "fullName": "Jane Doe"}
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = {}

    try:
        verification = VerificationRequest.from_payload(payload)
    except ValidationError as e:
        logger.warning(f"⚠️ Rejected verify request: {e.message}")
        return _error_response(e.status_code, e.message)

    try:
        result = await gateway.verify(verification)
    except Exception as e:
        message = str(e) or type(e).__name__
        status_code = e.status_code if isinstance(e, VerifierError) else 500
        logger.error(f"❌ [Playwright] Error: {message}")
        stack = traceback.format_exc() if gateway.settings.include_stack_traces else None
        return _error_response(status_code, message, stack)

    return result.to_response()


def main():
    """Console entry point: serve the API with uvicorn"""
    import uvicorn

    logger.info(f"EMCC VERIFIER STARTUP port={settings.port} python={sys.version.split()[0]}")
    try:
        uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    except KeyboardInterrupt:
        logger.info("Server interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    main()

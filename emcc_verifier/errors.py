"""
EMCC Verifier - Error Types

Every failure a verification can hit maps to one of these, and each carries the
HTTP status the endpoint answers with.
"""


class VerifierError(Exception):
    """Base class for verification failures"""
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(VerifierError):
    """Inbound request is missing a required field"""
    status_code = 400


class EngineUnavailable(VerifierError):
    """Chromium could not be started (missing binary, resource exhaustion)"""
    status_code = 500


class NavigationWarning(Exception):
    """
    Navigation did not complete cleanly (timeout, DNS failure, non-2xx).

    Never raised: the navigator records it on its outcome and the page is
    still extracted.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ExtractionFailure(VerifierError):
    """Page content could not be read after the browser context was lost"""
    status_code = 500

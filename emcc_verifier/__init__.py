"""
EMCC Verifier

Stealth Playwright gateway that fetches the EMCC public directory for an EIA
number and reports whether the number appears in the rendered page.
"""

__version__ = "1.0.0"

SERVICE_NAME = "emcc-playwright-verifier"

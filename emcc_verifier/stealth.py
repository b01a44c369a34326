"""
EMCC Verifier - Stealth Module

Canonical browser fingerprint plus the init script that hides the automation
surface the EMCC directory's anti-bot checks look at.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from loguru import logger

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _default_headers() -> Dict[str, str]:
    return {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
        "Accept-Language": "en-GB,en;q=0.9",
        "Accept-Encoding": "gzip, deflate, br",
        "DNT": "1",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Sec-Fetch-User": "?1",
        "Cache-Control": "max-age=0",
    }


def _default_plugins() -> Tuple[Dict[str, str], ...]:
    return (
        {"name": "Chrome PDF Plugin", "filename": "internal-pdf-viewer", "description": "Portable Document Format"},
        {"name": "Chrome PDF Viewer", "filename": "mhjfbmdgcfjbbpaeojofohoefgiehjai", "description": ""},
        {"name": "Native Client", "filename": "internal-nacl-plugin", "description": ""},
    )


@dataclass(frozen=True)
class BrowserFingerprint:
    """
    Fixed fingerprint shared by every session.

    Read-only: sessions never mutate it, so one instance is reused across
    requests. Bump `version` whenever the spoofed surface changes.
    """
    version: str = "2024.1"
    user_agent: str = DEFAULT_USER_AGENT
    viewport: Tuple[int, int] = (1920, 1080)
    locale: str = "en-GB"
    timezone: str = "Europe/London"
    color_scheme: str = "light"
    has_touch: bool = False
    is_mobile: bool = False
    languages: Tuple[str, ...] = ("en-GB", "en", "en-US")
    plugins: Tuple[Dict[str, str], ...] = field(default_factory=_default_plugins, hash=False)
    headers: Dict[str, str] = field(default_factory=_default_headers, hash=False)

    def context_options(self) -> Dict[str, Any]:
        """Keyword arguments for `browser.new_context()`"""
        width, height = self.viewport
        return {
            "user_agent": self.user_agent,
            "viewport": {"width": width, "height": height},
            "locale": self.locale,
            "timezone_id": self.timezone,
            "has_touch": self.has_touch,
            "is_mobile": self.is_mobile,
            "color_scheme": self.color_scheme,
            "extra_http_headers": dict(self.headers),
        }


DEFAULT_FINGERPRINT = BrowserFingerprint()


def get_stealth_launch_args() -> List[str]:
    """
    Chromium launch arguments for stealth mode.

    Critical: --disable-blink-features=AutomationControlled
    """
    return [
        "--no-sandbox",  # Required in containers
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-gpu",
        "--disable-blink-features=AutomationControlled",  # CRITICAL: Removes automation flag
        "--disable-features=IsolateOrigins,site-per-process",
    ]


def generate_stealth_script(fingerprint: BrowserFingerprint = DEFAULT_FINGERPRINT) -> str:
    """
    Generate the JavaScript patches for the automation surface.

    Installed as an init script, so it runs before any site script on every
    page load in the context.
    """
    plugins = json.dumps(list(fingerprint.plugins))
    languages = json.dumps(list(fingerprint.languages))
    return f"""
        // 1. navigator.webdriver
        Object.defineProperty(navigator, 'webdriver', {{ get: () => false }});

        // 2. Plugins (non-empty synthetic set)
        Object.defineProperty(navigator, 'plugins', {{
            get: () => {{
                const plugins = {plugins};
                plugins.length = {len(fingerprint.plugins)};
                return plugins;
            }}
        }});

        // 3. Languages
        Object.defineProperty(navigator, 'languages', {{ get: () => {languages} }});

        // 4. Chrome object
        window.chrome = {{
            runtime: {{}},
        }};

        // 5. Permissions API
        const originalQuery = window.navigator.permissions.query;
        window.navigator.permissions.query = (parameters) => (
            parameters.name === 'notifications' ?
            Promise.resolve({{ state: Notification.permission }}) :
            originalQuery.call(window.navigator.permissions, parameters)
        );
        """


async def apply_stealth_patches(context, fingerprint: BrowserFingerprint = DEFAULT_FINGERPRINT) -> None:
    """
    Apply stealth patches to a Playwright browser context.

    Must be called BEFORE the first navigation.
    """
    await context.add_init_script(generate_stealth_script(fingerprint))
    logger.debug(f"🕵️ Stealth patches applied (fingerprint {fingerprint.version})")

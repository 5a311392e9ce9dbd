# pageqa/renderer.py
"""Headless-browser page rendering.

``PlaywrightRenderer`` loads a URL in Chromium with images, stylesheets,
fonts and media blocked, waits for ``domcontentloaded`` and returns the
page title, meta description and whitespace-collapsed body text.

Which browser binary is launched is private to the renderer: in production
Playwright's bundled Chromium is used, locally an installed Chrome
(``CHROME_EXECUTABLE_PATH`` or the platform's default location) when one
exists.

Install the browser binary once with::

    playwright install chromium
"""
import logging
import os
import sys

from playwright.sync_api import sync_playwright

from pageqa.exceptions import RenderError

logger = logging.getLogger(__name__)

BLOCKED_RESOURCE_TYPES = frozenset({'image', 'stylesheet', 'font', 'media'})

LAUNCH_ARGS = ['--no-sandbox', '--disable-setuid-sandbox', '--disable-dev-shm-usage']

_DEFAULT_CHROME_PATHS = {
    'win32': r'C:\Program Files\Google\Chrome\Application\chrome.exe',
    'darwin': '/Applications/Google Chrome.app/Contents/MacOS/Google Chrome',
}
_LINUX_CHROME_PATH = '/usr/bin/google-chrome'

_EXTRACT_SCRIPT = """
() => {
    const title = document.title;
    const meta = document.querySelector('meta[name="description"]');
    const description = meta ? (meta.getAttribute('content') || '') : '';
    const body = document.body ? document.body.innerText : '';
    return { title, description, body };
}
"""


class Renderer:
    """Returns the rendered text of a page or raises ``RenderError``."""

    def render(self, url):
        raise NotImplementedError


def _strip_nul(text):
    return (text or '').replace('\x00', '')


def format_page_text(title, description, body):
    # Postgres TEXT columns reject NUL characters
    clean_body = ' '.join(_strip_nul(body).split())
    return f'Title: {_strip_nul(title)}\nDescription: {_strip_nul(description)}\n\nContent:\n{clean_body}'


def _route_filter(route):
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        route.abort()
    else:
        route.continue_()


class PlaywrightRenderer(Renderer):
    def __init__(self, timeout_ms=30000, production=False, chrome_executable_path=None):
        self.timeout_ms = timeout_ms
        self.production = production
        self.chrome_executable_path = chrome_executable_path

    def _executable_path(self):
        if self.production:
            return None
        path = self.chrome_executable_path or _DEFAULT_CHROME_PATHS.get(sys.platform, _LINUX_CHROME_PATH)
        if os.path.exists(path):
            return path
        logger.debug('No local Chrome at %s, using bundled Chromium', path)
        return None

    def render(self, url):
        logger.info('Rendering %s', url)
        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(
                    headless=True,
                    args=LAUNCH_ARGS,
                    executable_path=self._executable_path(),
                )
                try:
                    page = browser.new_page()
                    page.route('**/*', _route_filter)
                    page.goto(url, wait_until='domcontentloaded', timeout=self.timeout_ms)
                    data = page.evaluate(_EXTRACT_SCRIPT)
                finally:
                    browser.close()
        except Exception as exc:
            logger.warning('Rendering %s failed: %s', url, exc)
            raise RenderError(str(exc) or exc.__class__.__name__) from exc

        return format_page_text(data.get('title'), data.get('description'), data.get('body'))

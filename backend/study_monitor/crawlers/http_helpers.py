from __future__ import annotations
import httpx

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)
BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]


class FetchFailure(RuntimeError):
    """Network error, timeout or non-success status while loading the listing page."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"fetch failed for {url}: {reason}")
        self.url = url
        self.reason = reason


def fetch_html(url: str, timeout: int = 30) -> str:
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
    }
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True, headers=headers) as client:
            resp = client.get(url)
            resp.raise_for_status()
            return resp.text
    except httpx.TimeoutException as exc:
        raise FetchFailure(url, f"timeout after {timeout}s") from exc
    except httpx.HTTPStatusError as exc:
        raise FetchFailure(url, f"status={exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise FetchFailure(url, str(exc)) from exc


def render_html(
    url: str,
    timeout: int = 30,
    wait_selector: str | None = None,
    wait_selector_timeout: int = 15,
    executable_path: str | None = None,
) -> str:
    """Load ``url`` in headless Chromium and return the DOM after client-side rendering."""

    from playwright.sync_api import Error as PlaywrightError
    from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
    from playwright.sync_api import sync_playwright

    try:
        with sync_playwright() as pw:
            browser = pw.chromium.launch(
                headless=True,
                executable_path=executable_path or None,
                args=BROWSER_ARGS,
            )
            try:
                context = browser.new_context(user_agent=USER_AGENT)
                page = context.new_page()
                response = page.goto(url, wait_until="networkidle", timeout=timeout * 1000)
                if response is not None and response.status >= 400:
                    raise FetchFailure(url, f"status={response.status}")
                if wait_selector:
                    try:
                        page.wait_for_selector(wait_selector, timeout=wait_selector_timeout * 1000)
                    except PlaywrightTimeoutError:
                        # Listing may legitimately be empty; extraction decides.
                        pass
                return page.content()
            finally:
                browser.close()
    except PlaywrightTimeoutError as exc:
        raise FetchFailure(url, f"timeout after {timeout}s") from exc
    except PlaywrightError as exc:
        raise FetchFailure(url, str(exc)) from exc

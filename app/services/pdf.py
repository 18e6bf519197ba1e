"""HTML → PDF rendering with headless Chromium."""

import asyncio
from collections.abc import Sequence

from playwright.async_api import Error as PlaywrightError

from app.config import BROWSER_ARGS, SESSION_TIMEOUT
from app.services.browser_fetcher import RenderError, launch_browser

PDF_MARGINS = {"top": "20mm", "right": "15mm", "bottom": "20mm", "left": "15mm"}

FOOTER_TEMPLATE = """
<div style="width: 100%; font-size: 9px; padding: 5px 15px; color: #999; text-align: center; font-family: Arial, sans-serif;">
  <span>Page <span class="pageNumber"></span> of <span class="totalPages"></span></span>
</div>
"""


async def _render_pdf(html: str, browser_args: Sequence[str]) -> bytes:
    async with launch_browser(browser_args) as browser:
        page = await browser.new_page()
        await page.set_content(html, wait_until="networkidle")
        return await page.pdf(
            format="A4",
            print_background=True,
            margin=PDF_MARGINS,
            display_header_footer=True,
            header_template="<div></div>",
            footer_template=FOOTER_TEMPLATE,
        )


async def render_pdf(html: str, *, browser_args: Sequence[str] = BROWSER_ARGS) -> bytes:
    """Render an HTML document to an A4 PDF with a "Page X of Y" footer.

    Raises:
        RenderError: if the browser fails or the session exceeds ``SESSION_TIMEOUT``.
    """
    try:
        return await asyncio.wait_for(_render_pdf(html, browser_args), timeout=SESSION_TIMEOUT)
    except asyncio.TimeoutError as exc:
        raise RenderError(f"PDF rendering exceeded {SESSION_TIMEOUT}s.") from exc
    except PlaywrightError as exc:
        raise RenderError(f"Browser error: {exc}") from exc

"""PNG render worker for GitHub Wrapped.

Run as ``python -m gh_wrapped.export_worker INPUT_JSON OUTPUT_JSON``.

The input file holds the job: ``html``, ``path``, ``width``, ``height`` and
``scale``. The worker screenshots the ``#wrapped-card`` element with
Playwright Chromium and writes ``{"success": true, "path": ...}`` or
``{"success": false, "error": ...}`` to the output file. The input file is
removed either way.

``python -m gh_wrapped.export_worker --check`` exits 0 when Chromium is
installed and 1 when it is not.
"""

import json
import sys
from pathlib import Path
from typing import List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

CARD_SELECTOR = "#wrapped-card"
CHECK_FLAG = "--check"

BROWSER_MISSING_HINT = (
    "Chromium for Playwright is not installed. Install it once with:\n"
    "  playwright install chromium\n"
    "or export as SVG instead."
)


def render_png(job: dict) -> Path:
    """Screenshot the card in a job and return the PNG path."""
    output = Path(job["path"])
    with sync_playwright() as p:
        browser = p.chromium.launch()
        try:
            page = browser.new_page(
                viewport={"width": job["width"], "height": job["height"]},
                device_scale_factor=job.get("scale", 1),
            )
            page.set_content(job["html"], wait_until="load")
            page.locator(CARD_SELECTOR).screenshot(path=str(output))
        finally:
            browser.close()
    return output


def browser_installed() -> bool:
    """Whether Playwright's Chromium build is present on disk."""
    with sync_playwright() as p:
        return Path(p.chromium.executable_path).exists()


def describe_error(error: Exception) -> str:
    message = str(error)
    if "Executable doesn't exist" in message or "playwright install" in message:
        return BROWSER_MISSING_HINT
    return message


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if args == [CHECK_FLAG]:
        try:
            return 0 if browser_installed() else 1
        except PlaywrightError as e:
            print(e, file=sys.stderr)
            return 1
    if len(args) != 2:
        print(
            "usage: python -m gh_wrapped.export_worker INPUT_JSON OUTPUT_JSON\n"
            f"       python -m gh_wrapped.export_worker {CHECK_FLAG}",
            file=sys.stderr,
        )
        return 2

    input_file, output_file = Path(args[0]), Path(args[1])
    try:
        job = json.loads(input_file.read_text(encoding="utf-8"))
        path = render_png(job)
        result = {"success": True, "path": str(path)}
    except (PlaywrightError, OSError, ValueError, KeyError) as e:
        result = {"success": False, "error": describe_error(e)}
    finally:
        input_file.unlink(missing_ok=True)

    output_file.write_text(json.dumps(result), encoding="utf-8")
    return 0 if result["success"] else 1


if __name__ == "__main__":
    sys.exit(main())

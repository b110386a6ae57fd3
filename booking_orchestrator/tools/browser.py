"""
Playwright-backed form inspector and actuator.

The inspector opens a provider's booking page and reports every input,
select, and textarea it finds. The actuator replays field assignments
against the same page and then performs the submit instruction. Each call
launches its own short-lived browser, so concurrent sessions share nothing.
"""

import logging
from typing import Any, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

from booking_orchestrator.config import settings
from booking_orchestrator.schemas.form_schema import ActionKind, FieldAssignment, FormField

logger = logging.getLogger(__name__)

FIELD_SELECTOR = "input, select, textarea"

# Runs in the page: one descriptor per control, label resolved from
# <label for>, an enclosing <label>, aria-label, placeholder, then name.
_DESCRIBE_FIELDS_JS = """
(els) => els.map((el) => {
    const id = el.id || '';
    const name = el.getAttribute('name') || '';
    let label = '';
    if (id) {
        const forLabel = document.querySelector(`label[for="${CSS.escape(id)}"]`);
        if (forLabel) label = (forLabel.innerText || '').trim();
    }
    if (!label) {
        const wrapping = el.closest('label');
        if (wrapping) label = (wrapping.innerText || '').trim();
    }
    if (!label) {
        label = (el.getAttribute('aria-label') || el.getAttribute('placeholder') || name || id).trim();
    }
    const tag = el.tagName.toLowerCase();
    const type = tag === 'input' ? (el.getAttribute('type') || 'text').toLowerCase() : tag;
    const required = el.required || el.getAttribute('aria-required') === 'true';
    return {label, id, name, type, required};
})
"""


def _to_form_field(raw: dict[str, Any]) -> Optional[FormField]:
    """Build a FormField from a page descriptor; None if it has no usable locator."""
    if raw.get("id"):
        field_id = f"#{raw['id']}"
    elif raw.get("name"):
        field_id = f"[name=\"{raw['name']}\"]"
    else:
        return None
    label = str(raw.get("label") or "").strip().rstrip("*").strip()
    return FormField(
        label=label or field_id,
        field_id=field_id,
        field_type=str(raw.get("type") or "text"),
        required=bool(raw.get("required")),
    )


async def _apply(page: Page, assignment: FieldAssignment) -> None:
    locator = page.locator(assignment.field_id).first
    if assignment.action == ActionKind.TYPE:
        await locator.fill(assignment.value)
    elif assignment.action == ActionKind.SELECT:
        await locator.select_option(assignment.value)
    else:
        await locator.click()


class PlaywrightFormInspector:
    """Observes booking-page fields with a headless browser."""

    def __init__(self, headless: Optional[bool] = None, timeout_ms: Optional[int] = None) -> None:
        self.headless = settings.browser.headless if headless is None else headless
        self.timeout_ms = timeout_ms or settings.browser.navigation_timeout_ms

    async def inspect(self, url: str) -> list[FormField]:
        try:
            async with async_playwright() as pw:
                browser = await pw.chromium.launch(headless=self.headless)
                try:
                    page = await browser.new_page()
                    await page.goto(url, timeout=self.timeout_ms)
                    raw_fields = await page.eval_on_selector_all(
                        FIELD_SELECTOR, _DESCRIBE_FIELDS_JS
                    )
                finally:
                    await browser.close()
        except PlaywrightError as exc:
            logger.warning("Form inspection failed for %s: %s", url, exc)
            return []

        fields = [f for f in (_to_form_field(raw) for raw in raw_fields) if f is not None]
        logger.info("Inspected %s: %d fields", url, len(fields))
        return fields


class PlaywrightFormActuator:
    """Fills and submits booking forms with a headless browser."""

    def __init__(self, headless: Optional[bool] = None, timeout_ms: Optional[int] = None) -> None:
        self.headless = settings.browser.headless if headless is None else headless
        self.timeout_ms = timeout_ms or settings.browser.navigation_timeout_ms

    async def submit(
        self,
        url: str,
        assignments: list[FieldAssignment],
        submit_instruction: FieldAssignment,
    ) -> bool:
        try:
            async with async_playwright() as pw:
                browser = await pw.chromium.launch(headless=self.headless)
                try:
                    page = await browser.new_page()
                    page.set_default_timeout(self.timeout_ms)
                    await page.goto(url, timeout=self.timeout_ms)
                    for assignment in assignments:
                        await _apply(page, assignment)
                    await _apply(page, submit_instruction)
                    await page.wait_for_load_state("networkidle")
                finally:
                    await browser.close()
        except PlaywrightError as exc:
            logger.warning("Form submission failed for %s: %s", url, exc)
            return False

        logger.info("Submitted %d fields to %s", len(assignments), url)
        return True

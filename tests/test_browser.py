"""Tests for the Playwright adapter helpers that run without a browser."""

import pytest

from booking_orchestrator.schemas.form_schema import ActionKind, FieldAssignment
from booking_orchestrator.tools.browser import PlaywrightFormInspector, _apply, _to_form_field


class FakeLocator:
    def __init__(self, log: list, selector: str):
        self.log = log
        self.selector = selector

    @property
    def first(self):
        return self

    async def fill(self, value):
        self.log.append(("fill", self.selector, value))

    async def select_option(self, value):
        self.log.append(("select", self.selector, value))

    async def click(self):
        self.log.append(("click", self.selector))


class FakePage:
    def __init__(self):
        self.log: list = []

    def locator(self, selector):
        return FakeLocator(self.log, selector)


class TestToFormField:
    def test_id_preferred(self):
        field = _to_form_field(
            {"label": "First Name *", "id": "fname", "name": "first", "type": "text",
             "required": True}
        )
        assert field.field_id == "#fname"
        assert field.label == "First Name"
        assert field.required is True

    def test_name_locator(self):
        field = _to_form_field({"label": "", "id": "", "name": "dob", "type": "date"})
        assert field.field_id == '[name="dob"]'
        assert field.label == '[name="dob"]'
        assert field.field_type == "date"

    def test_no_locator(self):
        assert _to_form_field({"label": "Orphan", "id": "", "name": ""}) is None


class TestApply:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("action,expected", [
        (ActionKind.TYPE, ("fill", "#f", "v")),
        (ActionKind.SELECT, ("select", "#f", "v")),
        (ActionKind.CLICK, ("click", "#f")),
    ])
    async def test_action_dispatch(self, action, expected):
        page = FakePage()
        await _apply(page, FieldAssignment(field_id="#f", value="v", action=action))
        assert page.log == [expected]


class TestInspectorSettings:
    def test_explicit_settings_win(self):
        inspector = PlaywrightFormInspector(headless=False, timeout_ms=500)
        assert inspector.headless is False
        assert inspector.timeout_ms == 500

import pytest
from unittest.mock import AsyncMock

from services import controls as scripts
from services.config_loader import DEFAULT_CONFIG
from services.controls import HANDLE_ATTRIBUTE, WidgetControls
from services.models import BoundingBox

SELECTORS = DEFAULT_CONFIG["browser"]["selectors"]


def _controls(return_value):
    driver = AsyncMock()
    driver.evaluate.return_value = return_value
    return WidgetControls(driver, SELECTORS), driver


@pytest.mark.asyncio
async def test_locate_builds_descriptors():
    """DOMから読んだ値をButtonDescriptorに変換すること"""
    controls, driver = _controls(
        [
            {
                "index": 0,
                "label": "Sign In",
                "name": "",
                "primary": True,
                "visible": True,
                "box": {"x": 1, "y": 2, "width": 30, "height": 10},
            }
        ]
    )
    found = await controls.locate()

    assert len(found) == 1
    button = found[0]
    assert button.label == "Sign In"
    assert button.primary is True
    assert button.box == BoundingBox(1, 2, 30, 10)
    assert button.handle == f'gt-attendance-info [{HANDLE_ATTRIBUTE}="0"]'

    script, arg = driver.evaluate.call_args.args
    assert script == scripts.ENUMERATE_CONTROLS
    assert arg["widget"] == "gt-attendance-info"
    assert arg["primary"] == '[shade="primary"]'


@pytest.mark.asyncio
async def test_locate_without_widget():
    controls, _ = _controls(None)
    assert await controls.locate() is None


@pytest.mark.asyncio
async def test_read_modal():
    controls, _ = _controls({"present": True, "text": "Work location", "requiresInput": True})
    modal = await controls.read_modal()

    assert modal.present is True
    assert modal.requires_input is True
    assert modal.text == "Work location"


@pytest.mark.asyncio
async def test_fill_modal_field_passes_value():
    controls, driver = _controls(True)
    assert await controls.fill_modal_field("Office") is True

    script, arg = driver.evaluate.call_args.args
    assert script == scripts.FILL_MODAL_FIELD
    assert arg == {"modal": "gt-popup-modal", "fieldHost": "gt-text-area", "value": "Office"}


def test_fill_script_searches_shadow_root():
    """カスタム要素のshadowRoot内の入力欄も探すこと"""
    assert "shadowRoot" in scripts.FILL_MODAL_FIELD

import pytest
from unittest.mock import AsyncMock

from conftest import FakeAttendancePage, make_config
from services.controls import WidgetControls
from services.errors import ErrorKind, StepTimeout
from services.modal_handler import ModalHandler


def _handler(page):
    config = make_config()
    return ModalHandler(WidgetControls(page, config["browser"]["selectors"]), config)


@pytest.mark.asyncio
async def test_no_modal_is_noop():
    page = FakeAttendancePage()
    result = await _handler(page).resolve()

    assert result.present is False
    assert result.resolved is True
    assert page.field_value is None


@pytest.mark.asyncio
async def test_fill_and_submit():
    """入力必須のダイアログは既定値を入力して送信する"""
    page = FakeAttendancePage()
    page.modal_open = True
    result = await _handler(page).resolve()

    assert result.resolved is True
    assert result.filled is True
    assert page.field_value == "Office"
    assert page.modal_open is False


@pytest.mark.asyncio
async def test_submit_without_input():
    page = FakeAttendancePage(modal_requires_input=False)
    page.modal_open = True
    result = await _handler(page).resolve()

    assert result.resolved is True
    assert result.filled is False
    assert page.field_value is None
    assert page.modal_open is False


@pytest.mark.asyncio
async def test_field_not_found():
    page = FakeAttendancePage(modal_field=False)
    page.modal_open = True
    result = await _handler(page).resolve()

    assert result.resolved is False
    assert result.error is ErrorKind.MODAL_RESOLUTION_FAILED


@pytest.mark.asyncio
async def test_submit_not_found():
    page = FakeAttendancePage(modal_submit=False)
    page.modal_open = True
    result = await _handler(page).resolve()

    assert result.resolved is False
    assert result.filled is True
    assert result.error is ErrorKind.MODAL_RESOLUTION_FAILED


@pytest.mark.asyncio
async def test_timeout_does_not_escape():
    """待機タイムアウトは例外にせず失敗として返す"""
    page = FakeAttendancePage()
    page.modal_open = True
    page.evaluate = AsyncMock(side_effect=StepTimeout("slow"))

    result = await _handler(page).resolve()
    assert result.resolved is False
    assert result.error is ErrorKind.MODAL_RESOLUTION_FAILED


@pytest.mark.asyncio
async def test_page_error_does_not_escape():
    """送信時の予期しない例外も失敗として返す"""
    page = FakeAttendancePage()
    page.modal_open = True
    handler = _handler(page)
    handler._controls.submit_modal = AsyncMock(
        side_effect=RuntimeError("Execution context was destroyed")
    )

    result = await handler.resolve()
    assert result.resolved is False
    assert result.error is ErrorKind.MODAL_RESOLUTION_FAILED
    assert page.field_value == "Office"

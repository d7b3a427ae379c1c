import pytest

from conftest import FakeAttendancePage, make_config
from services.controls import WidgetControls
from services.models import AttendanceState, ButtonDescriptor
from services.state_detector import StateDetector, classify


def _control(label="", name="", primary=False, visible=True):
    return ButtonDescriptor(
        label=label, name=name, visible=visible, primary=primary, box=None, widget="w", handle="h"
    )


def test_classify_history_control_means_signed_in():
    """履歴ボタンがあれば出勤中"""
    state, primary, has_history = classify(
        [_control("Sign Out", primary=True), _control("View Swipes", name="View Swipes")],
        ["view swipes"],
    )
    assert state is AttendanceState.SIGNED_IN
    assert primary.label == "Sign Out"
    assert has_history is True


def test_classify_history_matched_by_label():
    state, _, _ = classify([_control("view swipes")], ["View Swipes"])
    assert state is AttendanceState.SIGNED_IN


def test_classify_primary_only_means_signed_out():
    state, primary, has_history = classify([_control("Sign In", primary=True)], ["view swipes"])
    assert state is AttendanceState.SIGNED_OUT
    assert primary.label == "Sign In"
    assert has_history is False


def test_classify_nothing_is_unknown():
    """判定材料が無ければ不明（出勤/退勤に寄せない）"""
    state, primary, _ = classify([_control("Help")], ["view swipes"])
    assert state is AttendanceState.UNKNOWN
    assert primary is None


def _detector(page):
    config = make_config()
    return StateDetector(WidgetControls(page, config["browser"]["selectors"]), config)


@pytest.mark.asyncio
async def test_detect_signed_in():
    page = FakeAttendancePage(signed_in=True)
    detection = await _detector(page).detect()

    assert detection.state is AttendanceState.SIGNED_IN
    assert detection.widget_found is True
    assert len(detection.controls) == 2
    assert detection.modal.present is False


@pytest.mark.asyncio
async def test_detect_widget_missing():
    page = FakeAttendancePage(widget=False)
    detection = await _detector(page).detect()

    assert detection.state is AttendanceState.UNKNOWN
    assert detection.widget_found is False
    assert detection.controls == ()


@pytest.mark.asyncio
async def test_detect_is_read_only():
    """検出でボタンを押さないこと"""
    page = FakeAttendancePage(signed_in=False)
    await _detector(page).detect()
    assert page.activations == []
    assert page.signed_in is False


@pytest.mark.asyncio
async def test_confirm_change_detects_modal():
    page = FakeAttendancePage(signed_in=False)
    page.modal_open = True
    confirmation = await _detector(page).confirm_change(AttendanceState.SIGNED_OUT)

    assert confirmation.confirmed is True
    assert confirmation.modal_opened is True


@pytest.mark.asyncio
async def test_confirm_change_detects_flip():
    page = FakeAttendancePage(signed_in=True)
    confirmation = await _detector(page).confirm_change(AttendanceState.SIGNED_OUT)

    assert confirmation.state_changed is True
    assert confirmation.state is AttendanceState.SIGNED_IN


@pytest.mark.asyncio
async def test_confirm_change_nothing_happened():
    page = FakeAttendancePage(signed_in=False)
    confirmation = await _detector(page).confirm_change(AttendanceState.SIGNED_OUT)

    assert confirmation.confirmed is False


@pytest.mark.asyncio
async def test_confirm_change_ignores_modal_open_before_click():
    """操作前から開いていたモーダルは変化とみなさない"""
    page = FakeAttendancePage(signed_in=False)
    page.modal_open = True
    confirmation = await _detector(page).confirm_change(
        AttendanceState.SIGNED_OUT, modal_was_open=True
    )

    assert confirmation.confirmed is False
    assert confirmation.modal_opened is False

import logging
from typing import Optional

from services.controls import WidgetControls
from services.errors import StepTimeout
from services.models import (
    AttendanceState,
    ButtonDescriptor,
    Confirmation,
    Detection,
)

logger = logging.getLogger(__name__)


def classify(
    controls: list[ButtonDescriptor], history_names: list[str]
) -> tuple[AttendanceState, Optional[ButtonDescriptor], bool]:
    """可視コントロールから勤怠状態を判定する

    1. 履歴系コントロール（例: View Swipes）があれば出勤中
    2. それが無く主ボタンがあれば退勤中
    3. どちらも無ければ不明
    """
    needles = [n.lower() for n in history_names]
    has_history = any(
        needle in control.name.lower() or needle in control.label.lower()
        for control in controls
        for needle in needles
    )
    primary = next((c for c in controls if c.primary), None)

    if has_history:
        return AttendanceState.SIGNED_IN, primary, True
    if primary is not None:
        return AttendanceState.SIGNED_OUT, primary, False
    return AttendanceState.UNKNOWN, None, False


class StateDetector:
    """ページを読み取り、勤怠状態と操作可能なコントロールを返す（副作用なし）"""

    def __init__(self, controls: WidgetControls, config: dict):
        self._controls = controls
        self._selectors = config["browser"]["selectors"]
        self._browser = config["browser"]
        self._history_names = config["detection"]["history_names"]

    async def detect(self) -> Detection:
        try:
            await self._controls.driver.wait_for(
                self._selectors["attendance_widget"], self._browser["widget_timeout_ms"]
            )
        except StepTimeout:
            logger.warning("勤怠ウィジェットが見つかりません: %s", self._selectors["attendance_widget"])
            return Detection(state=AttendanceState.UNKNOWN, widget_found=False)

        found = await self._controls.locate()
        if found is None:
            logger.warning("勤怠ウィジェットが消えました")
            return Detection(state=AttendanceState.UNKNOWN, widget_found=False)

        visible = [c for c in found if c.visible]
        state, primary, has_history = classify(visible, self._history_names)
        modal = await self._controls.read_modal()

        logger.info(
            "状態判定: %s (コントロール %d件, 主ボタン=%s, 履歴=%s, モーダル=%s)",
            state.value,
            len(visible),
            primary.label if primary else None,
            has_history,
            modal.present,
        )
        return Detection(
            state=state,
            widget_found=True,
            controls=tuple(visible),
            primary=primary,
            has_history_control=has_history,
            modal=modal,
        )

    async def confirm_change(
        self, previous: AttendanceState, modal_was_open: bool = False
    ) -> Confirmation:
        """操作後、モーダル出現か状態変化が観測できるまで一定回数ポーリングする

        操作前から開いていたモーダルは変化として数えない。
        """
        interval = self._browser["poll_interval_ms"]
        polls = max(1, self._browser["confirm_timeout_ms"] // interval)

        confirmation = Confirmation(modal_opened=False, state_changed=False, state=previous)
        for _ in range(polls):
            await self._controls.driver.pause(interval)
            confirmation = await self._probe(previous, modal_was_open)
            if confirmation.confirmed:
                break
        return confirmation

    async def _probe(self, previous: AttendanceState, modal_was_open: bool) -> Confirmation:
        modal = await self._controls.read_modal()
        if modal.present and not modal_was_open:
            return Confirmation(modal_opened=True, state_changed=False, state=previous)

        found = await self._controls.locate()
        if found is None:
            return Confirmation(modal_opened=False, state_changed=False, state=AttendanceState.UNKNOWN)
        state, _, _ = classify([c for c in found if c.visible], self._history_names)
        changed = state is not AttendanceState.UNKNOWN and state is not previous
        return Confirmation(modal_opened=False, state_changed=changed, state=state)

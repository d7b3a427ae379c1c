import logging

from services.controls import WidgetControls
from services.errors import AttendanceError, ErrorKind
from services.models import ModalResolution, ModalState

logger = logging.getLogger(__name__)


class ModalHandler:
    """打刻後の確認ダイアログ（勤務場所入力など）を処理する"""

    def __init__(self, controls: WidgetControls, config: dict):
        self._controls = controls
        self._default_text = config["modal"]["default_text"]
        self._submit_settle_ms = config["modal"]["submit_settle_ms"]
        self._close_timeout_ms = config["modal"]["close_timeout_ms"]

    async def inspect(self) -> ModalState:
        return await self._controls.read_modal()

    async def resolve(self) -> ModalResolution:
        """ダイアログがあれば入力・送信する。失敗しても例外は外に出さない"""
        try:
            modal = await self.inspect()
        except Exception as e:
            logger.warning("モーダルの確認に失敗しました: %s", e)
            return ModalResolution(present=True, resolved=False, error=ErrorKind.MODAL_RESOLUTION_FAILED)

        if not modal.present:
            return ModalResolution(present=False, resolved=True)

        logger.info("確認ダイアログを検出しました: %r", modal.text[:80])
        try:
            filled = False
            if modal.requires_input:
                filled = await self._controls.fill_modal_field(self._default_text)
                if not filled:
                    logger.warning("ダイアログの入力欄が見つかりません")
                    return ModalResolution(
                        present=True,
                        resolved=False,
                        text=modal.text,
                        error=ErrorKind.MODAL_RESOLUTION_FAILED,
                    )
                logger.info("入力欄に %r を入力しました", self._default_text)

            if not await self._controls.submit_modal():
                logger.warning("ダイアログの送信ボタンが見つかりません")
                return ModalResolution(
                    present=True,
                    resolved=False,
                    filled=filled,
                    text=modal.text,
                    error=ErrorKind.MODAL_RESOLUTION_FAILED,
                )

            await self._controls.driver.pause(self._submit_settle_ms)
            await self._wait_closed()
        except Exception as e:
            logger.warning("ダイアログ処理中にエラー: %s", e)
            return ModalResolution(
                present=True, resolved=False, text=modal.text, error=ErrorKind.MODAL_RESOLUTION_FAILED
            )

        logger.info("確認ダイアログを送信しました")
        return ModalResolution(present=True, resolved=True, filled=filled, text=modal.text)

    async def _wait_closed(self) -> None:
        try:
            await self._controls.wait_modal_closed(self._close_timeout_ms)
        except AttendanceError:
            # 閉じない場合も後続の状態確認で判定する
            logger.warning("送信後もダイアログが閉じていません")

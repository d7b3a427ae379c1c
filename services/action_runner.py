import asyncio
import logging
import threading
from typing import Optional

from services.attendance_engine import AttendanceEngine
from services.messages import BUSY_MESSAGE, UNEXPECTED_ERROR, WAIT_MESSAGES, format_outcome
from services.models import ActionKind, ActionOutcome

logger = logging.getLogger(__name__)


class ActionRunner:
    """打刻処理を1件ずつ実行し、結果を通知する

    勤怠システムは1アカウント1セッションのため、実行中に別の要求が来た場合は
    待たせずに断る。
    """

    def __init__(self, engine: AttendanceEngine, notifier):
        self._engine = engine
        self._notifier = notifier
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def run(self, kind: ActionKind) -> Optional[ActionOutcome]:
        """実行中ならNoneを返す"""
        if not self._lock.acquire(blocking=False):
            logger.info("実行中のため %s を受け付けませんでした", kind.value)
            return None
        try:
            return asyncio.run(self._engine.perform_action(kind))
        finally:
            self._lock.release()

    def execute(self, kind: ActionKind, channel: Optional[str] = None) -> Optional[ActionOutcome]:
        """待機メッセージを出してから実行し、同じメッセージを結果で書き換える"""
        posted = self._notifier.post(WAIT_MESSAGES[kind], channel=channel)
        try:
            outcome = self.run(kind)
        except Exception as e:
            logger.exception("打刻処理で予期しないエラーが発生しました")
            self._notifier.update(posted, UNEXPECTED_ERROR.format(error=e), channel=channel)
            return None

        text = BUSY_MESSAGE if outcome is None else format_outcome(outcome)
        self._notifier.update(posted, text, channel=channel)
        return outcome

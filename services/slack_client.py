import logging
import sys
from dataclasses import dataclass
from typing import Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostedMessage:
    channel: str
    ts: str


class ConsoleNotifier:
    """コンソール出力による通知（フォールバック用）"""

    def send(self, message: str, channel: Optional[str] = None) -> bool:
        print(f"[勤怠通知] {message}", file=sys.stdout)
        return True

    def send_error(self, error: str, channel: Optional[str] = None) -> bool:
        print(f"[勤怠エラー] {error}", file=sys.stderr)
        return True

    def post(self, message: str, channel: Optional[str] = None) -> Optional[PostedMessage]:
        self.send(message, channel)
        return None

    def update(self, posted: Optional[PostedMessage], message: str, channel: Optional[str] = None) -> bool:
        return self.send(message, channel)


class SlackNotifier:
    """Slack APIによる通知サービス"""

    def __init__(self, token: str, channel: str):
        self._channel = channel
        self._client = WebClient(token=token) if token else None
        self._fallback = ConsoleNotifier()

    @property
    def web_client(self) -> Optional[WebClient]:
        return self._client

    def send(self, message: str, channel: Optional[str] = None) -> bool:
        """メッセージ送信（失敗時はFalse）"""
        if self._client is None:
            return self._fallback.send(message, channel)
        return self.post(message, channel) is not None

    def send_error(self, error: str, channel: Optional[str] = None) -> bool:
        """エラー通知"""
        message = f"❌ 打刻に失敗しました。手動確認をお願いします（エラー: {error}）"
        return self.send(message, channel)

    def post(self, message: str, channel: Optional[str] = None) -> Optional[PostedMessage]:
        """メッセージを投稿し、後から更新できるよう投稿位置を返す"""
        if self._client is None:
            return self._fallback.post(message, channel)

        try:
            response = self._client.chat_postMessage(channel=channel or self._channel, text=message)
        except SlackApiError as e:
            logger.warning("Slackへの投稿に失敗しました: %s", e.response.get("error"))
            return None
        return PostedMessage(channel=response["channel"], ts=response["ts"])

    def update(self, posted: Optional[PostedMessage], message: str, channel: Optional[str] = None) -> bool:
        """投稿済みメッセージを書き換える（投稿位置が無ければ新規投稿）"""
        if self._client is None or posted is None:
            return self.send(message, channel)

        try:
            self._client.chat_update(channel=posted.channel, ts=posted.ts, text=message)
            return True
        except SlackApiError as e:
            logger.warning("Slackメッセージの更新に失敗しました: %s", e.response.get("error"))
            return self.send(message, channel)

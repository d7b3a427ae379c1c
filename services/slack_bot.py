import logging
from typing import Optional

from slack_sdk.socket_mode import SocketModeClient
from slack_sdk.socket_mode.request import SocketModeRequest
from slack_sdk.socket_mode.response import SocketModeResponse

from services.action_runner import ActionRunner
from services.commands import parse_command
from services.slack_client import SlackNotifier

logger = logging.getLogger(__name__)


class SlackCommandBot:
    """Socket Modeでスラッシュコマンド・メッセージを受け付ける"""

    def __init__(self, app_token: str, notifier: SlackNotifier, runner: ActionRunner):
        self._app_token = app_token
        self._notifier = notifier
        self._runner = runner
        self._client: Optional[SocketModeClient] = None

    def handle(self, client: SocketModeClient, req: SocketModeRequest) -> None:
        if req.type not in ("slash_commands", "events_api"):
            return
        client.send_socket_mode_response(SocketModeResponse(envelope_id=req.envelope_id))

        if req.type == "slash_commands":
            text = req.payload.get("command", "")
            channel = req.payload.get("channel_id")
            user = req.payload.get("user_name")
        else:
            event = req.payload.get("event", {})
            # ボット自身の投稿や編集イベントには反応しない
            if event.get("type") != "message" or event.get("bot_id") or event.get("subtype"):
                return
            text = event.get("text", "")
            channel = event.get("channel")
            user = event.get("user")

        self.dispatch(text, channel, user)

    def dispatch(self, text: str, channel: Optional[str], user: Optional[str] = None) -> None:
        command = parse_command(text)
        if command.kind is None:
            self._notifier.send(command.reply, channel=channel)
            return

        logger.info("%s が %s から要求されました", command.kind.value, user)
        self._runner.execute(command.kind, channel=channel)

    def start(self) -> None:
        self._client = SocketModeClient(
            app_token=self._app_token, web_client=self._notifier.web_client
        )
        self._client.socket_mode_request_listeners.append(self.handle)
        self._client.connect()
        logger.info("Slackコマンドの受付を開始しました")

    def stop(self) -> None:
        if self._client:
            self._client.close()

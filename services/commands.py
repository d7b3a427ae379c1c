from dataclasses import dataclass
from typing import Optional

from services.messages import HELP_TEXT
from services.models import ActionKind

COMMANDS = {
    "/clockin": ActionKind.SIGN_IN,
    "/clockout": ActionKind.SIGN_OUT,
    "/status": ActionKind.STATUS_ONLY,
}

HELP_COMMANDS = {"/help", "/start"}

HINTS = [
    (("sign in", "clock in", "punch in", "出勤"), "👋 出勤打刻は /clockin を使ってください"),
    (("sign out", "clock out", "punch out", "退勤"), "👋 退勤打刻は /clockout を使ってください"),
    (("status", "check", "状態"), "👋 勤怠状態の確認は /status を使ってください"),
]

COMMAND_LIST = "🤖 コマンド一覧:\n• /clockin\n• /clockout\n• /status\n• /help"


@dataclass(frozen=True)
class Command:
    kind: Optional[ActionKind]
    reply: Optional[str] = None


def parse_command(text: str) -> Command:
    """受信テキストを打刻操作か返信テキストに変換する"""
    words = text.strip().split()
    head = words[0].lower().split("@")[0] if words else ""

    if head in COMMANDS:
        return Command(kind=COMMANDS[head])
    if head in HELP_COMMANDS:
        return Command(kind=None, reply=HELP_TEXT)
    return Command(kind=None, reply=hint_for(text))


def hint_for(text: str) -> str:
    lowered = text.lower()
    for keywords, hint in HINTS:
        if any(k in lowered for k in keywords):
            return hint
    return COMMAND_LIST

from datetime import datetime
from typing import Optional

from services.errors import ErrorKind
from services.models import ActionKind, ActionOutcome, AttendanceState


STATE_LABELS = {
    AttendanceState.SIGNED_IN: "出勤中",
    AttendanceState.SIGNED_OUT: "退勤済み",
    AttendanceState.UNKNOWN: "不明",
}

ACTION_NAMES = {
    ActionKind.SIGN_IN: "出勤打刻",
    ActionKind.SIGN_OUT: "退勤打刻",
    ActionKind.STATUS_ONLY: "状態確認",
}

FAILURE_REASONS = {
    ErrorKind.NAVIGATION_FAILURE: "勤怠システムのページを開けませんでした",
    ErrorKind.CREDENTIAL_REJECTED: "ログインに失敗しました（ID・パスワードを確認してください）",
    ErrorKind.WIDGET_NOT_FOUND: "勤怠ウィジェットが見つかりません",
    ErrorKind.NO_ACTIONABLE_CONTROL: "打刻ボタンが見つかりません",
    ErrorKind.ACTIVATION_UNCONFIRMED: "ボタンを押しましたが状態が変わりませんでした",
    ErrorKind.MODAL_RESOLUTION_FAILED: "確認ダイアログを完了できませんでした",
    ErrorKind.VERIFICATION_INDETERMINATE: "操作後の状態を確認できませんでした",
    ErrorKind.TIMEOUT: "ページの応答がタイムアウトしました",
}

WAIT_MESSAGES = {
    ActionKind.SIGN_IN: "⏳ 出勤打刻中です…（30〜60秒ほどかかります）",
    ActionKind.SIGN_OUT: "⏳ 退勤打刻中です…（30〜60秒ほどかかります）",
    ActionKind.STATUS_ONLY: "⏳ 勤怠状態を確認しています…",
}

BUSY_MESSAGE = "⚠️ 別の打刻処理を実行中です。完了してから再度お試しください"

HELP_TEXT = (
    "🤖 勤怠打刻ボット\n\n"
    "コマンド:\n"
    "• /clockin - 出勤打刻\n"
    "• /clockout - 退勤打刻\n"
    "• /status - 現在の勤怠状態を確認\n"
    "• /help - このヘルプを表示\n\n"
    "うまくいかない場合:\n"
    "1. まず /status で現在の状態を確認してください\n"
    "2. コマンドの間は30秒ほど空けてください\n"
    "3. 失敗時のスクリーンショットは error-debug.png に保存されます"
)

UNEXPECTED_ERROR = "❌ 勤怠システムの操作中に予期しないエラーが発生しました。/status で状態を確認してください（エラー: {error}）"

STATE_EMOJI = {
    AttendanceState.SIGNED_IN: "🟢",
    AttendanceState.SIGNED_OUT: "🔴",
    AttendanceState.UNKNOWN: "⚪",
}


def _stamp(now: datetime) -> str:
    return f"📅 日付: {now:%Y-%m-%d}\n🕐 時刻: {now:%H:%M:%S}"


def format_outcome(outcome: ActionOutcome, now: Optional[datetime] = None) -> str:
    """ActionOutcomeを通知用のテキストに整形する"""
    now = now or datetime.now()

    if not outcome.success:
        lines = [f"❌ {outcome.summary}", "", _stamp(now)]
        if outcome.attempts:
            tried = ", ".join(
                f"{a.label}({'実行' if a.executed else '不可'})" for a in outcome.attempts
            )
            lines += ["", f"🔍 試した方法: {tried}"]
        lines += ["", "💡 /status で現在の状態を確認するか、少し時間をおいて再度お試しください"]
        return "\n".join(lines)

    if outcome.kind is ActionKind.STATUS_ONLY:
        detection = outcome.detection
        return "\n".join(
            [
                f"{STATE_EMOJI[outcome.state]} 状態: {STATE_LABELS[outcome.state]}",
                "",
                _stamp(now),
                "",
                f"🔘 ボタン数: {len(detection.controls)}",
                f"📊 打刻ボタン: {'あり' if detection.primary else 'なし'}",
                f"👀 履歴ボタン: {'あり' if detection.has_history_control else 'なし'}",
            ]
        )

    if outcome.no_op:
        return f"ℹ️ {outcome.summary}\n\n{_stamp(now)}"

    if outcome.warning is not None:
        return f"⚠️ {outcome.summary}\n\n{_stamp(now)}\n\n💡 /status で状態を確認してください"

    return f"✅ {outcome.summary}\n\n{_stamp(now)}\n\n🎯 使用した方法: {outcome.strategy}"

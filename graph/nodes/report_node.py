from graph.state import ActionState
from services.errors import ErrorKind
from services.messages import ACTION_NAMES, FAILURE_REASONS, STATE_LABELS
from services.models import ActionKind, ActionOutcome, AttendanceState


def report_node(state: ActionState) -> dict:
    """実行結果を ActionOutcome にまとめるノード"""
    kind = state["kind"]
    initial = state["initial"]
    final = state["final"]
    activation = state["activation"]

    def outcome(success: bool, observed, summary: str, **kwargs) -> dict:
        return {
            "outcome": ActionOutcome(
                kind=kind,
                success=success,
                state=observed.state if observed else AttendanceState.UNKNOWN,
                summary=summary,
                strategy=activation.strategy if activation else None,
                attempts=activation.attempts if activation else [],
                detection=observed,
                **kwargs,
            )
        }

    if state["error"] is not None:
        error = state["error"]
        return outcome(
            False,
            final or initial,
            f"{ACTION_NAMES[kind]}できませんでした: {FAILURE_REASONS[error]}",
            error=error,
        )

    if state["no_op"]:
        return outcome(
            True,
            initial,
            f"既に{STATE_LABELS[initial.state]}のため操作しませんでした",
            no_op=True,
        )

    if kind is ActionKind.STATUS_ONLY:
        if initial.state is AttendanceState.UNKNOWN:
            error = (
                ErrorKind.VERIFICATION_INDETERMINATE
                if initial.widget_found
                else ErrorKind.WIDGET_NOT_FOUND
            )
            return outcome(False, initial, f"状態を判定できませんでした: {FAILURE_REASONS[error]}", error=error)
        return outcome(True, initial, f"現在の状態: {STATE_LABELS[initial.state]}")

    if final.state is kind.target_state:
        return outcome(True, final, f"{ACTION_NAMES[kind]}しました")

    if final.state is AttendanceState.UNKNOWN:
        # 操作自体は成功している可能性があるため失敗扱いにしない
        return outcome(
            True,
            final,
            f"{ACTION_NAMES[kind]}の操作を行いましたが、操作後の状態を確認できませんでした",
            warning=ErrorKind.VERIFICATION_INDETERMINATE,
        )

    return outcome(
        False,
        final,
        f"{ACTION_NAMES[kind]}できませんでした: {FAILURE_REASONS[ErrorKind.ACTIVATION_UNCONFIRMED]}",
        error=ErrorKind.ACTIVATION_UNCONFIRMED,
    )

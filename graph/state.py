from typing import TypedDict, Optional

from services.errors import ErrorKind
from services.models import (
    ActionKind,
    ActionOutcome,
    ActivationResult,
    Detection,
    ModalResolution,
)


class ActionState(TypedDict):
    kind: ActionKind                        # 要求された操作
    initial: Optional[Detection]            # 操作前の状態
    activation: Optional[ActivationResult]  # 起動方法の実行結果
    modal_result: Optional[ModalResolution] # 確認ダイアログの処理結果
    final: Optional[Detection]              # 操作後の状態
    no_op: bool                             # 既に目的の状態だった
    error: Optional[ErrorKind]              # 失敗分類
    outcome: Optional[ActionOutcome]        # 最終結果


def initial_state(kind: ActionKind) -> ActionState:
    return {
        "kind": kind,
        "initial": None,
        "activation": None,
        "modal_result": None,
        "final": None,
        "no_op": False,
        "error": None,
        "outcome": None,
    }

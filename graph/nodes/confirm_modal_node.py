from graph.state import ActionState
from services.modal_handler import ModalHandler


async def confirm_modal_node(state: ActionState, modal_handler: ModalHandler = None) -> dict:
    """確認ダイアログを入力・送信するノード"""
    result = await modal_handler.resolve()
    if result.resolved:
        return {"modal_result": result}
    return {"modal_result": result, "error": result.error}

from graph.state import ActionState
from services.state_detector import StateDetector


async def verify_node(state: ActionState, detector: StateDetector = None) -> dict:
    """操作後の状態を読み直すノード（状態確認のみなら読み直さない）"""
    if not state["kind"].is_mutating:
        return {"final": state["initial"]}

    final = await detector.detect()
    return {"final": final}

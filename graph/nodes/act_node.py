from functools import partial

from graph.state import ActionState
from services.state_detector import StateDetector
from services.strategy_chain import StrategyChain


async def act_node(
    state: ActionState,
    chain: StrategyChain = None,
    detector: StateDetector = None,
) -> dict:
    """主ボタンを起動方法チェーンで押すノード"""
    initial = state["initial"]
    confirm = partial(detector.confirm_change, initial.state, initial.modal.present)

    result = await chain.run(initial.primary, confirm)
    if result.success:
        return {"activation": result}
    return {"activation": result, "error": result.error}

# graph/graph.py
from langgraph.graph import StateGraph, END
from graph.state import ActionState


def route_after_detect(state: ActionState) -> str:
    if state["error"] is not None:
        return "report"
    kind = state["kind"]
    if not kind.is_mutating:
        return "verify"
    if state["initial"].state is kind.target_state:
        return "short_circuit"
    return "act"


def route_after_act(state: ActionState) -> str:
    if state["error"] is not None:
        return "report"
    if state["activation"].modal_opened:
        return "confirm_modal"
    return "verify"


def route_after_modal(state: ActionState) -> str:
    if state["error"] is not None:
        return "report"
    return "verify"


def build_graph(detector=None, chain=None, modal_handler=None):
    """打刻処理の状態遷移グラフを構築して返す

    detect → (short_circuit | act | verify) → [confirm_modal] → verify → report

    各ノード関数はサービス依存を持つため、functools.partialでラップして
    LangGraphが期待する (state) -> dict シグネチャに合わせる。
    """
    from functools import partial
    from graph.nodes.detect_node import detect_node
    from graph.nodes.short_circuit_node import short_circuit_node
    from graph.nodes.act_node import act_node
    from graph.nodes.confirm_modal_node import confirm_modal_node
    from graph.nodes.verify_node import verify_node
    from graph.nodes.report_node import report_node

    detect_wrapped = partial(detect_node, detector=detector)
    act_wrapped = partial(act_node, chain=chain, detector=detector)
    confirm_modal_wrapped = partial(confirm_modal_node, modal_handler=modal_handler)
    verify_wrapped = partial(verify_node, detector=detector)

    workflow = StateGraph(ActionState)

    workflow.add_node("detect", detect_wrapped)
    workflow.add_node("short_circuit", short_circuit_node)
    workflow.add_node("act", act_wrapped)
    workflow.add_node("confirm_modal", confirm_modal_wrapped)
    workflow.add_node("verify", verify_wrapped)
    workflow.add_node("report", report_node)

    workflow.set_entry_point("detect")

    workflow.add_conditional_edges(
        "detect",
        route_after_detect,
        {
            "short_circuit": "short_circuit",
            "act": "act",
            "verify": "verify",
            "report": "report",
        },
    )
    workflow.add_conditional_edges(
        "act",
        route_after_act,
        {"confirm_modal": "confirm_modal", "verify": "verify", "report": "report"},
    )
    workflow.add_conditional_edges(
        "confirm_modal",
        route_after_modal,
        {"verify": "verify", "report": "report"},
    )

    workflow.add_edge("short_circuit", "report")
    workflow.add_edge("verify", "report")
    workflow.add_edge("report", END)

    return workflow.compile()

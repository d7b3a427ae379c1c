# graph/nodes/short_circuit_node.py
from graph.state import ActionState


def short_circuit_node(state: ActionState) -> dict:
    """既に目的の状態なら何も操作せずに終えるノード"""
    return {"final": state["initial"], "no_op": True}

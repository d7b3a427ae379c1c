from graph.state import ActionState
from services.errors import ErrorKind
from services.models import AttendanceState
from services.state_detector import StateDetector


async def detect_node(state: ActionState, detector: StateDetector = None) -> dict:
    """操作前の勤怠状態を読み取るノード"""
    detection = await detector.detect()

    # 状態不明のまま打刻には進まない
    if state["kind"].is_mutating and detection.state is AttendanceState.UNKNOWN:
        error = (
            ErrorKind.NO_ACTIONABLE_CONTROL
            if detection.widget_found
            else ErrorKind.WIDGET_NOT_FOUND
        )
        return {"initial": detection, "error": error}

    return {"initial": detection}

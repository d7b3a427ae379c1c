from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from services.errors import ErrorKind


class AttendanceState(str, Enum):
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    UNKNOWN = "unknown"


class ActionKind(str, Enum):
    SIGN_IN = "signin"
    SIGN_OUT = "signout"
    STATUS_ONLY = "status"

    @property
    def target_state(self) -> Optional[AttendanceState]:
        """操作後に期待される状態（STATUS_ONLYはNone）"""
        if self is ActionKind.SIGN_IN:
            return AttendanceState.SIGNED_IN
        if self is ActionKind.SIGN_OUT:
            return AttendanceState.SIGNED_OUT
        return None

    @property
    def is_mutating(self) -> bool:
        return self is not ActionKind.STATUS_ONLY


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class ButtonDescriptor:
    """ウィジェット内の操作可能なコントロール（ネイティブ/カスタム要素を区別しない）"""
    label: str
    name: str
    visible: bool
    primary: bool
    box: Optional[BoundingBox]
    widget: str
    handle: str


@dataclass(frozen=True)
class ModalState:
    present: bool
    text: str = ""
    requires_input: bool = False


@dataclass(frozen=True)
class Detection:
    """State Detectorの読み取り結果"""
    state: AttendanceState
    widget_found: bool
    controls: tuple[ButtonDescriptor, ...] = ()
    primary: Optional[ButtonDescriptor] = None
    has_history_control: bool = False
    modal: ModalState = field(default_factory=lambda: ModalState(present=False))


@dataclass(frozen=True)
class Confirmation:
    """操作後に観測された変化"""
    modal_opened: bool
    state_changed: bool
    state: AttendanceState

    @property
    def confirmed(self) -> bool:
        return self.modal_opened or self.state_changed


@dataclass
class StrategyAttempt:
    label: str
    executed: bool
    confirmed: bool
    error: Optional[str] = None


@dataclass
class ActivationResult:
    success: bool
    strategy: Optional[str] = None
    modal_opened: bool = False
    attempts: list[StrategyAttempt] = field(default_factory=list)
    error: Optional[ErrorKind] = None


@dataclass
class ModalResolution:
    present: bool
    resolved: bool
    filled: bool = False
    text: str = ""
    error: Optional[ErrorKind] = None


@dataclass
class ActionOutcome:
    kind: ActionKind
    success: bool
    state: AttendanceState
    summary: str
    error: Optional[ErrorKind] = None
    warning: Optional[ErrorKind] = None
    no_op: bool = False
    strategy: Optional[str] = None
    attempts: list[StrategyAttempt] = field(default_factory=list)
    detection: Optional[Detection] = None

    @property
    def verified(self) -> bool:
        return self.success and self.warning is None

from enum import Enum


class ErrorKind(str, Enum):
    NAVIGATION_FAILURE = "navigation_failure"
    CREDENTIAL_REJECTED = "credential_rejected"
    WIDGET_NOT_FOUND = "widget_not_found"
    NO_ACTIONABLE_CONTROL = "no_actionable_control"
    ACTIVATION_UNCONFIRMED = "activation_unconfirmed"
    MODAL_RESOLUTION_FAILED = "modal_resolution_failed"
    VERIFICATION_INDETERMINATE = "verification_indeterminate"
    TIMEOUT = "timeout"


class AttendanceError(Exception):
    """勤怠操作中のエラー（分類付き）"""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class StepTimeout(AttendanceError):
    """待機処理のタイムアウト"""

    def __init__(self, message: str):
        super().__init__(ErrorKind.TIMEOUT, message)


class ConfigError(ValueError):
    """設定値が不正"""

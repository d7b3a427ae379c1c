import copy
from contextlib import asynccontextmanager
from typing import Any, Optional

import pytest

from services import controls as scripts
from services.config_loader import DEFAULT_CONFIG
from services.errors import AttendanceError, ErrorKind, StepTimeout
from services.models import BoundingBox
from services.page_driver import PageDriver

SELECTORS = DEFAULT_CONFIG["browser"]["selectors"]


def make_config(**browser_overrides) -> dict:
    config = copy.deepcopy(DEFAULT_CONFIG)
    config["browser"].update(
        {
            "settle_ms": 0,
            "confirm_timeout_ms": 20,
            "poll_interval_ms": 10,
            "screenshot_path": "error-debug.png",
        }
    )
    config["browser"].update(browser_overrides)
    config["modal"]["submit_settle_ms"] = 0
    return config


class FakeAttendancePage(PageDriver):
    """勤怠ウィジェットとカスタム要素のモーダルを模したページ"""

    def __init__(
        self,
        signed_in: bool = False,
        widget: bool = True,
        modal_on_press: bool = False,
        modal_requires_input: bool = True,
        modal_field: bool = True,
        modal_submit: bool = True,
        direct: str = "works",
        geometric: str = "works",
        keyboard: str = "works",
        login_ok: bool = True,
        navigation_ok: bool = True,
        fails_on: Optional[str] = None,
    ):
        self.signed_in = signed_in
        self.widget = widget
        self.modal_on_press = modal_on_press
        self.modal_requires_input = modal_requires_input
        self.modal_field = modal_field
        self.modal_submit = modal_submit
        self.behaviour = {"direct": direct, "geometric": geometric, "keyboard": keyboard}
        self.login_ok = login_ok
        self.navigation_ok = navigation_ok
        # このスクリプトの実行時にページ遷移でコンテキストが破棄されたことにする
        self.fails_on = fails_on

        self.modal_open = False
        self.field_value: Optional[str] = None
        self.activations: list[str] = []
        self.filled: dict[str, str] = {}
        self.logged_in = False
        self.screenshots: list[str] = []
        self.closed = False

    # --- 模擬ページの挙動 ---

    def _controls(self) -> list[dict]:
        box = {"x": 10, "y": 20, "width": 100, "height": 40}
        if self.signed_in:
            return [
                {"index": 0, "label": "Sign Out", "name": "", "primary": True, "visible": True, "box": box},
                {"index": 1, "label": "View Swipes", "name": "View Swipes", "primary": False, "visible": True, "box": box},
            ]
        return [{"index": 0, "label": "Sign In", "name": "", "primary": True, "visible": True, "box": box}]

    def _press(self, method: str) -> bool:
        self.activations.append(method)
        behaviour = self.behaviour[method]
        if behaviour == "raises":
            raise RuntimeError(f"{method} rejected")
        if behaviour == "missing":
            return False
        if behaviour == "works":
            if self.modal_on_press:
                self.modal_open = True
            else:
                self.signed_in = not self.signed_in
        return True

    # --- PageDriver ---

    async def navigate(self, url: str) -> None:
        if not self.navigation_ok:
            raise AttendanceError(ErrorKind.NAVIGATION_FAILURE, f"cannot open {url}")

    async def fill(self, selector: str, value: str) -> None:
        self.filled[selector] = value

    async def click(self, selector: str) -> None:
        if selector == SELECTORS["login_button"]:
            self.logged_in = self.login_ok

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if script == self.fails_on:
            raise AttendanceError(ErrorKind.NAVIGATION_FAILURE, "Execution context was destroyed")
        if script == scripts.ENUMERATE_CONTROLS:
            return self._controls() if self.widget else None
        if script == scripts.ACTIVATE_CONTROL:
            return self._press("direct")
        if script == scripts.READ_MODAL:
            return {
                "present": self.modal_open,
                "text": "Work location" if self.modal_open else "",
                "requiresInput": self.modal_open and self.modal_requires_input,
            }
        if script == scripts.FILL_MODAL_FIELD:
            if not (self.modal_open and self.modal_field):
                return False
            self.field_value = arg["value"]
            return True
        if script == scripts.SUBMIT_MODAL:
            if not (self.modal_open and self.modal_submit):
                return False
            self.modal_open = False
            self.signed_in = not self.signed_in
            return True
        if script == scripts.READ_LABEL:
            return "Sign Out" if self.signed_in else "Sign In"
        if script == scripts.READ_VISIBILITY:
            return self.widget
        raise AssertionError(f"unexpected script: {script[:40]}")

    async def wait_for(self, selector: str, timeout_ms: int, state: str = "attached") -> None:
        if selector == SELECTORS["attendance_widget"] and not self.widget:
            raise StepTimeout(f"{selector} not found")

    async def wait_for_condition(self, script: str, arg: Any, timeout_ms: int) -> None:
        if script == scripts.MODAL_CLOSED and self.modal_open:
            raise StepTimeout("modal still open")

    async def wait_for_settle(self, timeout_ms: int) -> None:
        pass

    async def pause(self, ms: int) -> None:
        pass

    async def is_visible(self, selector: str) -> bool:
        if selector == SELECTORS["password_field"]:
            return not self.logged_in
        return True

    async def bounding_box_of(self, selector: str) -> Optional[BoundingBox]:
        return BoundingBox(x=10, y=20, width=100, height=40)

    async def mouse_click(self, x: float, y: float) -> None:
        self._press("geometric")

    async def dispatch_key_event(self, selector: str, key: str, phase: str) -> None:
        if phase == "keyup":
            self._press("keyboard")

    async def screenshot(self, path: str) -> None:
        self.screenshots.append(path)

    async def close(self) -> None:
        self.closed = True


def driver_factory_for(page: FakeAttendancePage):
    @asynccontextmanager
    async def factory(browser_config: dict):
        try:
            yield page
        finally:
            await page.close()

    return factory


@pytest.fixture
def config():
    return make_config()

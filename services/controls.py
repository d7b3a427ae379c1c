"""ウィジェット内コントロールの操作

勤怠ウィジェットのボタンはスクリプトで描画されるカスタム要素（gt-button など）で、
通常のフォーム要素の性質を持たない。ここでは「ラベル・役割名・可視性を持つコントロール」
として一律に扱い、DOMスクリプトを PageDriver.evaluate 経由で実行する。
"""
from typing import Optional

from services.models import BoundingBox, ButtonDescriptor, ModalState
from services.page_driver import PageDriver


# 列挙したコントロールに付与する目印属性
HANDLE_ATTRIBUTE = "data-attendance-control"

ENUMERATE_CONTROLS = """
({widget, control, primary, attr}) => {
  const root = document.querySelector(widget);
  if (!root) return null;
  return Array.from(root.querySelectorAll(control)).map((el, index) => {
    el.setAttribute(attr, String(index));
    const rect = el.getBoundingClientRect();
    return {
      index: index,
      label: (el.textContent || el.value || '').trim(),
      name: el.getAttribute('name') || '',
      primary: el.matches(primary),
      visible: el.offsetParent !== null,
      box: {x: rect.left, y: rect.top, width: rect.width, height: rect.height},
    };
  });
}
"""

ACTIVATE_CONTROL = """
(selector) => {
  const el = document.querySelector(selector);
  if (!el) return false;
  el.click();
  return true;
}
"""

READ_LABEL = """
(selector) => {
  const el = document.querySelector(selector);
  return el ? (el.textContent || el.value || '').trim() : null;
}
"""

READ_VISIBILITY = """
(selector) => {
  const el = document.querySelector(selector);
  return el !== null && el.offsetParent !== null;
}
"""

READ_MODAL = """
({modal, fieldHost}) => {
  const dialog = document.querySelector(modal);
  if (!dialog) return {present: false, text: '', requiresInput: false};
  const requiresInput = dialog.querySelector(fieldHost + ', textarea, input:not([type=hidden])') !== null;
  return {present: true, text: (dialog.textContent || '').trim(), requiresInput: requiresInput};
}
"""

FILL_MODAL_FIELD = """
({modal, fieldHost, value}) => {
  const dialog = document.querySelector(modal);
  if (!dialog) return false;
  const host = dialog.querySelector(fieldHost);
  let field = null;
  if (host) {
    field = (host.shadowRoot && host.shadowRoot.querySelector('textarea, input')) ||
            host.querySelector('textarea, input');
  }
  if (!field) field = dialog.querySelector('textarea, input:not([type=hidden])');
  if (!field) return false;
  field.value = value;
  field.dispatchEvent(new Event('input', {bubbles: true}));
  field.dispatchEvent(new Event('change', {bubbles: true}));
  return true;
}
"""

SUBMIT_MODAL = """
({modal, submit}) => {
  const dialog = document.querySelector(modal);
  if (!dialog) return false;
  const button = dialog.querySelector(submit);
  if (!button) return false;
  button.click();
  return true;
}
"""

MODAL_CLOSED = """
(modal) => document.querySelector(modal) === null
"""


class WidgetControls:
    """勤怠ウィジェットとモーダルに対する操作セット"""

    def __init__(self, driver: PageDriver, selectors: dict):
        self._driver = driver
        self._selectors = selectors

    @property
    def driver(self) -> PageDriver:
        return self._driver

    def handle_for(self, index: int) -> str:
        return f'{self._selectors["attendance_widget"]} [{HANDLE_ATTRIBUTE}="{index}"]'

    async def locate(self) -> Optional[list[ButtonDescriptor]]:
        """ウィジェット内のコントロールを列挙する（ウィジェットが無ければNone）"""
        raw = await self._driver.evaluate(
            ENUMERATE_CONTROLS,
            {
                "widget": self._selectors["attendance_widget"],
                "control": self._selectors["widget_control"],
                "primary": self._selectors["primary_control"],
                "attr": HANDLE_ATTRIBUTE,
            },
        )
        if raw is None:
            return None
        return [self._descriptor(item) for item in raw]

    def _descriptor(self, item: dict) -> ButtonDescriptor:
        box = item.get("box")
        return ButtonDescriptor(
            label=item.get("label", ""),
            name=item.get("name", ""),
            visible=bool(item.get("visible")),
            primary=bool(item.get("primary")),
            box=BoundingBox(**box) if box else None,
            widget=self._selectors["attendance_widget"],
            handle=self.handle_for(item["index"]),
        )

    async def activate(self, control: ButtonDescriptor) -> bool:
        return bool(await self._driver.evaluate(ACTIVATE_CONTROL, control.handle))

    async def read_label(self, control: ButtonDescriptor) -> Optional[str]:
        return await self._driver.evaluate(READ_LABEL, control.handle)

    async def read_visibility(self, control: ButtonDescriptor) -> bool:
        return bool(await self._driver.evaluate(READ_VISIBILITY, control.handle))

    async def read_modal(self) -> ModalState:
        raw = await self._driver.evaluate(
            READ_MODAL,
            {"modal": self._selectors["modal"], "fieldHost": self._selectors["modal_field_host"]},
        )
        return ModalState(
            present=bool(raw["present"]),
            text=raw.get("text", ""),
            requires_input=bool(raw.get("requiresInput")),
        )

    async def fill_modal_field(self, value: str) -> bool:
        return bool(
            await self._driver.evaluate(
                FILL_MODAL_FIELD,
                {
                    "modal": self._selectors["modal"],
                    "fieldHost": self._selectors["modal_field_host"],
                    "value": value,
                },
            )
        )

    async def submit_modal(self) -> bool:
        return bool(
            await self._driver.evaluate(
                SUBMIT_MODAL,
                {"modal": self._selectors["modal"], "submit": self._selectors["modal_submit"]},
            )
        )

    async def wait_modal_closed(self, timeout_ms: int) -> None:
        await self._driver.wait_for_condition(MODAL_CLOSED, self._selectors["modal"], timeout_ms)

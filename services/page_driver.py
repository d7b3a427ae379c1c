import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from services.errors import AttendanceError, ErrorKind, StepTimeout
from services.models import BoundingBox

logger = logging.getLogger(__name__)

KEY_PHASES = ("keydown", "keypress", "keyup")


class PageDriver(ABC):
    """ページ操作の抽象インターフェース（エンジンはこの契約のみに依存する）"""

    @abstractmethod
    async def navigate(self, url: str) -> None:
        ...

    @abstractmethod
    async def fill(self, selector: str, value: str) -> None:
        ...

    @abstractmethod
    async def click(self, selector: str) -> None:
        ...

    @abstractmethod
    async def evaluate(self, script: str, arg: Any = None) -> Any:
        ...

    @abstractmethod
    async def wait_for(self, selector: str, timeout_ms: int, state: str = "attached") -> None:
        """セレクタの出現を待つ。超過時はStepTimeout"""
        ...

    @abstractmethod
    async def wait_for_condition(self, script: str, arg: Any, timeout_ms: int) -> None:
        """スクリプトが真を返すまで待つ。超過時はStepTimeout"""
        ...

    @abstractmethod
    async def wait_for_settle(self, timeout_ms: int) -> None:
        ...

    @abstractmethod
    async def pause(self, ms: int) -> None:
        ...

    @abstractmethod
    async def is_visible(self, selector: str) -> bool:
        ...

    @abstractmethod
    async def bounding_box_of(self, selector: str) -> Optional[BoundingBox]:
        ...

    @abstractmethod
    async def mouse_click(self, x: float, y: float) -> None:
        ...

    @abstractmethod
    async def dispatch_key_event(self, selector: str, key: str, phase: str) -> None:
        ...

    @abstractmethod
    async def screenshot(self, path: str) -> None:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...


class PlaywrightPageDriver(PageDriver):
    """playwright.async_api による PageDriver 実装"""

    def __init__(self, page):
        self._page = page

    @property
    def url(self) -> str:
        return self._page.url

    async def navigate(self, url: str) -> None:
        from playwright.async_api import Error as PlaywrightError
        from playwright.async_api import TimeoutError as PWTimeout

        try:
            await self._page.goto(url, wait_until="networkidle")
        except PWTimeout as e:
            raise StepTimeout(f"ページ読み込みがタイムアウトしました: {url}") from e
        except PlaywrightError as e:
            raise AttendanceError(
                ErrorKind.NAVIGATION_FAILURE, f"ページを開けませんでした: {url} ({e.message})"
            ) from e

    async def fill(self, selector: str, value: str) -> None:
        async with _converted(f"入力欄 {selector}"):
            await self._page.fill(selector, value)

    async def click(self, selector: str) -> None:
        async with _converted(f"クリック対象 {selector}"):
            await self._page.click(selector)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        async with _converted("スクリプト実行"):
            return await self._page.evaluate(script, arg)

    async def wait_for(self, selector: str, timeout_ms: int, state: str = "attached") -> None:
        async with _converted(f"要素 {selector}"):
            await self._page.wait_for_selector(selector, state=state, timeout=timeout_ms)

    async def wait_for_condition(self, script: str, arg: Any, timeout_ms: int) -> None:
        async with _converted("ページ状態の変化"):
            await self._page.wait_for_function(script, arg=arg, timeout=timeout_ms)

    async def wait_for_settle(self, timeout_ms: int) -> None:
        async with _converted("ネットワークの安定"):
            await self._page.wait_for_load_state("networkidle", timeout=timeout_ms)

    async def pause(self, ms: int) -> None:
        await self._page.wait_for_timeout(ms)

    async def is_visible(self, selector: str) -> bool:
        async with _converted(f"要素 {selector}"):
            return await self._page.locator(selector).first.is_visible()

    async def bounding_box_of(self, selector: str) -> Optional[BoundingBox]:
        async with _converted(f"要素 {selector}"):
            box = await self._page.locator(selector).first.bounding_box()
        if box is None:
            return None
        return BoundingBox(x=box["x"], y=box["y"], width=box["width"], height=box["height"])

    async def mouse_click(self, x: float, y: float) -> None:
        await self._page.mouse.click(x, y)

    async def dispatch_key_event(self, selector: str, key: str, phase: str) -> None:
        if phase == KEY_PHASES[0]:
            await self._page.focus(selector)
        await self._page.dispatch_event(selector, phase, {"key": key, "bubbles": True})

    async def screenshot(self, path: str) -> None:
        await self._page.screenshot(path=path, full_page=True)

    async def close(self) -> None:
        await self._page.close()


@asynccontextmanager
async def _converted(what: str) -> AsyncIterator[None]:
    """PlaywrightのエラーをAttendanceErrorに変換する

    TimeoutErrorはStepTimeout、それ以外（ページ遷移でコンテキストが破棄された等）は
    NAVIGATION_FAILUREとする。
    """
    from playwright.async_api import Error as PlaywrightError
    from playwright.async_api import TimeoutError as PWTimeout

    try:
        yield
    except PWTimeout as e:
        raise StepTimeout(f"{what} の待機がタイムアウトしました") from e
    except PlaywrightError as e:
        raise AttendanceError(
            ErrorKind.NAVIGATION_FAILURE, f"{what} に失敗しました ({e.message})"
        ) from e


@asynccontextmanager
async def open_page_driver(browser_config: dict) -> AsyncIterator[PlaywrightPageDriver]:
    """ブラウザを起動し、終了時に必ず閉じる"""
    from playwright.async_api import async_playwright

    playwright = await async_playwright().start()
    browser = None
    try:
        browser = await playwright.chromium.launch(
            headless=browser_config["headless"],
            args=browser_config.get("launch_args", []),
        )
        page = await browser.new_page()
        page.set_default_timeout(browser_config["default_timeout_ms"])
        yield PlaywrightPageDriver(page)
    finally:
        try:
            if browser is not None:
                await browser.close()
        finally:
            await playwright.stop()
            logger.info("ブラウザを閉じました")

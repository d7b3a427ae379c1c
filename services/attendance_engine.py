import logging
from typing import Callable

from graph.graph import build_graph
from graph.state import initial_state
from services.controls import WidgetControls
from services.errors import AttendanceError, ConfigError, ErrorKind, StepTimeout
from services.messages import ACTION_NAMES, FAILURE_REASONS
from services.modal_handler import ModalHandler
from services.models import ActionKind, ActionOutcome, AttendanceState
from services.page_driver import PageDriver, open_page_driver
from services.state_detector import StateDetector
from services.strategy_chain import StrategyChain, resolve_strategies

logger = logging.getLogger(__name__)


class AttendanceEngine:
    """Playwrightで勤怠システムにログインし、出勤・退勤・状態確認を行う

    1回の perform_action ごとにブラウザを起動して閉じる。状態は毎回ページから読み直し、
    呼び出しをまたいで保持しない。同じアカウントへの同時実行は呼び出し側で直列化すること。
    """

    def __init__(
        self,
        url: str,
        user: str,
        password: str,
        config: dict,
        driver_factory: Callable = open_page_driver,
    ):
        self._url = url
        self._user = user
        self._password = password
        self._config = config
        self._browser = config["browser"]
        self._selectors = self._browser["selectors"]
        self._strategies = resolve_strategies(config["strategies"])
        if self._browser["poll_interval_ms"] <= 0:
            raise ConfigError("browser.poll_interval_ms は1以上にしてください")
        self._driver_factory = driver_factory

    async def perform_action(self, kind: ActionKind) -> ActionOutcome:
        logger.info("%s を開始します", ACTION_NAMES[kind])
        async with self._driver_factory(self._browser) as driver:
            try:
                await self.ensure_logged_in(driver)
                outcome = await self.run(driver, kind)
            except AttendanceError as e:
                logger.error("%s に失敗しました (%s): %s", ACTION_NAMES[kind], e.kind.value, e)
                await self._capture(driver)
                return ActionOutcome(
                    kind=kind,
                    success=False,
                    state=AttendanceState.UNKNOWN,
                    summary=f"{ACTION_NAMES[kind]}できませんでした: {FAILURE_REASONS[e.kind]}",
                    error=e.kind,
                )

            if not outcome.success:
                await self._capture(driver)
            logger.info(
                "%s 完了: success=%s state=%s error=%s",
                ACTION_NAMES[kind],
                outcome.success,
                outcome.state.value,
                outcome.error.value if outcome.error else None,
            )
            return outcome

    async def run(self, driver: PageDriver, kind: ActionKind) -> ActionOutcome:
        """ログイン済みのページに対して状態遷移グラフを実行する"""
        controls = WidgetControls(driver, self._selectors)
        detector = StateDetector(controls, self._config)
        graph = build_graph(
            detector=detector,
            chain=StrategyChain(controls, self._strategies),
            modal_handler=ModalHandler(controls, self._config),
        )
        result = await graph.ainvoke(initial_state(kind))
        return result["outcome"]

    async def ensure_logged_in(self, driver: PageDriver) -> None:
        """ログインしてダッシュボードの描画を待つ"""
        timeout = self._browser["login_timeout_ms"]
        await driver.navigate(self._url)

        try:
            await driver.wait_for(self._selectors["username_field"], timeout, state="visible")
        except StepTimeout as e:
            raise AttendanceError(
                ErrorKind.NAVIGATION_FAILURE, "ログインフォームが見つかりません"
            ) from e

        await driver.fill(self._selectors["username_field"], self._user)
        await driver.fill(self._selectors["password_field"], self._password)
        await driver.click(self._selectors["login_button"])

        try:
            await driver.wait_for_settle(timeout)
        except StepTimeout:
            logger.warning("ログイン後のページが落ち着きませんでした。続行します")

        if await driver.is_visible(self._selectors["password_field"]):
            raise AttendanceError(ErrorKind.CREDENTIAL_REJECTED, "ログイン画面から先に進めません")

        # Angularのウィジェット描画待ち
        await driver.pause(self._browser["settle_ms"])
        logger.info("ダッシュボードを読み込みました")

    async def _capture(self, driver: PageDriver) -> None:
        path = self._browser.get("screenshot_path")
        if not path:
            return
        try:
            await driver.screenshot(path)
            logger.info("デバッグ用スクリーンショットを保存しました: %s", path)
        except Exception as e:
            logger.warning("スクリーンショットの保存に失敗しました: %s", e)

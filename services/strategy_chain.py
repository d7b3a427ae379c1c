import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from services.controls import WidgetControls
from services.errors import ConfigError, ErrorKind
from services.models import (
    ActivationResult,
    ButtonDescriptor,
    Confirmation,
    StrategyAttempt,
)
from services.page_driver import KEY_PHASES

logger = logging.getLogger(__name__)

ActivateFunc = Callable[[WidgetControls, ButtonDescriptor], Awaitable[bool]]
ConfirmFunc = Callable[[], Awaitable[Confirmation]]

ACTIVATION_KEY = "Enter"


@dataclass(frozen=True)
class Strategy:
    """コントロールを起動する1つの方法

    activate は操作を実行できたらTrue、対象が見つからない等で実行できなければFalseを返す。
    """
    label: str
    activate: ActivateFunc


async def direct_invocation(controls: WidgetControls, control: ButtonDescriptor) -> bool:
    """要素のclick()を直接呼ぶ"""
    return await controls.activate(control)


async def geometric_invocation(controls: WidgetControls, control: ButtonDescriptor) -> bool:
    """バウンディングボックス中心をマウスでクリックする"""
    # 非表示の要素の座標をクリックすると別の要素を押してしまう
    if not await controls.read_visibility(control):
        return False
    box = await controls.driver.bounding_box_of(control.handle) or control.box
    if box is None or box.is_empty:
        return False
    x, y = box.center
    logger.info("座標 (%.1f, %.1f) をクリックします", x, y)
    await controls.driver.mouse_click(x, y)
    return True


async def keyboard_invocation(controls: WidgetControls, control: ButtonDescriptor) -> bool:
    """フォーカスしてEnterキーのイベント列を送る"""
    for phase in KEY_PHASES:
        await controls.driver.dispatch_key_event(control.handle, ACTIVATION_KEY, phase)
    return True


STRATEGIES: dict[str, Strategy] = {
    "direct": Strategy("direct", direct_invocation),
    "geometric": Strategy("geometric", geometric_invocation),
    "keyboard": Strategy("keyboard", keyboard_invocation),
}

DEFAULT_ORDER = ("direct", "geometric", "keyboard")


def resolve_strategies(labels: Sequence[str]) -> list[Strategy]:
    """設定のラベル列をStrategyに解決する"""
    unknown = [label for label in labels if label not in STRATEGIES]
    if unknown:
        raise ConfigError(f"未知の起動方法: {', '.join(unknown)}")
    if not labels:
        raise ConfigError("起動方法が1つも設定されていません")
    return [STRATEGIES[label] for label in labels]


class StrategyChain:
    """起動方法を順に試し、変化が確認できた時点で止める"""

    def __init__(self, controls: WidgetControls, strategies: Sequence[Strategy]):
        self._controls = controls
        self._strategies = list(strategies)

    @property
    def labels(self) -> list[str]:
        return [s.label for s in self._strategies]

    async def run(
        self, control: Optional[ButtonDescriptor], confirm: ConfirmFunc
    ) -> ActivationResult:
        if control is None:
            logger.warning("主ボタンが見つからないため操作できません")
            return ActivationResult(success=False, error=ErrorKind.NO_ACTIONABLE_CONTROL)

        if await self._controls.read_label(control) is None:
            logger.warning("主ボタンがページから消えました: %s", control.handle)
            return ActivationResult(success=False, error=ErrorKind.NO_ACTIONABLE_CONTROL)

        attempts: list[StrategyAttempt] = []
        for strategy in self._strategies:
            logger.info("起動方法 %s を試します: %r", strategy.label, control.label)
            try:
                executed = await strategy.activate(self._controls, control)
            except Exception as e:
                logger.warning("起動方法 %s でエラー: %s", strategy.label, e)
                attempts.append(StrategyAttempt(strategy.label, executed=False, confirmed=False, error=str(e)))
                continue

            if not executed:
                logger.info("起動方法 %s は対象を操作できませんでした", strategy.label)
                attempts.append(StrategyAttempt(strategy.label, executed=False, confirmed=False))
                continue

            confirmation = await confirm()
            attempts.append(
                StrategyAttempt(strategy.label, executed=True, confirmed=confirmation.confirmed)
            )
            if confirmation.confirmed:
                logger.info(
                    "起動方法 %s で変化を確認しました (モーダル=%s, 状態=%s)",
                    strategy.label,
                    confirmation.modal_opened,
                    confirmation.state.value,
                )
                return ActivationResult(
                    success=True,
                    strategy=strategy.label,
                    modal_opened=confirmation.modal_opened,
                    attempts=attempts,
                )
            logger.info("起動方法 %s の後に変化がありません", strategy.label)

        error = (
            ErrorKind.ACTIVATION_UNCONFIRMED
            if any(a.executed for a in attempts)
            else ErrorKind.NO_ACTIONABLE_CONTROL
        )
        logger.warning("すべての起動方法が失敗しました: %s", error.value)
        return ActivationResult(success=False, attempts=attempts, error=error)

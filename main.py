"""勤怠打刻エージェント - エントリーポイント"""
import argparse
import asyncio
import logging
import os
import signal
import sys
import time

from dotenv import load_dotenv

from services.action_runner import ActionRunner
from services.attendance_engine import AttendanceEngine
from services.config_loader import load_config
from services.messages import format_outcome
from services.models import ActionKind
from services.slack_client import ConsoleNotifier, SlackNotifier
from schedulers.scheduler import AttendanceScheduler

logger = logging.getLogger("attendance_agent")

ONE_SHOT_COMMANDS = {
    "signin": ActionKind.SIGN_IN,
    "signout": ActionKind.SIGN_OUT,
    "status": ActionKind.STATUS_ONLY,
}


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_services(config: dict):
    """設定と環境変数からエンジンと通知サービスを生成"""
    load_dotenv()

    engine = AttendanceEngine(
        url=os.getenv("HR_URL", ""),
        user=os.getenv("HR_USER", ""),
        password=os.getenv("HR_PASS", ""),
        config=config,
    )

    slack_config = config["slack"]
    slack_token = os.getenv("SLACK_BOT_TOKEN", "")
    slack_channel = os.getenv("SLACK_NOTIFY_CHANNEL", slack_config.get("notify_channel", ""))
    if slack_config["enabled"] and slack_token:
        notifier = SlackNotifier(token=slack_token, channel=slack_channel)
    else:
        notifier = ConsoleNotifier()

    return engine, notifier


def run_once(engine: AttendanceEngine, kind: ActionKind) -> int:
    """1回だけ実行して結果を表示する"""
    outcome = asyncio.run(engine.perform_action(kind))
    print(format_outcome(outcome))
    return 0 if outcome.success else 1


def run_bot(engine: AttendanceEngine, notifier, config: dict) -> int:
    """Slackコマンド受付と定時打刻を常駐で行う"""
    from services.slack_bot import SlackCommandBot

    runner = ActionRunner(engine, notifier)

    app_token = os.getenv("SLACK_APP_TOKEN", "")
    if not app_token or not isinstance(notifier, SlackNotifier):
        logger.error("SLACK_APP_TOKEN と SLACK_BOT_TOKEN を設定してください")
        return 1

    bot = SlackCommandBot(app_token=app_token, notifier=notifier, runner=runner)
    bot.start()

    scheduler = None
    if config["scheduler"]["enabled"]:
        scheduler = AttendanceScheduler(
            config["scheduler"],
            sign_in_job=lambda: runner.execute(ActionKind.SIGN_IN),
            sign_out_job=lambda: runner.execute(ActionKind.SIGN_OUT),
        )
        scheduler.start()
        logger.info(
            "定時打刻を有効にしました (出勤 %s / 退勤 %s)",
            config["scheduler"]["sign_in_time"],
            config["scheduler"]["sign_out_time"],
        )

    def shutdown(signum, frame):
        logger.info("停止中...")
        if scheduler:
            scheduler.stop()
        bot.stop()
        logger.info("停止しました")
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    logger.info("Ctrl+Cで停止します")
    while True:
        time.sleep(1)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="GreytHR 勤怠打刻エージェント")
    parser.add_argument(
        "command",
        choices=[*ONE_SHOT_COMMANDS, "bot"],
        help="signin / signout / status は1回実行、bot はSlack常駐",
    )
    parser.add_argument("--config", default="config.yaml", help="設定ファイルのパス")
    parser.add_argument("-v", "--verbose", action="store_true", help="デバッグログを出力")
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    config = load_config(args.config)
    engine, notifier = create_services(config)

    if args.command == "bot":
        return run_bot(engine, notifier, config)
    return run_once(engine, ONE_SHOT_COMMANDS[args.command])


if __name__ == "__main__":
    sys.exit(main())

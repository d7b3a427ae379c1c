# schedulers/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from typing import Callable


def _parse_time(time_str: str) -> tuple[int, int]:
    """HH:MM形式の文字列を(時, 分)に変換"""
    h, m = map(int, time_str.split(":"))
    return h, m


class AttendanceScheduler:
    """APSchedulerによる出勤・退勤の定時実行"""

    def __init__(self, config: dict, sign_in_job: Callable, sign_out_job: Callable):
        self._config = config
        self._scheduler = BackgroundScheduler()
        for job_id, time_key, func in (
            ("sign_in", "sign_in_time", sign_in_job),
            ("sign_out", "sign_out_time", sign_out_job),
        ):
            hour, minute = _parse_time(config[time_key])
            self._scheduler.add_job(
                func,
                trigger=CronTrigger(
                    day_of_week=config["day_of_week"], hour=hour, minute=minute
                ),
                id=job_id,
                replace_existing=True,
            )

    def job_ids(self) -> list[str]:
        return [job.id for job in self._scheduler.get_jobs()]

    def start(self):
        """スケジューラ開始"""
        self._scheduler.start()

    def stop(self):
        """スケジューラ停止"""
        self._scheduler.shutdown(wait=False)

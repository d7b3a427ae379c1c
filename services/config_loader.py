import copy

import yaml
from pathlib import Path

DEFAULT_CONFIG = {
    "browser": {
        "headless": True,
        "launch_args": ["--no-sandbox", "--disable-setuid-sandbox"],
        "default_timeout_ms": 60000,
        "login_timeout_ms": 30000,
        "widget_timeout_ms": 20000,
        "settle_ms": 8000,
        "confirm_timeout_ms": 5000,
        "poll_interval_ms": 500,
        "screenshot_path": "error-debug.png",
        "selectors": {
            "username_field": "#username",
            "password_field": "#password",
            "login_button": "button[type=submit]",
            "attendance_widget": "gt-attendance-info",
            "widget_control": "gt-button",
            "primary_control": '[shade="primary"]',
            "modal": "gt-popup-modal",
            "modal_field_host": "gt-text-area",
            "modal_submit": 'gt-button[shade="primary"]',
        },
    },
    "detection": {
        "history_names": ["view swipes"],
    },
    "strategies": ["direct", "geometric", "keyboard"],
    "modal": {
        "default_text": "Office",
        "submit_settle_ms": 3000,
        "close_timeout_ms": 5000,
    },
    "slack": {
        "enabled": True,
        "notify_channel": "",
    },
    "scheduler": {
        "enabled": False,
        "sign_in_time": "09:30",
        "sign_out_time": "18:30",
        "day_of_week": "mon-fri",
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """ベース設定にオーバーライドをマージする"""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str = "config.yaml") -> dict:
    """YAML設定ファイルをロードし、デフォルト設定とマージして返す"""
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
        return _deep_merge(copy.deepcopy(DEFAULT_CONFIG), user_config)
    return copy.deepcopy(DEFAULT_CONFIG)

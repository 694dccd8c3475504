import os
import sys
from pathlib import Path


APP_NAME = "ColorTap"
DATA_DIR_ENV = "COLORTAP_DATA_DIR"


def app_data_dir(env=None) -> Path:
    """
    Папка с данными игры: журнал попыток, события, настройки сервиса решений.

    COLORTAP_DATA_DIR задаёт её явно (удобно для тестов и нескольких
    профилей на одной машине). Папка здесь не создаётся, её создают
    те, кто пишет файлы.
    """
    env = os.environ if env is None else env
    override = (env.get(DATA_DIR_ENV) or "").strip()
    if override:
        return Path(override).expanduser()

    if sys.platform.startswith("win"):
        root = Path(env.get("APPDATA") or Path.home() / "AppData" / "Roaming")
    elif sys.platform == "darwin":
        root = Path.home() / "Library" / "Application Support"
    else:
        root = Path(env.get("XDG_DATA_HOME") or Path.home() / ".local" / "share")
    return root / APP_NAME


def attempts_store_path(env=None) -> Path:
    return app_data_dir(env) / "attempts.json"


def events_log_path(env=None) -> Path:
    return app_data_dir(env) / "events.jsonl"


def decision_settings_path(env=None) -> Path:
    return app_data_dir(env) / "decision_service.json"

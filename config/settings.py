import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from config.paths import attempts_store_path, events_log_path


DEFAULT_DECISION_URL = "http://localhost:3001/decision"


@dataclass(frozen=True)
class WindowConfig:
    width: int = 960
    height: int = 640
    fps: int = 60
    title: str = "Color Tap"


@dataclass(frozen=True)
class FrustrationConfig:
    # Веса компонент: взвешенное среднее, сумма строго 1.0.
    w_error: float = 0.35
    w_hint: float = 0.20
    w_retry: float = 0.15
    w_latency: float = 0.20
    w_perseveration: float = 0.10

    errors_full: float = 3.0
    hints_full: float = 2.0
    retries_full: float = 2.0
    latency_floor_sec: float = 3.0
    latency_ceil_sec: float = 12.0
    perseveration_full: float = 2.0

    def __post_init__(self) -> None:
        total = self.w_error + self.w_hint + self.w_retry + self.w_latency + self.w_perseveration
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"frustration weights must sum to 1.0, got {total}")
        if self.latency_ceil_sec <= self.latency_floor_sec:
            raise ValueError("latency_ceil_sec must be greater than latency_floor_sec")


@dataclass(frozen=True)
class PolicyConfig:
    support_threshold: float = 0.35
    ease_threshold: float = 0.65
    ease_streak: int = 2
    levelup_streak: int = 3


@dataclass(frozen=True)
class DecisionServiceConfig:
    endpoint_url: str = DEFAULT_DECISION_URL
    timeout_sec: float = 0.8

    @property
    def enabled(self) -> bool:
        return bool(self.endpoint_url.strip())


@dataclass(frozen=True)
class SessionConfig:
    max_attempts: int = 100
    feedback_delay_ms: int = 700
    hint_clear_delay_ms: int = 400
    store_path: Path = field(default_factory=attempts_store_path)
    events_path: Path = field(default_factory=events_log_path)


def load_session_config(env: dict | None = None) -> SessionConfig:
    env = os.environ if env is None else env
    defaults = SessionConfig(store_path=attempts_store_path(env), events_path=events_log_path(env))
    store = (env.get("COLORTAP_STORE_PATH") or "").strip()
    events = (env.get("COLORTAP_EVENTS_PATH") or "").strip()
    return SessionConfig(
        max_attempts=defaults.max_attempts,
        feedback_delay_ms=defaults.feedback_delay_ms,
        hint_clear_delay_ms=defaults.hint_clear_delay_ms,
        store_path=Path(store).expanduser() if store else defaults.store_path,
        events_path=Path(events).expanduser() if events else defaults.events_path,
    )


def load_decision_service_config(
    settings_path: Path,
    default_url: str = DEFAULT_DECISION_URL,
    env_url: str | None = None,
) -> DecisionServiceConfig:
    """
    Адрес сервиса решений.

    Приоритет: переменная окружения COLORTAP_DECISION_URL (пустая строка
    выключает удалённый сервис), затем файл настроек, затем значение по умолчанию.
    """
    if env_url is None:
        env_url = os.environ.get("COLORTAP_DECISION_URL")
    if env_url is not None:
        return DecisionServiceConfig(endpoint_url=env_url.strip())

    if not settings_path.exists():
        save_decision_service_config(settings_path, default_url)
        return DecisionServiceConfig(endpoint_url=default_url)

    try:
        payload = json.loads(settings_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return DecisionServiceConfig(endpoint_url=default_url)
    if not isinstance(payload, dict):
        return DecisionServiceConfig(endpoint_url=default_url)

    url = str(payload.get("endpoint_url", default_url)).strip()
    timeout = payload.get("timeout_sec", DecisionServiceConfig.timeout_sec)
    try:
        timeout = max(0.1, float(timeout))
    except (TypeError, ValueError):
        timeout = DecisionServiceConfig.timeout_sec
    return DecisionServiceConfig(endpoint_url=url, timeout_sec=timeout)


def save_decision_service_config(settings_path: Path, endpoint_url: str) -> None:
    payload = {"endpoint_url": endpoint_url.strip()}
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    settings_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


@dataclass(frozen=True)
class BackendConfig:
    """Сервис решений: журнал решений в SQLite и адрес, на котором он слушает."""

    db_path: Path = Path(__file__).resolve().parents[1] / "backend" / "data" / "decisions.db"
    host: str = "0.0.0.0"
    # Тот же порт, что и в DEFAULT_DECISION_URL.
    port: int = 3001
    summary_limit_max: int = 5000


def load_backend_config(env: dict | None = None) -> BackendConfig:
    env = os.environ if env is None else env
    defaults = BackendConfig()
    db = (env.get("COLORTAP_DB_PATH") or "").strip()
    host = (env.get("COLORTAP_API_HOST") or "").strip()
    port = (env.get("COLORTAP_API_PORT") or "").strip()
    try:
        port_value = int(port) if port else defaults.port
    except ValueError:
        port_value = defaults.port
    return BackendConfig(
        db_path=Path(db).expanduser() if db else defaults.db_path,
        host=host or defaults.host,
        port=port_value,
        summary_limit_max=defaults.summary_limit_max,
    )

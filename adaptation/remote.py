import http.client
import json
import socket
import threading
from typing import Any, Dict
from urllib import error, request
from urllib.parse import urlparse

from adaptation.policy import DecisionRequest
from config.settings import DecisionServiceConfig
from data.models import DecisionResult, Provenance


class DecisionServiceError(Exception):
    """Сервис решений недоступен или ответил некорректно."""

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code


class RemoteDecisionAdapter:
    def __init__(self, config: DecisionServiceConfig) -> None:
        self.endpoint_url = config.endpoint_url.strip()
        self.timeout_sec = max(0.1, config.timeout_sec)
        self.enabled = bool(self.endpoint_url)

    @staticmethod
    def is_valid_endpoint(url: str) -> bool:
        parsed = urlparse((url or "").strip())
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)

    def decide(self, req: DecisionRequest) -> DecisionResult:
        if not self.enabled:
            raise DecisionServiceError("disabled")
        if not self.is_valid_endpoint(self.endpoint_url):
            raise DecisionServiceError("invalid_url")

        body = json.dumps(req.to_wire(), ensure_ascii=False).encode("utf-8")
        return self._parse(self._exchange_within_deadline(body))

    def _exchange_within_deadline(self, body: bytes) -> str:
        # timeout у urlopen действует на каждую операцию сокета, а не на весь
        # обмен. Общий срок держим сами: обмен идёт в фоновом потоке.
        outcome: Dict[str, Any] = {}
        done = threading.Event()

        def worker() -> None:
            try:
                outcome["raw"] = self._exchange(body)
            except Exception as exc:
                outcome["error"] = exc
            finally:
                done.set()

        thread = threading.Thread(target=worker, name="decision-request", daemon=True)
        thread.start()
        if not done.wait(self.timeout_sec):
            raise DecisionServiceError("timeout")
        if "error" in outcome:
            raise outcome["error"]
        return outcome["raw"]

    def _exchange(self, body: bytes) -> str:
        http_req = request.Request(
            self.endpoint_url,
            data=body,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with request.urlopen(http_req, timeout=self.timeout_sec) as resp:
                if resp.status != 200:
                    raise DecisionServiceError(f"http_status_{resp.status}")
                return resp.read().decode("utf-8") or "{}"
        except error.HTTPError as exc:
            raise DecisionServiceError(f"http_status_{exc.code}") from exc
        except (TimeoutError, socket.timeout) as exc:
            raise DecisionServiceError("timeout") from exc
        except error.URLError as exc:
            if isinstance(exc.reason, (TimeoutError, socket.timeout)):
                raise DecisionServiceError("timeout") from exc
            raise DecisionServiceError("connection_error") from exc
        except http.client.HTTPException as exc:
            # Оборванное тело, мусор вместо статусной строки и т.п.
            raise DecisionServiceError("connection_error") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise DecisionServiceError("connection_error") from exc

    @staticmethod
    def _parse(raw: str) -> DecisionResult:
        try:
            payload: Any = json.loads(raw)
            return DecisionResult.from_payload(payload, Provenance.REMOTE)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise DecisionServiceError("invalid_server_response") from exc

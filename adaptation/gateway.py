from dataclasses import replace
from typing import Optional, Protocol

from adaptation.baseline import BaselineAdapter
from adaptation.policy import DecisionRequest
from adaptation.remote import DecisionServiceError
from data.logger import JsonlLogger
from data.models import DecisionResult, Provenance


class DecisionAdapter(Protocol):
    def decide(self, req: DecisionRequest) -> DecisionResult:
        ...


class DecisionGateway:
    """
    Единая точка получения решения.

    Сначала пробуем удалённый сервис (ограничение по времени задаёт адаптер),
    при любой его ошибке считаем решение локально тем же правилом.
    Наружу сетевые ошибки не выходят: decide() всегда возвращает результат.
    """

    def __init__(
        self,
        remote: Optional[DecisionAdapter] = None,
        local: Optional[BaselineAdapter] = None,
        logger: Optional[JsonlLogger] = None,
    ) -> None:
        self.remote = remote
        self.local = local or BaselineAdapter()
        self.logger = logger
        self.last_provenance: Provenance = Provenance.LOCAL
        self.last_error: str = ""

    def decide(self, req: DecisionRequest) -> DecisionResult:
        if self.remote is None:
            self.last_error = "disabled"
        else:
            try:
                result = self.remote.decide(req)
            except DecisionServiceError as exc:
                self.last_error = exc.code
                self._log_fallback(req)
            else:
                self.last_provenance = Provenance.REMOTE
                self.last_error = ""
                # Источник проставляет шлюз, а не ответ сервиса.
                return replace(result, provenance=Provenance.REMOTE)

        self.last_provenance = Provenance.LOCAL
        return replace(self.local.decide(req), provenance=Provenance.LOCAL)

    def _log_fallback(self, req: DecisionRequest) -> None:
        if self.logger is None:
            return
        self.logger.write(
            {
                "event_type": "decision_fallback",
                "error": self.last_error,
                "request": req.to_wire(),
            }
        )

from typing import List, Optional

import pygame

from adaptation.gateway import DecisionGateway
from adaptation.remote import RemoteDecisionAdapter
from analytics.metrics import dashboard_stats
from config.paths import decision_settings_path
from config.settings import (
    DecisionServiceConfig,
    SessionConfig,
    WindowConfig,
    load_decision_service_config,
    load_session_config,
)
from data.attempt_log import AttemptLog
from data.attempt_store import load_attempts, save_attempts
from data.export import build_export, write_export
from data.logger import JsonlLogger
from game.palette import REFERENCE_PALETTE
from game.state_machine import ChoiceOutcome, SessionStateMachine
from game.ui import GameUI, hex_to_rgb


def build_gateway(service: DecisionServiceConfig, logger: Optional[JsonlLogger] = None) -> DecisionGateway:
    remote = RemoteDecisionAdapter(service) if service.enabled else None
    return DecisionGateway(remote=remote, logger=logger)


class GameApp:
    def __init__(
        self,
        window: WindowConfig,
        session: SessionConfig,
        service: DecisionServiceConfig,
    ) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((window.width, window.height))
        pygame.display.set_caption(window.title)
        self.clock = pygame.time.Clock()
        self.ui = GameUI(self.screen)
        self.window = window
        self.session_cfg = session
        self.palette = REFERENCE_PALETTE

        self.events_logger = JsonlLogger(session.events_path)
        self.gateway = build_gateway(service, logger=self.events_logger)
        # Журнал загружается один раз, лишние записи отбрасываются.
        self.attempt_log = AttemptLog(
            session.max_attempts,
            load_attempts(session.store_path, session.max_attempts),
        )
        self.session = SessionStateMachine(
            gateway=self.gateway,
            config=session,
            attempt_log=self.attempt_log,
            palette=self.palette,
            now_ms=pygame.time.get_ticks(),
        )
        self.running = True
        self.status_text: str = ""
        self.status_ms: int = 0

    def run(self, max_frames: Optional[int] = None) -> int:
        frames = 0
        while self.running:
            self.clock.tick(self.window.fps)
            now_ms = pygame.time.get_ticks()

            for event in pygame.event.get():
                self.handle_event(event, now_ms)

            self.session.update(now_ms)
            self._render(now_ms)

            frames += 1
            if max_frames is not None and frames >= max_frames:
                self.running = False

        pygame.quit()
        return 0

    def handle_event(self, event: pygame.event.Event, now_ms: int) -> None:
        if event.type == pygame.QUIT:
            self.running = False
            return
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.running = False
            elif event.key == pygame.K_h:
                self.session.use_hint()
            elif event.key == pygame.K_e:
                self.export(now_ms)
            elif event.key == pygame.K_r:
                self.reset(now_ms)
            elif pygame.K_1 <= event.key <= pygame.K_9:
                self._choose_index(event.key - pygame.K_1, now_ms)
            return
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            button = self.ui.hit_button(event.pos)
            if button == "hint":
                self.session.use_hint()
            elif button == "export":
                self.export(now_ms)
            elif button == "reset":
                self.reset(now_ms)
            elif self.session.trial is not None:
                option = self.ui.hit_option(event.pos, self.session.trial.options)
                if option is not None:
                    self._choose(option, now_ms)

    def export(self, now_ms: int) -> None:
        doc = build_export(self.attempt_log.snapshot(), self.palette.categories)
        path = write_export(self.session_cfg.store_path.parent / "exports", doc)
        self.status_text = f"Экспорт: {path.name}"
        self.status_ms = now_ms

    def reset(self, now_ms: int) -> None:
        self.session.reset(now_ms)
        save_attempts(self.session_cfg.store_path, self.attempt_log.snapshot())
        self.status_text = "Сессия сброшена"
        self.status_ms = now_ms

    def _choose_index(self, index: int, now_ms: int) -> None:
        trial = self.session.trial
        if trial is None or index >= len(trial.options):
            return
        self._choose(trial.options[index], now_ms)

    def _choose(self, option, now_ms: int) -> None:
        outcome = self.session.choose(option, now_ms)
        if outcome is not None:
            self._handle_outcome(outcome)

    def _handle_outcome(self, outcome: ChoiceOutcome) -> None:
        save_attempts(self.session_cfg.store_path, self.attempt_log.snapshot())
        self.events_logger.write(
            {
                "event_type": "attempt",
                "advance": outcome.advance,
                "gateway_error": self.gateway.last_error,
                **outcome.record.to_dict(),
            }
        )

    def _render(self, now_ms: int) -> None:
        self.ui.clear()
        self.ui.draw_frame()

        trial = self.session.trial
        if trial is not None:
            correct = trial.correct_option()
            self.ui.draw_prompt(self.palette.label(trial.target), hex_to_rgb(correct.hex))
            highlight = correct.id if self.session.hint_on else None
            self.ui.draw_options(trial.options, highlight, self.session.feedback)

        self.ui.draw_stats(self._stats_lines(now_ms))
        self.ui.draw_button(self.ui.buttons["hint"], "Подсказка [H]", active=self.session.hint_on)
        self.ui.draw_button(self.ui.buttons["export"], "Экспорт JSON [E]")
        self.ui.draw_button(self.ui.buttons["reset"], "Сброс [R]")
        pygame.display.flip()

    def _stats_lines(self, now_ms: int) -> List[str]:
        s = dashboard_stats(self.attempt_log.snapshot())
        decision = self.session.last_decision
        lines = [
            f"Уровень: {self.session.level.value}",
            f"Источник: {self.gateway.last_provenance.value}",
            f"Фрустрация: {decision.frustration_value:.2f}" if decision else "Фрустрация: -",
            f"Действие: {decision.action.value}" if decision else "Действие: -",
            f"Попыток: {s['total']}",
            f"Точность: {s['accuracy']}%",
            f"Ср. время: {s['avg_latency']:.1f} c",
            f"Ср. фрустрация: {s['avg_frustration']:.2f}",
            f"Поддержка: {s['support_pct']}%  Облегчение: {s['ease_pct']}%",
            f"Подсказок в ср.: {s['hint_avg']:.1f}",
            f"Сервер: {s['remote_pct']}%",
        ]
        if self.status_text and now_ms - self.status_ms < 2500:
            lines.append(self.status_text)
        return lines


def run(max_frames: Optional[int] = None) -> int:
    window = WindowConfig()
    session = load_session_config()
    service = load_decision_service_config(decision_settings_path())
    app = GameApp(window, session, service)
    return app.run(max_frames=max_frames)

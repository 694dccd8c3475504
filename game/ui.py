from dataclasses import dataclass
import math
from typing import Dict, List, Optional, Sequence, Tuple

import pygame

from data.models import Option


@dataclass(frozen=True)
class UiTheme:
    bg: Tuple[int, int, int] = (251, 247, 240)
    panel: Tuple[int, int, int] = (255, 255, 255)
    border: Tuple[int, int, int] = (226, 220, 210)
    text: Tuple[int, int, int] = (60, 60, 60)
    muted: Tuple[int, int, int] = (140, 140, 140)
    accent: Tuple[int, int, int] = (34, 160, 110)
    alert: Tuple[int, int, int] = (220, 90, 60)


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    value = value.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


class GameUI:
    def __init__(self, screen: pygame.Surface) -> None:
        self.screen = screen
        self.w, self.h = screen.get_size()
        self.theme = UiTheme()
        self.ui_scale = max(0.75, min(1.15, min(self.w / 960.0, self.h / 640.0)))
        self.font_huge = self._make_font(max(40, int(54 * self.ui_scale)), bold=True)
        self.font_big = self._make_font(max(28, int(36 * self.ui_scale)), bold=True)
        self.font_small = self._make_font(max(16, int(20 * self.ui_scale)))
        self.font_tiny = self._make_font(max(13, int(16 * self.ui_scale)))

        margin = max(10, self.w // 60)
        gap = max(8, self.w // 90)
        side_w = max(200, int(self.w * 0.27))
        self.center_panel = pygame.Rect(margin, margin, self.w - side_w - gap - margin * 2, self.h - margin * 2)
        self.side_panel = pygame.Rect(self.center_panel.right + gap, margin, side_w, self.h - margin * 2)

        btn_h = max(36, int(44 * self.ui_scale))
        btn_w = self.side_panel.width - 32
        bx = self.side_panel.x + 16
        by = self.side_panel.bottom - 16 - btn_h
        self.buttons: Dict[str, pygame.Rect] = {
            "reset": pygame.Rect(bx, by, btn_w, btn_h),
            "export": pygame.Rect(bx, by - (btn_h + 10), btn_w, btn_h),
            "hint": pygame.Rect(bx, by - 2 * (btn_h + 10), btn_w, btn_h),
        }

    def clear(self) -> None:
        self.screen.fill(self.theme.bg)

    def draw_frame(self) -> None:
        for rect in (self.center_panel, self.side_panel):
            pygame.draw.rect(self.screen, self.theme.panel, rect, border_radius=24)
            pygame.draw.rect(self.screen, self.theme.border, rect, width=2, border_radius=24)

    def draw_prompt(self, label: str, color: Tuple[int, int, int]) -> None:
        cx = self.center_panel.centerx
        title = self.font_big.render("Нажми на цвет", True, self.theme.text)
        self.screen.blit(title, title.get_rect(center=(cx, self.center_panel.y + 60)))
        word = self.font_huge.render(label, True, color)
        self.screen.blit(word, word.get_rect(center=(cx, self.center_panel.y + 120)))

    def option_circles(self, count: int) -> List[Tuple[Tuple[int, int], int]]:
        rect = self.center_panel
        slot = rect.width // max(1, count)
        radius = max(30, min(slot // 2 - 16, int(rect.height * 0.17)))
        cy = rect.y + int(rect.height * 0.6)
        return [((rect.x + slot * i + slot // 2, cy), radius) for i in range(count)]

    def hit_option(self, pos: Tuple[int, int], options: Sequence[Option]) -> Optional[Option]:
        for option, (center, radius) in zip(options, self.option_circles(len(options))):
            if math.hypot(pos[0] - center[0], pos[1] - center[1]) <= radius:
                return option
        return None

    def draw_options(
        self,
        options: Sequence[Option],
        highlight_id: Optional[str],
        feedback: str,
    ) -> None:
        for option, (center, radius) in zip(options, self.option_circles(len(options))):
            pygame.draw.circle(self.screen, hex_to_rgb(option.hex), center, radius)
            if option.id == highlight_id:
                ring = self.theme.accent if feedback != "wrong" else self.theme.alert
                pygame.draw.circle(self.screen, ring, center, radius + 10, width=6)

        if feedback in ("correct", "wrong"):
            text = "Верно!" if feedback == "correct" else "Попробуй ещё"
            color = self.theme.accent if feedback == "correct" else self.theme.alert
            surf = self.font_big.render(text, True, color)
            self.screen.blit(
                surf, surf.get_rect(center=(self.center_panel.centerx, self.center_panel.bottom - 60))
            )

    def draw_stats(self, lines: Sequence[str]) -> None:
        x = self.side_panel.x + 16
        y = self.side_panel.y + 14
        header = self.font_small.render("Панель взрослого", True, self.theme.accent)
        self.screen.blit(header, (x, y))
        yy = y + 34
        for line in lines:
            self._draw_fitted_text(
                text=line,
                rect=pygame.Rect(x, yy, self.side_panel.width - 32, self.font_tiny.get_height() + 6),
                color=self.theme.text,
                align="left",
            )
            yy += self.font_tiny.get_height() + 8

    def draw_button(self, rect: pygame.Rect, label: str, active: bool = False) -> None:
        fill = (245, 242, 236) if not active else (226, 244, 236)
        border = self.theme.accent if active else self.theme.border
        pygame.draw.rect(self.screen, fill, rect, border_radius=10)
        pygame.draw.rect(self.screen, border, rect, width=2, border_radius=10)
        self._draw_fitted_text(text=label, rect=rect, color=self.theme.text, align="center")

    def hit_button(self, pos: Tuple[int, int]) -> Optional[str]:
        for name, rect in self.buttons.items():
            if rect.collidepoint(pos):
                return name
        return None

    def _draw_fitted_text(
        self,
        text: str,
        rect: pygame.Rect,
        color: Tuple[int, int, int],
        align: str = "center",
    ) -> None:
        fonts = [self.font_small, self.font_tiny]
        surf = None
        for font in fonts:
            if font.size(text)[0] <= rect.width - 12:
                surf = font.render(text, True, color)
                break
        if surf is None:
            clipped = text
            while len(clipped) > 3 and self.font_tiny.size(clipped + "...")[0] > rect.width - 12:
                clipped = clipped[:-1]
            surf = self.font_tiny.render(clipped + "...", True, color)
        if align == "left":
            text_rect = surf.get_rect(midleft=(rect.x + 6, rect.centery))
        else:
            text_rect = surf.get_rect(center=rect.center)
        self.screen.blit(surf, text_rect)

    def _make_font(self, size: int, bold: bool = False) -> pygame.font.Font:
        candidates = [
            "sfprotext",
            "helveticaneue",
            "segoeui",
            "roboto",
            "arial",
        ]
        for name in candidates:
            path = pygame.font.match_font(name)
            if path:
                font = pygame.font.Font(path, size)
                if bold:
                    font.set_bold(True)
                return font
        return pygame.font.SysFont(None, size, bold=bold)

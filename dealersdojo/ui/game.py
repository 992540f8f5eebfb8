"""Pygame client

Renders the four screens and forwards player input to the session
controller. Relay calls run on a worker thread; their outcome comes back to
the main loop as a pygame event so every state change happens on one thread.
"""

import logging
import threading
from typing import Any, Optional

import pygame

from ..core.errors import RelayError
from ..core.screens import Screen, ScreenNavigator
from ..core.session import MissionResult, MissionState, PendingTurn, SessionController, SessionEvent
from ..core.state import Settings
from .widgets import Button, InputBox, wrap_text

logger = logging.getLogger(__name__)

RELAY_DONE = pygame.USEREVENT + 1

PASS_MESSAGE = "Excellent work, Agent. You met the objective."
UNLOCK_MESSAGE = " A new assignment is now available."
FAIL_MESSAGE = "Target lost. Report for reassessment. We will try this again."

BACKGROUND = (24, 28, 38)
PANEL = (38, 44, 58)
TEXT = (230, 230, 235)
MUTED = (150, 155, 170)
PASS_COLOR = (90, 200, 120)
FAIL_COLOR = (220, 90, 90)
BUBBLE_COLORS = {
    "user": (70, 110, 170),
    "ai": (60, 66, 82),
    "system": (90, 78, 50),
}


def debrief_copy(result: MissionResult) -> tuple[str, str]:
    """Title and message for the debrief screen."""
    if result.passed:
        message = PASS_MESSAGE
        if result.unlocked_next:
            message += UNLOCK_MESSAGE
        return "Mission Successful", message
    return "Mission Failed", FAIL_MESSAGE


class DojoGame:
    """Main game window"""

    def __init__(
        self,
        settings: Settings,
        controller: Optional[SessionController],
        *,
        fatal_error: Optional[str] = None,
    ):
        self.settings = settings
        self.controller = controller
        self.fatal_error = fatal_error
        self.navigator = ScreenNavigator()

        pygame.init()
        self.screen = pygame.display.set_mode((settings.window_width, settings.window_height))
        pygame.display.set_caption(settings.title)
        self.clock = pygame.time.Clock()

        self.font_large = pygame.font.Font(None, 44)
        self.font_medium = pygame.font.Font(None, 28)
        self.font_small = pygame.font.Font(None, 22)

        self.running = True
        self.scroll_offset = 0
        self.spinner_tick = 0
        self.level_buttons: list[tuple[Button, int]] = []

        w, h = settings.window_width, settings.window_height
        self.start_button = Button(pygame.Rect(w // 2 - 90, h // 2 + 40, 180, 48), "Start", (70, 130, 180), (90, 150, 200))
        self.start_button.enabled = controller is not None
        self.reset_button = Button(pygame.Rect(w - 200, h - 64, 170, 40), "Reset Progress", (150, 70, 70), (175, 90, 90))
        self.send_button = Button(pygame.Rect(w - 130, h - 64, 100, 44), "Send", (70, 160, 90), (90, 185, 110))
        self.debrief_button = Button(pygame.Rect(w // 2 - 110, h - 140, 220, 48), "Return to Missions", (70, 130, 180), (90, 150, 200))
        self.input_box = InputBox(pygame.Rect(30, h - 64, w - 180, 44), self.font_medium)

        if controller is not None:
            self.navigator.bind(controller)
            controller.subscribe(self._on_session_event)
            self._build_level_buttons()

    # ------------------------------------------------------------------
    # Session events
    # ------------------------------------------------------------------
    def _on_session_event(self, event: SessionEvent, payload: Any) -> None:
        if event is SessionEvent.LEVEL_STARTED:
            self.input_box.text = ""
            self.scroll_offset = 0
        elif event is SessionEvent.TRANSCRIPT:
            self.scroll_offset = 0
        elif event is SessionEvent.STATE_CHANGED:
            self.input_box.enabled = payload is MissionState.AWAITING_INPUT
        elif event is SessionEvent.LEVEL_SELECT:
            self._build_level_buttons()

    def _build_level_buttons(self) -> None:
        self.level_buttons = []
        card_width = 260
        gap = 24
        per_row = max(1, (self.settings.window_width - gap) // (card_width + gap))
        for card in self.controller.level_cards():
            col = card.index % per_row
            row = card.index // per_row
            x = gap + col * (card_width + gap)
            y = 120 + row * 200
            label = "Start Mission" if card.unlocked else "Locked"
            button = Button(pygame.Rect(x + 20, y + 120, card_width - 40, 40), label, (70, 130, 180), (90, 150, 200))
            button.enabled = card.unlocked
            self.level_buttons.append((button, card.level.id))

    # ------------------------------------------------------------------
    # Turn submission
    # ------------------------------------------------------------------
    def submit(self) -> None:
        pending = self.controller.begin_turn(self.input_box.text)
        if pending is None:
            return
        self.input_box.text = ""
        worker = threading.Thread(target=self._relay_worker, args=(pending,), daemon=True)
        worker.start()

    def _relay_worker(self, pending: PendingTurn) -> None:
        try:
            reply = self.controller.relay.send(pending.system_prompt, list(pending.history), pending.text)
        except RelayError as e:
            pygame.event.post(pygame.event.Event(RELAY_DONE, pending=pending, reply=None, error=e))
        except Exception as e:
            logger.exception("Unexpected relay failure")
            error = RelayError(str(e))
            pygame.event.post(pygame.event.Event(RELAY_DONE, pending=pending, reply=None, error=error))
        else:
            pygame.event.post(pygame.event.Event(RELAY_DONE, pending=pending, reply=reply, error=None))

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def run(self) -> None:
        last_time = pygame.time.get_ticks()
        while self.running:
            current_time = pygame.time.get_ticks()
            dt = current_time - last_time
            last_time = current_time

            self.handle_events()
            self.input_box.update(dt)
            self.spinner_tick += dt
            self.render()
            self.clock.tick(self.settings.fps)

        if self.controller is not None:
            self.controller.store.save(self.controller.progress)
        pygame.quit()

    def handle_events(self) -> None:
        mouse_pos = pygame.mouse.get_pos()
        for button in self._visible_buttons():
            button.update(mouse_pos)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == RELAY_DONE:
                self.controller.complete_turn(event.pending, reply=event.reply, error=event.error)
            elif self.navigator.is_visible(Screen.START):
                self._handle_start(event)
            elif self.navigator.is_visible(Screen.LEVEL_SELECT):
                self._handle_level_select(event)
            elif self.navigator.is_visible(Screen.GAME):
                self._handle_game(event)
            elif self.navigator.is_visible(Screen.DEBRIEF):
                self._handle_debrief(event)

    def _visible_buttons(self) -> list[Button]:
        active = self.navigator.active
        if active is Screen.START:
            return [self.start_button]
        if active is Screen.LEVEL_SELECT:
            return [button for button, _ in self.level_buttons] + [self.reset_button]
        if active is Screen.GAME:
            return [self.send_button]
        return [self.debrief_button]

    def _handle_start(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEBUTTONDOWN and self.start_button.is_clicked(event.pos):
            self.navigator.show(Screen.LEVEL_SELECT)

    def _handle_level_select(self, event: pygame.event.Event) -> None:
        if event.type != pygame.MOUSEBUTTONDOWN:
            return
        if self.reset_button.is_clicked(event.pos):
            self.controller.reset_progress()
            return
        for button, level_id in self.level_buttons:
            if button.is_clicked(event.pos):
                self.controller.start_level(level_id)
                return

    def _handle_game(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
            self.controller.return_to_level_select()
            return
        if event.type == pygame.MOUSEWHEEL:
            self.scroll_offset = max(0, self.scroll_offset + event.y * 30)
            return
        self.send_button.enabled = self.controller.accepting_input
        if self.input_box.handle_event(event):
            self.submit()
        elif event.type == pygame.MOUSEBUTTONDOWN and self.send_button.is_clicked(event.pos):
            self.submit()

    def _handle_debrief(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEBUTTONDOWN and self.debrief_button.is_clicked(event.pos):
            self.controller.return_to_level_select()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render(self) -> None:
        self.screen.fill(BACKGROUND)
        active = self.navigator.active
        if active is Screen.START:
            self._render_start()
        elif active is Screen.LEVEL_SELECT:
            self._render_level_select()
        elif active is Screen.GAME:
            self._render_game()
        else:
            self._render_debrief()
        pygame.display.flip()

    def _blit_centered(self, text: str, font: pygame.font.Font, color: tuple, y: int) -> None:
        surf = font.render(text, True, color)
        self.screen.blit(surf, (self.settings.window_width // 2 - surf.get_width() // 2, y))

    def _render_start(self) -> None:
        h = self.settings.window_height
        self._blit_centered(self.settings.title, self.font_large, TEXT, h // 2 - 100)
        self._blit_centered("Talk your way to the deal.", self.font_medium, MUTED, h // 2 - 50)
        self.start_button.draw(self.screen, self.font_medium)
        if self.fatal_error:
            y = h // 2 + 110
            self._blit_centered("FATAL ERROR: Could not load game data.", self.font_medium, FAIL_COLOR, y)
            for line in wrap_text(self.font_small, self.fatal_error, self.settings.window_width - 80):
                y += self.font_small.get_height() + 4
                self._blit_centered(line, self.font_small, MUTED, y + 10)

    def _render_level_select(self) -> None:
        self._blit_centered("Select Your Mission", self.font_large, TEXT, 40)
        cards = {card.level.id: card for card in self.controller.level_cards()}
        for button, level_id in self.level_buttons:
            card = cards[level_id]
            panel = pygame.Rect(button.rect.x - 20, button.rect.y - 120, button.rect.width + 40, 180)
            border = (100, 150, 200) if card.unlocked else (80, 80, 90)
            pygame.draw.rect(self.screen, PANEL, panel, border_radius=12)
            pygame.draw.rect(self.screen, border, panel, 2, border_radius=12)
            y = panel.y + 16
            for line in wrap_text(self.font_medium, card.level.title, panel.width - 32)[:2]:
                self.screen.blit(self.font_medium.render(line, True, TEXT), (panel.x + 16, y))
                y += self.font_medium.get_height() + 2
            score = self.font_small.render(f"High Score: {card.high_score}", True, MUTED)
            self.screen.blit(score, (panel.x + 16, panel.y + 80))
            button.draw(self.screen, self.font_medium)
        self.reset_button.draw(self.screen, self.font_small)

    def _render_game(self) -> None:
        session = self.controller.session
        if session is None:
            return
        w, h = self.settings.window_width, self.settings.window_height

        header = pygame.Rect(0, 0, w, 60)
        pygame.draw.rect(self.screen, PANEL, header)
        self.screen.blit(self.font_medium.render(session.level.title, True, TEXT), (20, 20))
        status = f"Score: {session.score}    Messages: {session.message_count} / {session.level.mission_length}"
        status_surf = self.font_medium.render(status, True, TEXT)
        self.screen.blit(status_surf, (w - status_surf.get_width() - 20, 20))

        log_rect = pygame.Rect(20, 72, w - 40, h - 160)
        self._render_transcript(session.transcript, log_rect)

        if self.controller.state is MissionState.PROCESSING:
            dots = "." * (1 + (self.spinner_tick // 400) % 3)
            self.screen.blit(self.font_small.render(f"Waiting for reply{dots}", True, MUTED), (30, h - 88))

        self.send_button.enabled = self.controller.accepting_input
        self.input_box.draw(self.screen)
        self.send_button.draw(self.screen, self.font_medium)

    def _render_transcript(self, transcript, rect: pygame.Rect) -> None:
        line_height = self.font_small.get_height() + 4
        bubble_width = int(rect.width * 0.75)
        blocks = []
        for entry in transcript:
            lines = wrap_text(self.font_small, entry.text, bubble_width - 24)
            blocks.append((entry.sender, lines, len(lines) * line_height + 16))

        previous_clip = self.screen.get_clip()
        self.screen.set_clip(rect)
        y = rect.bottom + self.scroll_offset
        for sender, lines, height in reversed(blocks):
            y -= height + 8
            if y > rect.bottom:
                continue
            if y + height < rect.top:
                break
            x = rect.right - bubble_width if sender == "user" else rect.x
            if sender == "system":
                x = rect.x + (rect.width - bubble_width) // 2
            pygame.draw.rect(self.screen, BUBBLE_COLORS[sender], (x, y, bubble_width, height), border_radius=10)
            line_y = y + 8
            for line in lines:
                self.screen.blit(self.font_small.render(line, True, TEXT), (x + 12, line_y))
                line_y += line_height
        self.screen.set_clip(previous_clip)

    def _render_debrief(self) -> None:
        result = self.controller.last_result
        if result is None:
            return
        title, message = debrief_copy(result)
        h = self.settings.window_height
        self._blit_centered(title, self.font_large, PASS_COLOR if result.passed else FAIL_COLOR, h // 4)
        y = h // 4 + 70
        for line in wrap_text(self.font_medium, message, self.settings.window_width - 160):
            self._blit_centered(line, self.font_medium, TEXT, y)
            y += self.font_medium.get_height() + 6
        self._blit_centered(f"Final Score: {result.score}", self.font_large, TEXT, y + 30)
        self._blit_centered(f"High Score: {result.high_score}", self.font_small, MUTED, y + 80)
        self.debrief_button.draw(self.screen, self.font_medium)

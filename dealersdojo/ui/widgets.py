"""Small pygame widgets: buttons, the chat input box and text wrapping."""

import pygame


def wrap_text(font: pygame.font.Font, text: str, max_width: int) -> list[str]:
    """Greedy word wrap; words wider than the line are split by character."""
    lines: list[str] = []
    for paragraph in text.splitlines() or [""]:
        current_line = ""
        for word in paragraph.split():
            test_line = current_line + " " + word if current_line else word
            if font.size(test_line)[0] <= max_width:
                current_line = test_line
                continue
            if current_line:
                lines.append(current_line)
            current_line = ""
            for char in word:
                if font.size(current_line + char)[0] > max_width and current_line:
                    lines.append(current_line)
                    current_line = ""
                current_line += char
        lines.append(current_line)
    return lines


class Button:
    """Simple button"""

    def __init__(self, rect: pygame.Rect, text: str, color: tuple, hover_color: tuple):
        self.rect = rect
        self.text = text
        self.color = color
        self.hover_color = hover_color
        self.hovered = False
        self.enabled = True

    def update(self, mouse_pos: tuple[int, int]) -> None:
        self.hovered = self.enabled and self.rect.collidepoint(mouse_pos)

    def draw(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        if not self.enabled:
            color = (150, 150, 150)
        else:
            color = self.hover_color if self.hovered else self.color
        pygame.draw.rect(screen, color, self.rect, border_radius=8)
        pygame.draw.rect(screen, (80, 80, 80), self.rect, 2, border_radius=8)

        text_surf = font.render(self.text, True, (255, 255, 255))
        text_rect = text_surf.get_rect(center=self.rect.center)
        screen.blit(text_surf, text_rect)

    def is_clicked(self, mouse_pos: tuple[int, int]) -> bool:
        return self.enabled and self.rect.collidepoint(mouse_pos)


class InputBox:
    """Single-line chat input. ``handle_event`` returns True when Enter is pressed."""

    def __init__(self, rect: pygame.Rect, font: pygame.font.Font, max_length: int = 500):
        self.rect = rect
        self.font = font
        self.max_length = max_length
        self.text = ""
        self.active = True
        self.enabled = True
        self.cursor_visible = True
        self.cursor_timer = 0

    def handle_event(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.MOUSEBUTTONDOWN:
            self.active = self.rect.collidepoint(event.pos)

        if event.type != pygame.KEYDOWN or not (self.active and self.enabled):
            return False
        if event.key == pygame.K_RETURN:
            return True
        if event.key == pygame.K_BACKSPACE:
            self.text = self.text[:-1]
        elif event.unicode and event.unicode.isprintable() and len(self.text) < self.max_length:
            self.text += event.unicode
        return False

    def update(self, dt: int) -> None:
        self.cursor_timer += dt
        if self.cursor_timer > 500:
            self.cursor_visible = not self.cursor_visible
            self.cursor_timer = 0

    def draw(self, screen: pygame.Surface, placeholder: str = "Type your message...") -> None:
        color = (255, 255, 255) if self.enabled else (225, 225, 225)
        pygame.draw.rect(screen, color, self.rect, border_radius=5)
        border_color = (100, 150, 200) if self.active and self.enabled else (180, 180, 180)
        pygame.draw.rect(screen, border_color, self.rect, 2, border_radius=5)

        text_y = self.rect.y + (self.rect.height - self.font.get_height()) // 2
        if self.text:
            # keep the tail of long input visible
            visible = self.text
            while visible and self.font.size(visible)[0] > self.rect.width - 24:
                visible = visible[1:]
            text_surf = self.font.render(visible, True, (40, 40, 40))
            screen.blit(text_surf, (self.rect.x + 10, text_y))
            cursor_x = self.rect.x + 10 + text_surf.get_width()
        else:
            hint = self.font.render(placeholder, True, (150, 150, 150))
            screen.blit(hint, (self.rect.x + 10, text_y))
            cursor_x = self.rect.x + 10

        if self.active and self.enabled and self.cursor_visible:
            pygame.draw.line(
                screen,
                (40, 40, 40),
                (cursor_x, text_y),
                (cursor_x, text_y + self.font.get_height()),
                2,
            )

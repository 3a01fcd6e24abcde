"""Terminal renderer: blue background, green diagonal glyphs for particles.

The whole surface is painted once; after that each frame only erases the
previous particles and draws the new ones with ANSI cursor moves, which
avoids the flicker of clearing the screen every tick.
"""

import logging
import shutil
import sys

logger = logging.getLogger("parity_particles.term")

# --- Glyphs ---
BACKGROUND = "░"
GLYPH_EVEN = "▚"  # x and y have the same parity
GLYPH_ODD = "▞"

# --- ANSI escapes ---
BLUE = "\x1b[34m"
GREEN = "\x1b[32m"
RESET = "\x1b[0m"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR = "\x1b[2J"
HOME = "\x1b[H"


def terminal_size():
    """Current (columns, lines) of the controlling terminal."""
    size = shutil.get_terminal_size()
    return size.columns, size.lines


def glyph_for(x, y):
    return GLYPH_EVEN if x % 2 == y % 2 else GLYPH_ODD


def paint(char, color):
    return f"{color}{char}{RESET}" if color else char


def move_to(x, y):
    """ANSI cursor move to zero-based column x, row y."""
    return f"\x1b[{y + 1};{x + 1}H"


def on_surface(x, y, width, height):
    return 0 <= x < width and 0 <= y < height


def render_frame(positions, width, height, color=True):
    """Return the whole surface as one string, rows joined by newlines."""
    rows = [[BACKGROUND] * width for _ in range(height)]
    for x, y in positions:
        if not on_surface(x, y, width, height):
            logger.debug("skipping particle off the surface at %d, %d", x, y)
            continue
        rows[y][x] = glyph_for(x, y)

    if not color:
        return "\n".join("".join(row) for row in rows)

    lines = []
    for row in rows:
        line = ""
        for char in row:
            line += paint(char, BLUE if char == BACKGROUND else GREEN)
        lines.append(line)
    return "\n".join(lines)


class TerminalScreen:
    """Owns the terminal for the duration of a run.

    Use as a context manager so the cursor comes back and the screen is
    cleared even when the loop is interrupted.
    """

    def __init__(self, width, height, stream=None, terminal_size=terminal_size):
        # the drawable surface never exceeds the real terminal
        columns, lines = terminal_size()
        self.width = min(width, columns)
        self.height = min(height, lines)
        if (self.width, self.height) != (width, height):
            logger.debug(
                "grid %dx%d clipped to the %dx%d terminal", width, height, columns, lines
            )
        self.stream = stream if stream is not None else sys.stdout
        self.drawn = []
        self.closed = False

    def __enter__(self):
        self.stream.write(HIDE_CURSOR + CLEAR + HOME)
        self.draw_world()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stream.write(RESET + SHOW_CURSOR + HOME + CLEAR)
        self.stream.flush()
        return False

    def draw_world(self):
        """Paint the background over the whole surface."""
        self.stream.write(HOME + render_frame([], self.width, self.height))
        self.stream.flush()

    def _put(self, x, y, char, color):
        if not on_surface(x, y, self.width, self.height):
            logger.debug("out of bound %d, %d", x, y)
            return False
        self.stream.write(move_to(x, y) + paint(char, color))
        return True

    def erase(self):
        """Repaint the background where the last frame drew particles."""
        for x, y in self.drawn:
            self._put(x, y, BACKGROUND, BLUE)
        self.drawn = []

    def draw(self, positions):
        for x, y in positions:
            if self._put(x, y, glyph_for(x, y), GREEN):
                self.drawn.append((x, y))
        self.stream.flush()

    def show(self, positions, tick=None):
        """Erase the previous frame and draw this one."""
        self.erase()
        self.draw(positions)

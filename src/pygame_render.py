"""Pygame renderer: one grid cell per PIXEL_SCALE x PIXEL_SCALE block.

The frame is built as a numpy RGB array and blitted through surfarray, so
there is no per-pixel Python loop.
"""

import logging

import numpy as np
import pygame

logger = logging.getLogger("parity_particles.pygame")

# --- Display ---
PIXEL_SCALE = 4

# --- Colors ---
BACKGROUND_COLOR = (20, 40, 120)
EVEN_COLOR = (60, 220, 90)  # x and y have the same parity
ODD_COLOR = (30, 150, 60)


def frame_pixels(positions, width, height):
    """Return a (height, width, 3) uint8 image of the grid."""
    rgb = np.empty((height, width, 3), dtype=np.uint8)
    rgb[:, :] = BACKGROUND_COLOR

    if len(positions) == 0:
        return rgb

    xy = np.asarray(positions, dtype=np.int64).reshape(-1, 2)
    x, y = xy[:, 0], xy[:, 1]
    visible = (x >= 0) & (x < width) & (y >= 0) & (y < height)
    if not visible.all():
        logger.debug("skipping %d particles off the surface", int((~visible).sum()))
    x, y = x[visible], y[visible]

    even = (x % 2) == (y % 2)
    rgb[y[even], x[even]] = EVEN_COLOR
    rgb[y[~even], x[~even]] = ODD_COLOR
    return rgb


def draw(screen, positions, width, height):
    """Render the particles onto the pygame surface."""
    rgb = frame_pixels(positions, width, height)
    scaled = np.repeat(np.repeat(rgb, PIXEL_SCALE, axis=0), PIXEL_SCALE, axis=1)

    # surfarray expects (width, height, 3) so transpose the spatial axes
    pygame.surfarray.blit_array(screen, scaled.transpose(1, 0, 2))


class PygameWindow:
    """A window sized for the grid; closing it or pressing Esc stops the run."""

    def __init__(self, width, height, caption="Parity particles"):
        self.width = width
        self.height = height
        self.caption = caption
        self.screen = None
        self.closed = False

    def __enter__(self):
        pygame.init()
        self.screen = pygame.display.set_mode(
            (self.width * PIXEL_SCALE, self.height * PIXEL_SCALE)
        )
        pygame.display.set_caption(self.caption)
        return self

    def __exit__(self, exc_type, exc, tb):
        pygame.quit()
        return False

    def poll(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.closed = True
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self.closed = True
        return self.closed

    def show(self, positions, tick=None):
        if self.poll():
            return
        draw(self.screen, positions, self.width, self.height)
        pygame.display.flip()
        if tick is not None:
            pygame.display.set_caption(
                f"{self.caption}  |  tick={tick}  particles={len(positions)}"
            )

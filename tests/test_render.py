import io

import numpy as np
import pygame

import pygame_render
import term_render
from term_render import BACKGROUND, GLYPH_EVEN, GLYPH_ODD, TerminalScreen, render_frame


def large_terminal():
    return 200, 60


def test_glyph_parity():
    assert term_render.glyph_for(0, 0) == GLYPH_EVEN
    assert term_render.glyph_for(3, 5) == GLYPH_EVEN
    assert term_render.glyph_for(1, 0) == GLYPH_ODD
    assert term_render.glyph_for(2, 7) == GLYPH_ODD


def test_render_frame_plain():
    frame = render_frame([(0, 0), (2, 1)], 3, 2, color=False)
    assert frame.split("\n") == [
        GLYPH_EVEN + BACKGROUND * 2,
        BACKGROUND * 2 + GLYPH_ODD,
    ]


def test_render_frame_skips_particles_off_the_surface():
    frame = render_frame([(-1, 0), (3, 0), (0, 2)], 3, 2, color=False)
    assert frame == "\n".join([BACKGROUND * 3] * 2)


def test_render_frame_colors():
    frame = render_frame([(0, 0)], 2, 1)
    assert frame == (
        term_render.GREEN + GLYPH_EVEN + term_render.RESET
        + term_render.BLUE + BACKGROUND + term_render.RESET
    )


def test_terminal_screen_erases_previous_frame():
    out = io.StringIO()
    with TerminalScreen(4, 3, stream=out, terminal_size=large_terminal) as screen:
        screen.show([(1, 1), (9, 9)])
        assert screen.drawn == [(1, 1)]
        out.seek(0)
        out.truncate()
        screen.show([(2, 1)])
        written = out.getvalue()
    assert written.index(term_render.move_to(1, 1) + term_render.BLUE) < written.index(
        term_render.move_to(2, 1) + term_render.GREEN + GLYPH_ODD
    )
    assert out.getvalue().endswith(term_render.CLEAR)
    assert term_render.SHOW_CURSOR in out.getvalue()


def test_terminal_screen_restores_on_error():
    out = io.StringIO()
    try:
        with TerminalScreen(2, 2, stream=out, terminal_size=large_terminal):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert term_render.SHOW_CURSOR in out.getvalue()


def test_frame_pixels():
    rgb = pygame_render.frame_pixels([(0, 0), (1, 0), (5, 5)], 3, 2)
    assert rgb.shape == (2, 3, 3)
    assert rgb.dtype == np.uint8
    assert tuple(rgb[0, 0]) == pygame_render.EVEN_COLOR
    assert tuple(rgb[0, 1]) == pygame_render.ODD_COLOR
    assert tuple(rgb[1, 2]) == pygame_render.BACKGROUND_COLOR


def test_frame_pixels_empty():
    rgb = pygame_render.frame_pixels([], 2, 2)
    assert (rgb == np.array(pygame_render.BACKGROUND_COLOR, dtype=np.uint8)).all()


def test_grid_larger_than_terminal_is_clipped():
    out = io.StringIO()
    with TerminalScreen(100, 30, stream=out, terminal_size=lambda: (40, 12)) as screen:
        assert (screen.width, screen.height) == (40, 12)
        screen.show([(60, 20), (39, 11), (5, 20)])
        assert screen.drawn == [(39, 11)]
    written = out.getvalue()
    assert term_render.move_to(60, 20) not in written
    assert term_render.move_to(5, 20) not in written
    assert term_render.move_to(39, 11) + term_render.GREEN in written
    # the background is painted at the terminal width, not the grid width
    first_row = written.split(term_render.HOME)[2].split("\n")[0]
    assert first_row.count(BACKGROUND) == 40


def test_grid_smaller_than_terminal_is_kept():
    screen = TerminalScreen(10, 5, stream=io.StringIO(), terminal_size=large_terminal)
    assert (screen.width, screen.height) == (10, 5)


def test_draw_scales_and_blits(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    pygame.init()
    try:
        scale = pygame_render.PIXEL_SCALE
        surface = pygame.Surface((3 * scale, 2 * scale))
        pygame_render.draw(surface, [(0, 0), (1, 0), (2, 1)], 3, 2)
        assert tuple(surface.get_at((0, 0)))[:3] == pygame_render.EVEN_COLOR
        assert tuple(surface.get_at((scale - 1, scale - 1)))[:3] == pygame_render.EVEN_COLOR
        assert tuple(surface.get_at((scale, 0)))[:3] == pygame_render.ODD_COLOR
        assert tuple(surface.get_at((2 * scale, 0)))[:3] == pygame_render.BACKGROUND_COLOR
        # (2, 1) lands in the bottom-right block, not the top row
        assert tuple(surface.get_at((2 * scale, scale)))[:3] == pygame_render.ODD_COLOR
        assert tuple(surface.get_at((0, scale)))[:3] == pygame_render.BACKGROUND_COLOR
    finally:
        pygame.quit()


def test_window_closes_on_quit_event(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    with pygame_render.PygameWindow(4, 3) as window:
        assert window.screen.get_size() == (
            4 * pygame_render.PIXEL_SCALE,
            3 * pygame_render.PIXEL_SCALE,
        )
        window.show([(1, 1)], tick=1)
        assert not window.closed
        pygame.event.post(pygame.event.Event(pygame.QUIT))
        window.show([(1, 1)], tick=2)
        assert window.closed


def test_window_closes_on_escape(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    with pygame_render.PygameWindow(4, 3) as window:
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_ESCAPE))
        assert window.poll()

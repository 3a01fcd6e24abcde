"""Run the parity particle simulation until every particle is gone.

Spawns particles at random cells with random compass directions, then each
frame moves them one step, resolves collisions and redraws. The run ends
when the population is empty, after --max-ticks, or when the window closes.

    python src/run_simulation.py
    python src/run_simulation.py --renderer pygame --width 200 --height 150
    python src/run_simulation.py --renderer none --particles 5000 --seed 1
"""

import argparse
import logging
import time

import numpy as np

import particle_arrays
import term_render
from parity_particles import (
    OVERCROWDING_POLICIES,
    advance_tick,
    population_stats,
    random_population,
)

logger = logging.getLogger("parity_particles.run")

# --- Grid dimensions (pygame and headless runs; the terminal uses its own size) ---
WIDTH = 160
HEIGHT = 100

# --- Population ---
NUM_PARTICLES = 30_000

# --- Timing ---
INITIAL_DELAY_MS = 1000
FRAME_DELAY_MS = 50

# --- Headless progress ---
PROGRESS_EVERY = 10

RENDERERS = ("term", "pygame", "none")


# --- Engines ---


class ListEngine:
    """Population as a list of Particle objects."""

    def __init__(self, width, height, overcrowding):
        self.bounds = (width, height)
        self.overcrowding = overcrowding
        self.population = []

    def spawn(self, count, rng):
        self.population = random_population(count, self.bounds, rng)

    def advance(self):
        self.population = advance_tick(self.population, self.bounds, self.overcrowding)

    def positions(self):
        return [p.position for p in self.population]

    def stats(self):
        return population_stats(self.population)

    def __len__(self):
        return len(self.population)


class ArrayEngine:
    """Population as numpy arrays; same rules, no per-particle Python loop."""

    def __init__(self, width, height, overcrowding):
        self.width = width
        self.height = height
        self.overcrowding = overcrowding
        self.arrays = particle_arrays.empty()

    def spawn(self, count, rng):
        self.arrays = particle_arrays.spawn_random(count, self.width, self.height, rng)

    def advance(self):
        self.arrays = particle_arrays.advance_tick(
            *self.arrays, self.width, self.height, self.overcrowding
        )

    def positions(self):
        px, py, _, _ = self.arrays
        return particle_arrays.positions(px, py)

    def stats(self):
        return population_stats(particle_arrays.to_particles(*self.arrays))

    def __len__(self):
        return len(self.arrays[0])


ENGINES = {
    "list": ListEngine,
    "numpy": ArrayEngine,
}


# --- Displays ---


class HeadlessDisplay:
    """No drawing; prints a progress line every PROGRESS_EVERY ticks."""

    closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def show(self, positions, tick=None):
        if tick is not None and (tick == 1 or tick % PROGRESS_EVERY == 0):
            print(f"  tick {tick}  particles={len(positions)}")


def open_display(renderer, width, height):
    if renderer == "term":
        return term_render.TerminalScreen(width, height)
    if renderer == "pygame":
        from pygame_render import PygameWindow

        return PygameWindow(width, height)
    return HeadlessDisplay()


# --- CLI ---


def build_parser():
    parser = argparse.ArgumentParser(description="Parity particle collision simulation")
    parser.add_argument(
        "--renderer",
        choices=RENDERERS,
        default="term",
        help="Where to draw the particles (default: term)",
    )
    parser.add_argument(
        "--particles",
        type=int,
        default=NUM_PARTICLES,
        help=f"Initial particle count (default: {NUM_PARTICLES})",
    )
    parser.add_argument(
        "--width", type=int, default=None, help="Grid width (default: terminal or WIDTH)"
    )
    parser.add_argument(
        "--height", type=int, default=None, help="Grid height (default: terminal or HEIGHT)"
    )
    parser.add_argument(
        "--engine",
        choices=list(ENGINES),
        default="numpy",
        help="Tick implementation (default: numpy)",
    )
    parser.add_argument(
        "--overcrowding",
        choices=OVERCROWDING_POLICIES,
        default="drop",
        help="What happens to 3+ particles in one cell (default: drop)",
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=FRAME_DELAY_MS,
        help=f"Pause between frames (default: {FRAME_DELAY_MS})",
    )
    parser.add_argument(
        "--initial-delay-ms",
        type=int,
        default=INITIAL_DELAY_MS,
        help=f"Pause after the first frame (default: {INITIAL_DELAY_MS})",
    )
    parser.add_argument(
        "--max-ticks", type=int, default=None, help="Stop after this many ticks"
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Random seed for reproducibility"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def parse_args(argv=None, terminal_size=term_render.terminal_size):
    """Parse and validate arguments, filling in the grid size."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.width is None or args.height is None:
        if args.renderer == "term":
            columns, lines = terminal_size()
        else:
            columns, lines = WIDTH, HEIGHT
        args.width = columns if args.width is None else args.width
        args.height = lines if args.height is None else args.height

    if args.width <= 0 or args.height <= 0:
        parser.error(f"grid size must be positive, got {args.width}x{args.height}")
    if args.particles < 0:
        parser.error("--particles must not be negative")
    if args.delay_ms < 0 or args.initial_delay_ms < 0:
        parser.error("delays must not be negative")
    if args.max_ticks is not None and args.max_ticks < 1:
        parser.error("--max-ticks must be at least 1")
    return args


def run(args):
    """Run the frame loop; returns (ticks, particles left)."""
    rng = np.random.default_rng(args.seed)
    engine = ENGINES[args.engine](args.width, args.height, args.overcrowding)
    engine.spawn(args.particles, rng)
    logger.info(
        "spawned %d particles on a %dx%d grid", len(engine), args.width, args.height
    )
    if args.renderer == "none":
        print("Directions: " + "  ".join(f"{k}={v}" for k, v in engine.stats().items()))
        print()

    tick = 0
    try:
        with open_display(args.renderer, args.width, args.height) as display:
            engine.advance()
            tick = 1
            display.show(engine.positions(), tick)
            time.sleep(args.initial_delay_ms / 1000)

            while len(engine) and not display.closed:
                if args.max_ticks is not None and tick >= args.max_ticks:
                    break
                engine.advance()
                tick += 1
                display.show(engine.positions(), tick)
                time.sleep(args.delay_ms / 1000)
    except KeyboardInterrupt:
        logger.info("interrupted at tick %d", tick)

    return tick, len(engine)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    if args.renderer == "none":
        print(f"{args.particles} particles on {args.width}x{args.height}")
        print(f"engine={args.engine}  overcrowding={args.overcrowding}  seed={args.seed}")
        print()

    start = time.time()
    ticks, remaining = run(args)
    elapsed = time.time() - start

    print(f"Simulation complete: {ticks} ticks, {remaining} particles left, {elapsed:.1f}s")


if __name__ == "__main__":
    main()

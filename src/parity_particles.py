"""Particles on a bounded grid that merge or annihilate when they collide.

Each particle moves one cell per tick along one of the 8 compass directions.
After everybody has moved, particles sharing a cell are resolved:

  - alone in the cell: survives unchanged
  - two in the cell: their directions are added and reduced mod 2 on each
    axis; a non-zero result becomes one new particle, zero annihilates both
  - three or more: dropped (or folded, with overcrowding="fold")
  - outside the grid: dropped

    import numpy as np
    from parity_particles import advance_tick, random_population

    population = random_population(1000, (80, 24), np.random.default_rng(0))
    population = advance_tick(population, (80, 24))
"""

import enum
import logging
import math
from collections import Counter
from dataclasses import dataclass

logger = logging.getLogger("parity_particles")

# --- Overcrowding policies (3+ particles in one cell) ---
OVERCROWDING_POLICIES = ("drop", "fold")


# --- Directions ---


class Direction(enum.Enum):
    N = (0, -1)
    NE = (1, -1)
    E = (1, 0)
    SE = (1, 1)
    S = (0, 1)
    SW = (-1, 1)
    W = (-1, 0)
    NW = (-1, -1)

    @property
    def vector(self):
        """The (dx, dy) step for this direction."""
        return self.value

    @classmethod
    def from_vector(cls, vector):
        """Look up the direction for a (dx, dy) pair; ValueError for (0, 0)."""
        return cls(tuple(vector))


DIRECTIONS = tuple(Direction)


def random_direction(rng):
    """Pick one of the 8 directions with equal probability."""
    return DIRECTIONS[int(rng.integers(len(DIRECTIONS)))]


# --- Particles ---


@dataclass(frozen=True)
class Particle:
    position: tuple
    direction: tuple

    @property
    def x(self):
        return self.position[0]

    @property
    def y(self):
        return self.position[1]

    def moved(self):
        """Return this particle one step further along its direction."""
        (x, y), (dx, dy) = self.position, self.direction
        return Particle((x + dx, y + dy), self.direction)


def update(particle):
    """Move a particle one step. No clamping and no wrapping at the edges."""
    return particle.moved()


def _check_bounds(bounds):
    width, height = bounds
    if width <= 0 or height <= 0:
        raise ValueError(f"grid bounds must be positive, got {width}x{height}")
    return width, height


def random_particle(bounds, rng):
    """Create a particle at a uniform in-bounds cell with a uniform direction."""
    width, height = _check_bounds(bounds)
    position = (int(rng.integers(width)), int(rng.integers(height)))
    return Particle(position, random_direction(rng).vector)


def random_population(count, bounds, rng):
    return [random_particle(bounds, rng) for _ in range(count)]


# --- Collision resolution ---


def trunc_mod2(value):
    """Remainder of value / 2 rounded toward zero, so -1 stays -1.

    Keeps the sign of the sum, which means a merge of W and N gives NW
    rather than SE.
    """
    return int(math.fmod(value, 2))


def merge_directions(directions):
    """Fold directions into one by summing each axis and reducing mod 2.

    Returns None when the result is (0, 0), i.e. the particles annihilate.
    """
    sum_dx = sum(d[0] for d in directions)
    sum_dy = sum(d[1] for d in directions)
    merged = (trunc_mod2(sum_dx), trunc_mod2(sum_dy))
    if merged == (0, 0):
        return None
    return merged


def group_by_cell(population):
    """Map each occupied position to the particles on it."""
    cells = {}
    for particle in population:
        cells.setdefault(particle.position, []).append(particle)
    return cells


def in_bounds(position, bounds):
    x, y = position
    width, height = bounds
    return 0 <= x < width and 0 <= y < height


def resolve_collisions(population, bounds, overcrowding="drop"):
    """Build the next population from particles that have already moved.

    The input is not modified. The result does not depend on the order of
    particles inside a cell.
    """
    if overcrowding not in OVERCROWDING_POLICIES:
        raise ValueError(
            f"Unknown overcrowding policy '{overcrowding}'. "
            f"Choose from: {', '.join(OVERCROWDING_POLICIES)}"
        )

    result = []
    stats = Counter()
    for position, here in group_by_cell(population).items():
        if not in_bounds(position, bounds):
            stats["out_of_bounds"] += len(here)
            continue

        if len(here) == 1:
            result.append(here[0])
            continue

        if len(here) > 2 and overcrowding == "drop":
            stats["overcrowded"] += len(here)
            continue

        merged = merge_directions([p.direction for p in here])
        if merged is None:
            stats["annihilated"] += len(here)
        else:
            stats["merged"] += len(here)
            result.append(Particle(position, merged))

    if stats:
        logger.debug(
            "resolved %d -> %d particles (%s)",
            len(population),
            len(result),
            ", ".join(f"{k}={v}" for k, v in sorted(stats.items())),
        )
    return result


def advance_tick(population, bounds, overcrowding="drop"):
    """Move every particle, then resolve collisions on the new cells."""
    moved = [update(p) for p in population]
    return resolve_collisions(moved, bounds, overcrowding)


def run_until_empty(population, bounds, max_ticks=None, overcrowding="drop"):
    """Yield the population after each tick until it is empty.

    The empty population is yielded once, then the generator stops.
    """
    tick = 0
    while population and (max_ticks is None or tick < max_ticks):
        population = advance_tick(population, bounds, overcrowding)
        tick += 1
        yield population


def population_stats(population):
    """Count live particles per direction name."""
    counts = Counter(Direction.from_vector(p.direction).name for p in population)
    return {d.name: counts.get(d.name, 0) for d in DIRECTIONS}

import pytest

import run_simulation
from parity_particles import Particle


def fixed_terminal():
    return 40, 12


def test_term_renderer_uses_terminal_size():
    args = run_simulation.parse_args([], terminal_size=fixed_terminal)
    assert (args.width, args.height) == (40, 12)
    assert args.renderer == "term"
    assert args.engine == "numpy"
    assert args.overcrowding == "drop"


def test_other_renderers_use_default_grid():
    args = run_simulation.parse_args(["--renderer", "none", "--width", "30"])
    assert (args.width, args.height) == (30, run_simulation.HEIGHT)


@pytest.mark.parametrize(
    "argv",
    [
        ["--renderer", "none", "--width", "0"],
        ["--renderer", "none", "--particles", "-1"],
        ["--renderer", "none", "--delay-ms", "-5"],
        ["--renderer", "none", "--max-ticks", "0"],
        ["--overcrowding", "keep"],
    ],
)
def test_invalid_arguments_exit(argv):
    with pytest.raises(SystemExit) as excinfo:
        run_simulation.parse_args(argv, terminal_size=fixed_terminal)
    assert excinfo.value.code == 2


@pytest.mark.parametrize("engine", ["list", "numpy"])
def test_headless_run_ends_when_empty(engine):
    args = run_simulation.parse_args(
        [
            "--renderer", "none",
            "--engine", engine,
            "--particles", "200",
            "--width", "12",
            "--height", "9",
            "--delay-ms", "0",
            "--initial-delay-ms", "0",
            "--seed", "5",
        ]
    )
    ticks, remaining = run_simulation.run(args)
    assert remaining == 0
    assert ticks >= 1


def test_max_ticks_stops_the_loop(monkeypatch):
    monkeypatch.setattr(
        run_simulation,
        "random_population",
        lambda count, bounds, rng: [Particle((500, 500), (1, 0))],
    )
    args = run_simulation.parse_args(
        [
            "--renderer", "none",
            "--engine", "list",
            "--particles", "1",
            "--width", "1000",
            "--height", "1000",
            "--delay-ms", "0",
            "--initial-delay-ms", "0",
            "--max-ticks", "3",
            "--seed", "0",
        ]
    )
    assert run_simulation.run(args) == (3, 1)


def test_main_prints_summary(capsys):
    run_simulation.main(
        [
            "--renderer", "none",
            "--particles", "50",
            "--width", "8",
            "--height", "8",
            "--delay-ms", "0",
            "--initial-delay-ms", "0",
            "--seed", "2",
        ]
    )
    out = capsys.readouterr().out
    assert "50 particles on 8x8" in out
    assert "Simulation complete:" in out
    assert "0 particles left" in out

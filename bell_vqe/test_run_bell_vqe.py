import csv
import os

import matplotlib

matplotlib.use("Agg")

from bell_vqe import run_bell_vqe as cli  # noqa: E402
from bell_vqe import sweep_seeds  # noqa: E402


def test_cli_writes_log(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    result = cli.main(["--generations", "4", "--pop-size", "8", "--seed", "1",
                       "--refine-steps", "10", "--no-plot", "--output", "run.csv"])
    with open(tmp_path / "output" / "run.csv", newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == len(result.history)
    assert rows[0].keys() == {"generation", "objective", "fidelity"}
    out = capsys.readouterr().out
    assert "Final Fidelity" in out
    assert "ZZ" in out


def test_cli_with_plot(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cli_calls = []
    monkeypatch.setattr(cli, "plot_convergence",
                        lambda path, title: cli_calls.append((path, title)))
    cli.main(["--optimizer", "genetic", "--generations", "2", "--pop-size", "4",
              "--seed", "0", "--refine-steps", "0"])
    assert cli_calls == [(os.path.join("output", "vqe_log.csv"), "VQE for psi_plus")]


def test_seed_sweep(tmp_path):
    out = tmp_path / "sweep.csv"
    rows = sweep_seeds.sweep(
        range(2), str(out),
        target_name="psi_plus", optimizer="differential_evolution", estimator="sampled",
        shots=256, sampler="statevector", generations=3, pop_size=8,
    )
    assert [r["seed"] for r in rows] == [0, 1]
    with open(out, newline="") as f:
        written = list(csv.DictReader(f))
    assert len(written) == 2
    assert set(written[0]) == set(sweep_seeds.FIELDS)


def test_cli_sampled_run_through_aer(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    result = cli.main(["--estimator", "sampled", "--sampler", "aer", "--shots", "128",
                       "--generations", "2", "--pop-size", "4", "--seed", "3",
                       "--refine-steps", "3", "--no-plot", "--verbose"])
    assert result.estimator == "sampled"
    assert result.best_value >= -1.0 - 1e-9
    with open(tmp_path / "output" / "vqe_log.csv", newline="") as f:
        assert len(list(csv.DictReader(f))) == len(result.history)
    out = capsys.readouterr().out
    assert "sampled" in out

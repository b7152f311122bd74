import csv
import os

import matplotlib

matplotlib.use("Agg")

from bell_vqe.plotting import plot_convergence  # noqa: E402


def test_plot_convergence_writes_png(tmp_path):
    csv_path = tmp_path / "log.csv"
    with open(csv_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["generation", "objective", "fidelity"])
        for gen, value in enumerate([-0.4, -0.8, -0.97, -0.999], start=1):
            writer.writerow([gen, value, -value])

    out = plot_convergence(str(csv_path), show=False)
    assert out == os.path.join(str(tmp_path), "plot.png")
    assert os.path.getsize(out) > 0

    custom = tmp_path / "custom.png"
    assert plot_convergence(str(csv_path), output_path=str(custom), show=False) == str(custom)
    assert custom.exists()

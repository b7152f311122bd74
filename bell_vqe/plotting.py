import csv
import os

import matplotlib.pyplot as plt


def plot_convergence(csv_path, title="VQE Convergence", output_path=None, show=True):
    generations = []
    objectives = []
    fidelities = []

    with open(csv_path, mode='r', newline='') as file:
        reader = csv.DictReader(file)
        for row in reader:
            generations.append(int(row["generation"]))
            objectives.append(float(row["objective"]))
            fidelities.append(float(row["fidelity"]))

    fig, ax1 = plt.subplots()

    color = 'tab:blue'
    ax1.set_xlabel("Generation")
    ax1.set_ylabel("Objective  -⟨H⟩", color=color)
    ax1.plot(generations, objectives, color=color, label="Objective")
    ax1.axhline(-1.0, color=color, linestyle='dotted', linewidth=1)
    ax1.tick_params(axis='y', labelcolor=color)
    ax1.set_ylim(-1.05, 0.05)

    ax2 = ax1.twinx()
    color = 'tab:red'
    ax2.set_ylabel("Fidelity", color=color)
    ax2.plot(generations, fidelities, color=color, linestyle='dashed', label="Fidelity")
    ax2.tick_params(axis='y', labelcolor=color)
    ax2.set_ylim(0, 1.05)

    fig.tight_layout()
    plt.title(title)
    if output_path is None:
        output_path = os.path.join(os.path.dirname(csv_path) or ".", "plot.png")
    plt.savefig(output_path)
    if show:
        plt.show()
    plt.close(fig)
    return output_path

import argparse
import csv
import os

from tqdm import tqdm

from bell_vqe.analysis import summarize
from bell_vqe.expectation import DEFAULT_SHOTS, ESTIMATORS, SAMPLERS
from bell_vqe.known_states import BELL_GATE_SEQUENCES, TARGET_STATE
from bell_vqe.vqe import DEFAULT_POP_SIZE, OPTIMIZERS, run_vqe

FIELDS = ["seed", "objective", "expectation", "exact_expectation", "fidelity", "entropy", "evaluations", "params"]


def run_experiment(seed, target_name, optimizer, estimator, shots, sampler, generations, pop_size):
    result = run_vqe(
        target=target_name,
        optimizer=optimizer,
        estimator=estimator,
        shots=shots,
        sampler=sampler,
        generations=generations,
        population_size=pop_size,
        seed=seed,
    )
    row = summarize(result)
    row["seed"] = seed
    return row


def sweep(seeds, output, **kwargs):
    rows = []
    with open(output, mode="w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDS, extrasaction="ignore")
        writer.writeheader()
        for s in tqdm(seeds, desc="seeds"):
            row = run_experiment(seed=s, **kwargs)
            writer.writerow(row)
            rows.append(row)
    return rows


def main(argv=None):
    parser = argparse.ArgumentParser(description="Repeat the Bell-state VQE over several seeds")
    parser.add_argument("--target", type=str, default=TARGET_STATE, choices=sorted(BELL_GATE_SEQUENCES))
    parser.add_argument("--optimizer", type=str, default="differential_evolution", choices=OPTIMIZERS)
    parser.add_argument("--estimator", type=str, default="sampled", choices=ESTIMATORS)
    parser.add_argument("--sampler", type=str, default="statevector", choices=SAMPLERS)
    parser.add_argument("--shots", type=int, default=DEFAULT_SHOTS)
    parser.add_argument("--num-seeds", type=int, default=10)
    parser.add_argument("--generations", type=int, default=25)
    parser.add_argument("--pop-size", type=int, default=DEFAULT_POP_SIZE)
    parser.add_argument("--output", type=str, default="output/seed_sweep_log.csv")
    args = parser.parse_args(argv)

    os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)

    rows = sweep(
        range(args.num_seeds),
        args.output,
        target_name=args.target,
        optimizer=args.optimizer,
        estimator=args.estimator,
        shots=args.shots,
        sampler=args.sampler,
        generations=args.generations,
        pop_size=args.pop_size,
    )
    for row in rows:
        print(f"🌱 Seed {row['seed']:02d} | Objective: {row['objective']:+.5f} | "
              f"Fidelity: {row['fidelity']:.5f} | Entropy: {row['entropy']:.3f}")


if __name__ == "__main__":
    main()

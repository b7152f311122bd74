import argparse
import csv
import logging
import os

import numpy as np
from qiskit.quantum_info import state_fidelity

from bell_vqe.analysis import format_amplitudes
from bell_vqe.ansatz import AnsatzCircuit
from bell_vqe.expectation import DEFAULT_SHOTS, ESTIMATORS, SAMPLERS, pauli_term_table
from bell_vqe.hamiltonian import bell_hamiltonian, pauli_decomposition
from bell_vqe.known_states import BELL_GATE_SEQUENCES, TARGET_STATE, get_bell_statevector
from bell_vqe.plotting import plot_convergence
from bell_vqe.vqe import DEFAULT_GENERATIONS, DEFAULT_POP_SIZE, DEFAULT_REFINE_STEPS, OPTIMIZERS, run_vqe


def build_parser():
    parser = argparse.ArgumentParser(description="Prepare a Bell state with an evolutionary VQE")
    parser.add_argument("--target", type=str, default=TARGET_STATE, choices=sorted(BELL_GATE_SEQUENCES),
                        help="Target Bell state")
    parser.add_argument("--optimizer", type=str, default="differential_evolution", choices=OPTIMIZERS)
    parser.add_argument("--estimator", type=str, default="statevector", choices=ESTIMATORS,
                        help="Exact statevector expectation or sampled Pauli-term estimate")
    parser.add_argument("--sampler", type=str, default="statevector", choices=SAMPLERS,
                        help="Backend used to draw shots for the sampled estimator")
    parser.add_argument("--shots", type=int, default=DEFAULT_SHOTS)
    parser.add_argument("--generations", type=int, default=DEFAULT_GENERATIONS)
    parser.add_argument("--pop-size", type=int, default=DEFAULT_POP_SIZE)
    parser.add_argument("--refine-steps", type=int, default=DEFAULT_REFINE_STEPS)
    parser.add_argument("--output", type=str, default="vqe_log.csv")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (optional)")
    parser.add_argument("--no-plot", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    ansatz = AnsatzCircuit()
    target = get_bell_statevector(args.target)
    hamiltonian = pauli_decomposition(bell_hamiltonian(args.target))

    print(f"🎯 Target: {args.target}  {format_amplitudes(target)}")
    print("🧮 Hamiltonian:", " + ".join(f"({c.real:+.3f}) {p}" for p, c in hamiltonian.label_iter()))
    print(ansatz.parametrized_circuit().draw('text'))

    os.makedirs("output", exist_ok=True)
    log_path = os.path.join("output", args.output)

    with open(log_path, mode='w', newline='') as file:
        writer = csv.writer(file)
        writer.writerow(["generation", "objective", "fidelity"])

        def report(gen, value, params):
            fidelity = state_fidelity(ansatz.statevector(params), target)
            writer.writerow([gen, value, fidelity])
            print(f"🧬 Generation {gen:03d} | ⚡ Objective: {value:+.5f} | 🏆 Fidelity: {fidelity:.5f}")

        result = run_vqe(
            target=args.target,
            optimizer=args.optimizer,
            estimator=args.estimator,
            shots=args.shots,
            sampler=args.sampler,
            generations=args.generations,
            population_size=args.pop_size,
            seed=args.seed,
            ansatz=ansatz,
            hamiltonian=hamiltonian,
            refine_steps=args.refine_steps,
            callback=report,
        )

    print(ansatz.to_qiskit_circuit(result.best_params).draw('text'))
    print("📐 Parameters:", np.round(result.best_params, 5))
    print(f"⚡ Final Objective: {result.best_value:+.6f} (exact ⟨H⟩ = {result.exact_expectation:.6f}, "
          f"max eigenvalue = {result.reference_value:.6f})")
    print("🧾 Normalized State:", format_amplitudes(result.normalized_state))
    print("🎯 Final Fidelity:", result.fidelity)
    print(f"🔗 Entanglement Entropy: {result.entropy:.4f}")
    print("🔢 Objective Evaluations:", result.evaluations)

    print("\n📊 Pauli-term decomposition (computational-basis readout)")
    for label, coeff, exact, sampled in pauli_term_table(ansatz, result.best_params, hamiltonian,
                                                         shots=args.shots, sampler=args.sampler, seed=args.seed):
        print(f"  {label}: coeff {coeff:+.3f} | exact {exact:+.4f} | sampled {sampled:+.4f}")

    if not args.no_plot:
        plot_convergence(log_path, title=f"VQE for {args.target}")
    return result


if __name__ == "__main__":
    main()

"""Example: Hückel pi orbitals of [18]annulene.

The Hückel Hamiltonian of an N-site carbon ring has alpha on the diagonal
and beta between bonded neighbours, including the bond closing the ring.
Its orbital energies are known in closed form,

    E_k = alpha + 2 beta cos(2 pi k / N),

so the two-stage solver can be checked against them directly.
"""

import numpy as np

from bandeig import Diagonalizer, DiagonalizationDescriptor

n_sites = 18
alpha = 0.0    # eV, Coulomb integral (energy reference)
beta = -2.5    # eV, resonance integral

h = np.zeros((n_sites, n_sites), dtype=np.float32)
for i in range(n_sites):
    h[i, i] = alpha
    j = (i + 1) % n_sites
    h[i, j] = h[j, i] = beta

print(f"[{n_sites}]annulene, alpha = {alpha:.2f} eV, beta = {beta:.2f} eV")
print()

solver = Diagonalizer(
    gemm_backend="numpy",
    tridiagonal_solver="lapack",
    verbose=True,
)
desc = DiagonalizationDescriptor(
    matrix=h.ravel(),
    problem_size=n_sites,
    block_size=6,
)

result = solver.run(desc)
solver.print_summary(result)

# Compare with the closed-form orbital energies
k = np.arange(n_sites)
exact = np.sort(alpha + 2 * beta * np.cos(2 * np.pi * k / n_sites))
error = np.max(np.abs(result.eigenvalues - exact))

n_occupied = n_sites // 2
homo = result.eigenvalues[n_occupied - 1]
lumo = result.eigenvalues[n_occupied]
print(f"\nMax |E - E_exact|: {error:.2e} eV")
print(f"HOMO-LUMO gap: {lumo - homo:.4f} eV (exact: {exact[n_occupied] - exact[n_occupied - 1]:.4f} eV)")
print(f"Total pi energy: {2 * np.sum(result.eigenvalues[:n_occupied]):.4f} eV")

"""
Sparse linear system used by the network solvers.

Entries are written into a ``scipy.sparse.lil_matrix``; every ``solve`` call
converts to CSR and solves from scratch, so the matrix can be edited in place
between iterations.
"""

import numpy as np
from scipy.sparse import lil_matrix, csr_matrix
from scipy.sparse.linalg import spsolve


class LinearSystem:
    """
    Square system ``A x = b`` with an expected number of non-zeros per row.

    Parameters
    ----------
    size : int
        Number of unknowns
    bandwidth : int
        Expected number of non-zero entries per matrix row. Systems no larger
        than this are solved densely.
    """

    def __init__(self, size: int, bandwidth: int = 5):
        if size < 0:
            raise ValueError(f"System size must be non-negative, got {size}")
        if bandwidth < 1 and size > 0:
            raise ValueError(f"Bandwidth must be at least 1, got {bandwidth}")
        self.size = int(size)
        self.bandwidth = int(bandwidth)
        self._A = lil_matrix((self.size, self.size), dtype=float)
        self._b = np.zeros(self.size, dtype=float)
        self._assembled: csr_matrix = None

    def set_matrix_element(self, row: int, col: int, value: float) -> None:
        self._A[row, col] = value
        self._assembled = None

    def get_matrix_element(self, row: int, col: int) -> float:
        return float(self._A[row, col])

    def set_rhs_vector_element(self, row: int, value: float) -> None:
        self._b[row] = value

    def get_rhs_vector(self) -> np.ndarray:
        return self._b.copy()

    def assemble(self) -> csr_matrix:
        """Freeze the current entries into CSR form."""
        if self._assembled is None:
            self._assembled = self._A.tocsr()
        return self._assembled

    def solve(self) -> np.ndarray:
        """
        Solve the current system.

        Returns
        -------
        x : ndarray
            Dense solution vector indexed like the rows.

        Raises
        ------
        numpy.linalg.LinAlgError
            If the matrix is singular.
        """
        if self.size == 0:
            return np.zeros(0, dtype=float)

        A = self.assemble()
        if self.size <= self.bandwidth:
            x = np.linalg.solve(A.toarray(), self._b)
        else:
            x = np.atleast_1d(spsolve(A, self._b))

        if not np.all(np.isfinite(x)):
            raise np.linalg.LinAlgError("Linear system is singular or ill-conditioned")
        return np.asarray(x, dtype=float)

    def residual_norm(self, x: np.ndarray) -> float:
        """Euclidean norm of ``A x - b``."""
        if self.size == 0:
            return 0.0
        return float(np.linalg.norm(self.assemble() @ x - self._b))

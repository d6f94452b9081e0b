"""Correlation matrix construction and Cholesky factorization."""

import logging
import math
from typing import List, Sequence

import numpy as np

from .errors import InconsistentCorrelationMatrixError
from .variables import SimulationVariable

logger = logging.getLogger(__name__)

PSD_TOLERANCE = 1e-10


def build_correlation_matrix(variables: Sequence[SimulationVariable]) -> np.ndarray:
    """Assemble the correlation matrix from per-variable declarations.

    Off-diagonal entries are filled symmetrically in declaration order, so a
    pair declared on both variables takes the value of the later one.
    Unspecified pairs are 0 and correlations to unknown ids are ignored.

    Args:
        variables: Variables in sampling order

    Returns:
        Array of shape (n, n) with unit diagonal
    """
    n = len(variables)
    corr = np.eye(n)

    for i, variable in enumerate(variables):
        for j, other in enumerate(variables):
            if i != j and other.id in variable.correlations:
                rho = variable.correlations[other.id]
                corr[i, j] = rho
                corr[j, i] = rho

    return corr


def validate_correlation_matrix(matrix: np.ndarray) -> None:
    """Check that a matrix is a valid correlation matrix.

    Args:
        matrix: Candidate correlation matrix

    Raises:
        InconsistentCorrelationMatrixError: If the matrix is not square,
            symmetric, unit-diagonal, bounded in [-1, 1] and positive
            semi-definite
    """
    matrix = np.asarray(matrix, dtype=float)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise InconsistentCorrelationMatrixError(
            f"Correlation matrix must be square, got shape {matrix.shape}"
        )

    if not np.allclose(matrix, matrix.T):
        raise InconsistentCorrelationMatrixError("Correlation matrix must be symmetric")

    if not np.allclose(np.diag(matrix), 1.0):
        raise InconsistentCorrelationMatrixError("Diagonal elements must be 1")

    if np.any(matrix < -1) or np.any(matrix > 1):
        raise InconsistentCorrelationMatrixError("Correlations must be between -1 and 1")

    if matrix.size:
        eigvals = np.linalg.eigvalsh(matrix)
        if np.any(eigvals < -PSD_TOLERANCE):
            raise InconsistentCorrelationMatrixError(
                f"Correlation matrix must be positive semi-definite "
                f"(smallest eigenvalue {eigvals.min():.3e})"
            )


def cholesky_decomposition(matrix: np.ndarray, strict: bool = False) -> np.ndarray:
    """Lower-triangular Cholesky factor L with L @ L.T ~= matrix.

    In the default lenient mode a negative radicand on the diagonal is clamped
    to zero and a zero pivot is treated as 1 in the denominator, so a matrix
    that is not positive semi-definite still yields a usable factor.

    Args:
        matrix: Symmetric matrix of shape (n, n)
        strict: Validate the matrix first and raise instead of clamping

    Returns:
        Lower-triangular array of shape (n, n)
    """
    a = np.asarray(matrix, dtype=float)
    if strict:
        validate_correlation_matrix(a)

    n = a.shape[0]
    L: List[List[float]] = [[0.0] * n for _ in range(n)]
    clamped = 0

    for i in range(n):
        for j in range(i + 1):
            total = 0.0
            for k in range(j):
                total += L[i][k] * L[j][k]
            if i == j:
                radicand = a[i, i] - total
                if radicand < 0:
                    clamped += 1
                L[i][j] = math.sqrt(max(0.0, radicand))
            else:
                L[i][j] = (a[i, j] - total) / (L[j][j] or 1.0)

    if clamped:
        logger.warning(
            "Correlation matrix is not positive semi-definite; clamped %d "
            "negative pivot(s) to zero", clamped
        )

    return np.array(L)

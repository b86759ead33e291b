################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################
"""Linear algebra kernel for ellipsoid fitting.

Numerically singular inputs never raise here. Callers receive non-finite
values instead and are expected to reject them with a physical range check.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


class Linalg:
    """General N x N linear algebra helpers."""

    @staticmethod
    def ensure_shape(x: NDArray[np.float64], shape: tuple[int, ...], name: str) -> None:
        """Ensure an array has the expected shape."""
        if x.shape != shape:
            raise ValueError(f"{name} must have shape {shape}")

    @staticmethod
    def ensure_square(x: NDArray[np.float64], name: str) -> int:
        """Ensure an array is a square matrix and return its dimension."""
        if x.ndim != 2 or x.shape[0] != x.shape[1]:
            raise ValueError(f"{name} must be a square matrix")
        return int(x.shape[0])

    @staticmethod
    def invert(A: NDArray[np.float64]) -> NDArray[np.float64]:
        """Return the inverse of a square matrix.

        A singular matrix yields a matrix of NaN rather than an exception.
        """
        mat: NDArray[np.float64] = np.asarray(A, dtype=float)
        n: int = Linalg.ensure_square(mat, "A")
        try:
            return np.asarray(np.linalg.inv(mat), dtype=float)
        except np.linalg.LinAlgError:
            return np.full((n, n), np.nan, dtype=float)

    @staticmethod
    def eigen_decompose(
        A: NDArray[np.float64],
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Return eigenvalues and column eigenvectors of a symmetric matrix.

        Callers must not rely on the eigenvalue order or eigenvector signs.
        """
        mat: NDArray[np.float64] = np.asarray(A, dtype=float)
        n: int = Linalg.ensure_square(mat, "A")
        if not np.all(np.isfinite(mat)):
            return (
                np.full(n, np.nan, dtype=float),
                np.full((n, n), np.nan, dtype=float),
            )
        eigvals: NDArray[np.float64]
        eigvecs: NDArray[np.float64]
        eigvals, eigvecs = np.linalg.eigh(mat)
        return np.asarray(eigvals, dtype=float), np.asarray(eigvecs, dtype=float)

    @staticmethod
    def smallest_eigenpair(
        eigvals: NDArray[np.float64],
        eigvecs: NDArray[np.float64],
    ) -> tuple[float, NDArray[np.float64]]:
        """Return the smallest eigenvalue and a copy of its eigenvector."""
        values: NDArray[np.float64] = np.asarray(eigvals, dtype=float)
        vectors: NDArray[np.float64] = np.asarray(eigvecs, dtype=float)
        Linalg.ensure_shape(vectors, (values.size, values.size), "eigvecs")
        index: int = int(np.argmin(values))
        return float(values[index]), np.array(vectors[:, index], dtype=float)

    @staticmethod
    def symmetrize_upper(A: NDArray[np.float64]) -> NDArray[np.float64]:
        """Return a symmetric matrix built from the on and above-diagonal terms."""
        mat: NDArray[np.float64] = np.asarray(A, dtype=float)
        Linalg.ensure_square(mat, "A")
        upper: NDArray[np.float64] = np.triu(mat)
        return upper + np.triu(mat, k=1).T


class Mat3:
    """Matrix utilities for 3x3 matrices."""

    @staticmethod
    def identity() -> NDArray[np.float64]:
        """Return the 3x3 identity matrix."""
        return np.eye(3, dtype=float)

    @staticmethod
    def negate(A: NDArray[np.float64]) -> NDArray[np.float64]:
        """Return the negated matrix."""
        mat: NDArray[np.float64] = np.asarray(A, dtype=float)
        Linalg.ensure_shape(mat, (3, 3), "A")
        return -mat

    @staticmethod
    def scale(A: NDArray[np.float64], s: float) -> NDArray[np.float64]:
        """Return the matrix multiplied by a scalar."""
        mat: NDArray[np.float64] = np.asarray(A, dtype=float)
        Linalg.ensure_shape(mat, (3, 3), "A")
        return mat * float(s)

    @staticmethod
    def det(A: NDArray[np.float64]) -> float:
        """Return the determinant by cofactor expansion along the first row."""
        mat: NDArray[np.float64] = np.asarray(A, dtype=float)
        Linalg.ensure_shape(mat, (3, 3), "A")
        return float(
            mat[0, 0] * (mat[1, 1] * mat[2, 2] - mat[1, 2] * mat[2, 1])
            + mat[0, 1] * (mat[1, 2] * mat[2, 0] - mat[1, 0] * mat[2, 2])
            + mat[0, 2] * (mat[1, 0] * mat[2, 1] - mat[1, 1] * mat[2, 0])
        )

    @staticmethod
    def inv_sym(A: NDArray[np.float64]) -> NDArray[np.float64]:
        """Return the inverse of a symmetric 3x3 matrix from its adjugate.

        Only the on and above-diagonal terms are read. A singular matrix
        produces non-finite entries.
        """
        mat: NDArray[np.float64] = np.asarray(A, dtype=float)
        Linalg.ensure_shape(mat, (3, 3), "A")

        a00: float = float(mat[0, 0])
        a01: float = float(mat[0, 1])
        a02: float = float(mat[0, 2])
        a11: float = float(mat[1, 1])
        a12: float = float(mat[1, 2])
        a22: float = float(mat[2, 2])

        c00: float = a11 * a22 - a12 * a12
        c01: float = a02 * a12 - a01 * a22
        c02: float = a01 * a12 - a02 * a11
        c11: float = a00 * a22 - a02 * a02
        c12: float = a01 * a02 - a00 * a12
        c22: float = a00 * a11 - a01 * a01

        adj: NDArray[np.float64] = np.array(
            [
                [c00, c01, c02],
                [c01, c11, c12],
                [c02, c12, c22],
            ],
            dtype=float,
        )
        det: float = a00 * c00 + a01 * c01 + a02 * c02
        with np.errstate(divide="ignore", invalid="ignore"):
            return adj / np.float64(det)

    @staticmethod
    def sqrtm_spd(A: NDArray[np.float64]) -> NDArray[np.float64]:
        """Return the principal square root of a symmetric 3x3 matrix.

        Each eigenvector column is scaled by the fourth root of its eigenvalue
        magnitude so the product M M^T is symmetric by construction.
        """
        mat: NDArray[np.float64] = np.asarray(A, dtype=float)
        Linalg.ensure_shape(mat, (3, 3), "A")
        eigvals: NDArray[np.float64]
        eigvecs: NDArray[np.float64]
        eigvals, eigvecs = Linalg.eigen_decompose(mat)
        M: NDArray[np.float64] = eigvecs * np.sqrt(np.sqrt(np.abs(eigvals)))
        return M @ M.T

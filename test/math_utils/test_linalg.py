################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################
"""Tests for the ellipsoid-fit linear algebra kernel."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.typing import NDArray

from oasis_magcal.math_utils.linalg import Linalg
from oasis_magcal.math_utils.linalg import Mat3


SPD: NDArray[np.float64] = np.array(
    [[4.0, 1.0, 0.5], [1.0, 3.0, 0.2], [0.5, 0.2, 2.0]], dtype=float
)


def test_invert_matches_numpy() -> None:
    """Checks a regular 4x4 inverse."""
    mat: NDArray[np.float64] = np.array(
        [
            [4.0, 1.0, 0.0, 2.0],
            [1.0, 5.0, 1.0, 0.0],
            [0.0, 1.0, 6.0, 1.0],
            [2.0, 0.0, 1.0, 7.0],
        ],
        dtype=float,
    )
    inv: NDArray[np.float64] = Linalg.invert(mat)
    np.testing.assert_allclose(inv @ mat, np.eye(4), atol=1e-12)


def test_invert_singular_is_non_finite() -> None:
    """Checks a singular matrix yields NaN instead of raising."""
    mat: NDArray[np.float64] = np.zeros((4, 4), dtype=float)
    mat[0, 0] = 1.0
    inv: NDArray[np.float64] = Linalg.invert(mat)
    assert inv.shape == (4, 4)
    assert not np.all(np.isfinite(inv))


def test_invert_rejects_non_square() -> None:
    """Checks non-square input raises."""
    with pytest.raises(ValueError):
        Linalg.invert(np.zeros((3, 4), dtype=float))


def test_eigen_decompose_reconstructs() -> None:
    """Checks eigenpairs reconstruct the symmetric matrix."""
    eigvals: NDArray[np.float64]
    eigvecs: NDArray[np.float64]
    eigvals, eigvecs = Linalg.eigen_decompose(SPD)
    rebuilt: NDArray[np.float64] = eigvecs @ np.diag(eigvals) @ eigvecs.T
    np.testing.assert_allclose(rebuilt, SPD, atol=1e-12)


def test_eigen_decompose_non_finite() -> None:
    """Checks non-finite input yields NaN eigenpairs instead of raising."""
    mat: NDArray[np.float64] = SPD.copy()
    mat[0, 0] = np.inf
    eigvals: NDArray[np.float64]
    eigvecs: NDArray[np.float64]
    eigvals, eigvecs = Linalg.eigen_decompose(mat)
    assert np.all(np.isnan(eigvals))
    assert eigvecs.shape == (3, 3)


def test_smallest_eigenpair() -> None:
    """Checks the smallest eigenvalue is selected regardless of order."""
    eigvals: NDArray[np.float64] = np.array([3.0, -1.0, 2.0], dtype=float)
    eigvecs: NDArray[np.float64] = np.eye(3, dtype=float)
    value: float
    vector: NDArray[np.float64]
    value, vector = Linalg.smallest_eigenpair(eigvals, eigvecs)
    assert value == -1.0
    np.testing.assert_array_equal(vector, np.array([0.0, 1.0, 0.0]))
    vector[0] = 5.0
    assert eigvecs[0, 1] == 0.0


def test_symmetrize_upper() -> None:
    """Checks the lower triangle is replaced by the upper triangle."""
    mat: NDArray[np.float64] = np.array(
        [[1.0, 2.0, 3.0], [9.0, 4.0, 5.0], [9.0, 9.0, 6.0]], dtype=float
    )
    result: NDArray[np.float64] = Linalg.symmetrize_upper(mat)
    np.testing.assert_array_equal(result, result.T)
    np.testing.assert_array_equal(np.diag(result), np.array([1.0, 4.0, 6.0]))
    assert result[2, 0] == 3.0


def test_mat3_helpers() -> None:
    """Checks identity, negate and scale."""
    np.testing.assert_array_equal(Mat3.identity(), np.eye(3))
    np.testing.assert_array_equal(Mat3.negate(SPD), -SPD)
    np.testing.assert_array_equal(Mat3.scale(SPD, 2.0), 2.0 * SPD)
    with pytest.raises(ValueError):
        Mat3.negate(np.zeros((2, 2), dtype=float))


def test_det_matches_numpy() -> None:
    """Checks the cofactor determinant."""
    mat: NDArray[np.float64] = np.array(
        [[2.0, -1.0, 0.5], [0.3, 1.5, -2.0], [1.0, 0.0, 3.0]], dtype=float
    )
    assert np.isclose(Mat3.det(mat), float(np.linalg.det(mat)))


def test_inv_sym() -> None:
    """Checks the symmetric inverse."""
    inv: NDArray[np.float64] = Mat3.inv_sym(SPD)
    np.testing.assert_allclose(inv @ SPD, np.eye(3), atol=1e-12)
    np.testing.assert_allclose(inv, inv.T)


def test_inv_sym_singular_is_non_finite() -> None:
    """Checks a singular symmetric matrix yields non-finite entries."""
    inv: NDArray[np.float64] = Mat3.inv_sym(np.ones((3, 3), dtype=float))
    assert not np.all(np.isfinite(inv))


def test_sqrtm_spd() -> None:
    """Checks the principal square root squares back to the input."""
    root: NDArray[np.float64] = Mat3.sqrtm_spd(SPD)
    np.testing.assert_allclose(root, root.T)
    np.testing.assert_allclose(root @ root, SPD, atol=1e-12)
    assert np.all(np.linalg.eigvalsh(root) > 0.0)

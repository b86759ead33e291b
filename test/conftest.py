################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Synthetic magnetometer data shared by calibration tests."""

from __future__ import annotations

from typing import Callable

import numpy as np
import pytest


# uT per count, matches the default sensor sensitivity
UT_PER_COUNT: float = 0.1

# uT, hard-iron offset used by the synthetic sensors
HARD_IRON_UT: np.ndarray = np.array([12.0, -7.5, 30.0], dtype=np.float64)

# uT, geomagnetic field magnitude used by the synthetic sensors
FIELD_UT: float = 48.0


def fibonacci_directions(count: int) -> np.ndarray:
    """Return unit vectors spread evenly over the sphere."""
    index: np.ndarray = np.arange(count, dtype=np.float64) + 0.5
    z: np.ndarray = 1.0 - 2.0 * index / count
    radius: np.ndarray = np.sqrt(1.0 - z * z)
    golden_angle: float = float(np.pi * (3.0 - np.sqrt(5.0)))
    theta: np.ndarray = golden_angle * index
    return np.column_stack((radius * np.cos(theta), radius * np.sin(theta), z))


def ellipsoid_counts(
    *,
    count: int,
    soft_iron: np.ndarray,
    field_uT: float = FIELD_UT,
    hard_iron_uT: np.ndarray = HARD_IRON_UT,
) -> np.ndarray:
    """Return raw counts whose corrected field has a constant magnitude.

    Each sample satisfies |soft_iron (raw * UT_PER_COUNT - V)| = B exactly.
    """
    directions: np.ndarray = fibonacci_directions(count)
    distortion: np.ndarray = np.linalg.inv(soft_iron)
    field: np.ndarray = hard_iron_uT + field_uT * (directions @ distortion.T)
    return field / UT_PER_COUNT


def unit_det(matrix: np.ndarray) -> np.ndarray:
    """Return a matrix scaled to unit determinant."""
    return matrix / np.cbrt(np.linalg.det(matrix))


@pytest.fixture
def diagonal_soft_iron() -> np.ndarray:
    """Axis-aligned soft-iron correction with unit determinant."""
    return np.diag([1.2, 0.9, 1.0 / 1.08]).astype(np.float64)


@pytest.fixture
def full_soft_iron() -> np.ndarray:
    """Symmetric positive-definite soft-iron correction with unit determinant."""
    matrix: np.ndarray = np.array(
        [
            [1.10, 0.05, -0.03],
            [0.05, 0.95, 0.02],
            [-0.03, 0.02, 1.00],
        ],
        dtype=np.float64,
    )
    return unit_det(matrix)


@pytest.fixture
def make_counts() -> Callable[..., np.ndarray]:
    """Factory for raw counts on a distorted sphere."""
    return ellipsoid_counts

################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Per-invocation scratch space shared by the ellipsoid solvers."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from oasis_magcal.config.magcal_params import SensorParams


# Largest accumulator dimension across solver tiers
MAX_DIM: int = 10


@dataclass
class SolverWorkspace:
    """Zero-initialized accumulators for a single solver run.

    Attributes:
        mat_a: Measurement product matrix, up to 10x10
        mat_b: Inverse or eigenvector matrix, up to 10x10
        vec_a: Solution or eigenvalue vector, up to 10
        vec_b: Right-hand side vector, up to 10
        ellipsoid: Ellipsoid matrix A
        ellipsoid_inv: Inverse of the ellipsoid matrix A
        offset: Raw counts of the first sample, removed before accumulation
        count: Number of samples accumulated
    """

    mat_a: np.ndarray
    mat_b: np.ndarray
    vec_a: np.ndarray
    vec_b: np.ndarray
    ellipsoid: np.ndarray
    ellipsoid_inv: np.ndarray
    offset: np.ndarray
    count: int

    @classmethod
    def zeroed(cls) -> SolverWorkspace:
        """Return a freshly zeroed workspace."""
        return cls(
            mat_a=np.zeros((MAX_DIM, MAX_DIM), dtype=np.float64),
            mat_b=np.zeros((MAX_DIM, MAX_DIM), dtype=np.float64),
            vec_a=np.zeros(MAX_DIM, dtype=np.float64),
            vec_b=np.zeros(MAX_DIM, dtype=np.float64),
            ellipsoid=np.zeros((3, 3), dtype=np.float64),
            ellipsoid_inv=np.zeros((3, 3), dtype=np.float64),
            offset=np.zeros(3, dtype=np.float64),
            count=0,
        )

    def load_samples(
        self,
        raw: np.ndarray,
        mask: np.ndarray,
        sensor: SensorParams,
    ) -> np.ndarray:
        """Return offset and scaled samples selected by a slot mask.

        The first selected sample becomes the offset, which keeps the
        accumulated magnitudes small. Scaled samples are dimensionless and
        close to unit length for a nominal geomagnetic field.
        """
        selected: np.ndarray = np.asarray(raw, dtype=np.float64)[mask]
        self.count = int(selected.shape[0])
        if self.count > 0:
            self.offset = selected[0].copy()
        scaling: float = sensor.ut_per_count / sensor.default_b_uT
        return (selected - self.offset) * scaling

    def hard_iron_to_uT(self, v_scaled: np.ndarray, sensor: SensorParams) -> np.ndarray:
        """Undo the conditioning scale and offset on a hard-iron estimate."""
        return v_scaled * sensor.default_b_uT + self.offset * sensor.ut_per_count

    def accumulate_upper(self, design: np.ndarray) -> np.ndarray:
        """Accumulate the on and above-diagonal terms of design^T design.

        The trailing design column is the constant 1, so its diagonal entry is
        set to the sample count.
        """
        dim: int = int(design.shape[1])
        product: np.ndarray = np.triu(design.T @ design)
        self.mat_a[:dim, :dim] = product
        self.mat_a[dim - 1, dim - 1] = float(self.count)
        return self.mat_a[:dim, :dim]

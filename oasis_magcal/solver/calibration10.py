################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Ten element calibration with a full symmetric soft-iron ellipsoid.

The ellipsoid x^T A x + b.x + c = 0 has six independent entries in A, three
linear terms and a constant. The solution is the eigenvector of the smallest
eigenvalue of the 10x10 measurement product matrix. The soft-iron correction
is the principal square root of A normalized to unit determinant.

Slots are selected with the invalidation sentinel rather than flag
truthiness, so never-written slots take part in this fit.
"""

from __future__ import annotations

import numpy as np

from oasis_magcal.config.magcal_params import MagCalParams
from oasis_magcal.magcal_types.calibration import TrialCalibration
from oasis_magcal.magcal_types.mag_buffer import MagBufferSnapshot
from oasis_magcal.magcal_types.solver_tier import SolverTier
from oasis_magcal.math_utils.linalg import Linalg
from oasis_magcal.math_utils.linalg import Mat3
from oasis_magcal.solver.workspace import SolverWorkspace


def ellipsoid_from_solution(solution: np.ndarray) -> np.ndarray:
    """Return the symmetric ellipsoid matrix packed in the first six terms."""
    s: np.ndarray = np.asarray(solution, dtype=np.float64)
    return np.array(
        [
            [s[0], s[1], s[2]],
            [s[1], s[3], s[4]],
            [s[2], s[4], s[5]],
        ],
        dtype=np.float64,
    )


def fit_calibration10(
    snapshot: MagBufferSnapshot,
    params: MagCalParams | None = None,
) -> TrialCalibration:
    """Fit hard iron and a full symmetric soft-iron matrix."""
    cal_params: MagCalParams = params or MagCalParams.defaults()
    ws: SolverWorkspace = SolverWorkspace.zeroed()

    x: np.ndarray = ws.load_samples(
        snapshot.raw, snapshot.usable_mask(), cal_params.sensor
    )
    n: int = ws.count

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        px: np.ndarray = x[:, 0]
        py: np.ndarray = x[:, 1]
        pz: np.ndarray = x[:, 2]

        # Measurement vector [x^2, 2xy, 2xz, y^2, 2yz, z^2, x, y, z, 1]
        design: np.ndarray = np.column_stack(
            (
                px * px,
                2.0 * px * py,
                2.0 * px * pz,
                py * py,
                2.0 * py * pz,
                pz * pz,
                x,
                np.ones(n, dtype=np.float64),
            )
        )
        ws.mat_a[:10, :10] = Linalg.symmetrize_upper(ws.accumulate_upper(design))

        eigvals: np.ndarray
        eigvecs: np.ndarray
        eigvals, eigvecs = Linalg.eigen_decompose(ws.mat_a[:10, :10])
        ws.vec_a[:10] = eigvals
        ws.mat_b[:10, :10] = eigvecs

        eigval: float
        solution: np.ndarray
        eigval, solution = Linalg.smallest_eigenpair(eigvals, eigvecs)

        ws.ellipsoid = ellipsoid_from_solution(solution)

        # Negate the entire solution if A has negative determinant
        det: float = Mat3.det(ws.ellipsoid)
        if det < 0.0:
            ws.ellipsoid = Mat3.negate(ws.ellipsoid)
            solution[6:10] = -solution[6:10]
            det = -det

        ws.ellipsoid_inv = Mat3.inv_sym(ws.ellipsoid)
        v_scaled: np.ndarray = -0.5 * (ws.ellipsoid_inv @ solution[6:9])

        b_sq: float = float(v_scaled @ ws.ellipsoid @ v_scaled - solution[9])
        b_scaled: float = float(np.sqrt(np.abs(b_sq)))

        fit_error_pc: float = float(
            50.0
            * np.sqrt(np.abs(eigval) / np.float64(n))
            / np.float64(b_scaled * b_scaled)
        )

        # Normalize A to unit determinant and rescale B to match
        ws.ellipsoid = Mat3.scale(ws.ellipsoid, np.power(det, -1.0 / 3.0))
        field_uT: float = float(
            b_scaled * cal_params.sensor.default_b_uT * np.power(det, -1.0 / 6.0)
        )

        soft_iron: np.ndarray = Mat3.sqrtm_spd(ws.ellipsoid)

    return TrialCalibration(
        tier=SolverTier.TIER10,
        fit_error_pc=fit_error_pc,
        field_uT=field_uT,
        hard_iron_uT=ws.hard_iron_to_uT(v_scaled, cal_params.sensor),
        soft_iron=soft_iron,
        sample_count=n,
    )

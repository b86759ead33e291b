################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Seven element calibration with a diagonal soft-iron ellipsoid.

The ellipsoid a_x x^2 + a_y y^2 + a_z z^2 + b.x + c = 0 is found as the
eigenvector of the smallest eigenvalue of the 7x7 measurement product matrix.
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


def fit_calibration7(
    snapshot: MagBufferSnapshot,
    params: MagCalParams | None = None,
) -> TrialCalibration:
    """Fit hard iron and a diagonal soft-iron matrix."""
    cal_params: MagCalParams = params or MagCalParams.defaults()
    ws: SolverWorkspace = SolverWorkspace.zeroed()

    x: np.ndarray = ws.load_samples(
        snapshot.raw, snapshot.valid_mask(), cal_params.sensor
    )
    n: int = ws.count

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        # Measurement vector [x^2, y^2, z^2, x, y, z, 1]
        design: np.ndarray = np.column_stack(
            (x * x, x, np.ones(n, dtype=np.float64))
        )
        ws.mat_a[:7, :7] = Linalg.symmetrize_upper(ws.accumulate_upper(design))

        eigvals: np.ndarray
        eigvecs: np.ndarray
        eigvals, eigvecs = Linalg.eigen_decompose(ws.mat_a[:7, :7])
        ws.vec_a[:7] = eigvals
        ws.mat_b[:7, :7] = eigvecs

        eigval: float
        solution: np.ndarray
        eigval, solution = Linalg.smallest_eigenpair(eigvals, eigvecs)

        ws.ellipsoid = np.diag(solution[:3])
        det: float = float(np.prod(solution[:3]))
        v_scaled: np.ndarray = -0.5 * solution[3:6] / solution[:3]

        # The eigenvector sign is arbitrary but A must be positive definite
        if det < 0.0:
            ws.ellipsoid = Mat3.negate(ws.ellipsoid)
            solution[6] = -solution[6]
            det = -det

        diag: np.ndarray = np.diag(ws.ellipsoid)
        b_sq: float = float(-solution[6] + np.sum(diag * v_scaled * v_scaled))

        fit_error_pc: float = float(
            50.0 * np.sqrt(np.abs(eigval) / np.float64(n)) / np.abs(np.float64(b_sq))
        )

        # Normalize A to unit determinant and rescale B to match
        ws.ellipsoid = Mat3.scale(ws.ellipsoid, np.power(det, -1.0 / 3.0))
        field_uT: float = float(
            np.sqrt(np.abs(b_sq))
            * cal_params.sensor.default_b_uT
            * np.power(det, -1.0 / 6.0)
        )

        soft_iron: np.ndarray = Mat3.identity()
        np.fill_diagonal(soft_iron, np.sqrt(np.abs(np.diag(ws.ellipsoid))))

    return TrialCalibration(
        tier=SolverTier.TIER7,
        fit_error_pc=fit_error_pc,
        field_uT=field_uT,
        hard_iron_uT=ws.hard_iron_to_uT(v_scaled, cal_params.sensor),
        soft_iron=soft_iron,
        sample_count=n,
    )

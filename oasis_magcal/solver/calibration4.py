################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Four element hard-iron calibration by normal-equation inversion.

The samples are fit to a sphere |x - V|^2 = B^2, linearized as

    x.x = 2 V.x + (B^2 - V.V)

which is linear in the four unknowns [2V, B^2 - V.V]. The soft-iron matrix is
fixed to the identity.
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


def fit_calibration4(
    snapshot: MagBufferSnapshot,
    params: MagCalParams | None = None,
) -> TrialCalibration:
    """Fit hard iron and field strength with identity soft iron."""
    cal_params: MagCalParams = params or MagCalParams.defaults()
    ws: SolverWorkspace = SolverWorkspace.zeroed()

    x: np.ndarray = ws.load_samples(
        snapshot.raw, snapshot.valid_mask(), cal_params.sensor
    )
    n: int = ws.count

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        # Y = |x|^2 per sample, X = [x, y, z, 1]
        bp2: np.ndarray = np.sum(x * x, axis=1)
        design: np.ndarray = np.column_stack((x, np.ones(n, dtype=np.float64)))

        sum_bp4: float = float(bp2 @ bp2)
        ws.vec_b[:4] = design.T @ bp2
        XtY: np.ndarray = ws.vec_b[:4]

        XtX: np.ndarray = Linalg.symmetrize_upper(ws.accumulate_upper(design))
        ws.mat_a[:4, :4] = XtX
        ws.mat_b[:4, :4] = Linalg.invert(XtX)

        # beta = inv(X^T X) X^T Y
        ws.vec_a[:4] = ws.mat_b[:4, :4] @ XtY
        beta: np.ndarray = ws.vec_a[:4]

        # r^T r = Y^T Y - 2 beta^T X^T Y + beta^T X^T X beta
        fit_residual: float = sum_bp4 - 2.0 * float(beta @ XtY)
        fit_residual += float(beta @ (XtX @ beta))
        # Rounding can push a zero residual slightly negative
        fit_residual = max(fit_residual, 0.0)

        v_scaled: np.ndarray = 0.5 * beta[:3]
        b_scaled: float = float(np.sqrt(beta[3] + v_scaled @ v_scaled))

        fit_error_pc: float = float(
            np.sqrt(np.float64(fit_residual) / n)
            * 100.0
            / np.float64(2.0 * b_scaled * b_scaled)
        )

    return TrialCalibration(
        tier=SolverTier.TIER4,
        fit_error_pc=fit_error_pc,
        field_uT=b_scaled * cal_params.sensor.default_b_uT,
        hard_iron_uT=ws.hard_iron_to_uT(v_scaled, cal_params.sensor),
        soft_iron=Mat3.identity(),
        sample_count=n,
    )

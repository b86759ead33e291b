################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Solver selection by calibration tier."""

from __future__ import annotations

from typing import Callable
from typing import Optional

from oasis_magcal.config.magcal_params import MagCalParams
from oasis_magcal.magcal_types.calibration import TrialCalibration
from oasis_magcal.magcal_types.mag_buffer import MagBufferSnapshot
from oasis_magcal.magcal_types.solver_tier import SolverTier
from oasis_magcal.solver.calibration4 import fit_calibration4
from oasis_magcal.solver.calibration7 import fit_calibration7
from oasis_magcal.solver.calibration10 import fit_calibration10


SolverFn = Callable[[MagBufferSnapshot, Optional[MagCalParams]], TrialCalibration]


SOLVERS: dict[SolverTier, SolverFn] = {
    SolverTier.TIER4: fit_calibration4,
    SolverTier.TIER7: fit_calibration7,
    SolverTier.TIER10: fit_calibration10,
}


class MagCalSolverError(Exception):
    """Raised when no solver exists for a requested tier."""


def run_solver(
    tier: SolverTier,
    snapshot: MagBufferSnapshot,
    params: MagCalParams | None = None,
) -> TrialCalibration:
    """Run the solver registered for a tier and return its trial calibration."""
    solver: SolverFn | None = SOLVERS.get(tier)
    if solver is None:
        raise MagCalSolverError(f"No solver for tier {tier!r}")
    return solver(snapshot, params)

################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""
Throttled calibration scheduling and acceptance policy
"""

from __future__ import annotations

import logging
from typing import Optional
from typing import Union

import numpy as np

from oasis_magcal.config.magcal_config import MagCalConfig
from oasis_magcal.config.magcal_params import MagCalParams
from oasis_magcal.magcal_types.calibration import MagCalibration
from oasis_magcal.magcal_types.calibration import TrialCalibration
from oasis_magcal.magcal_types.mag_buffer import MagBufferSnapshot
from oasis_magcal.magcal_types.mag_buffer import MagSampleBuffer
from oasis_magcal.magcal_types.solver_tier import SolverTier
from oasis_magcal.solver.dispatch import run_solver


_LOG: logging.Logger = logging.getLogger(__name__)


class MagCalContext:
    """
    Calibration state owned by a single caller

    The accepted calibration is an immutable record that is replaced by
    reference, so readers always see a consistent tier, bias and matrix.
    """

    def __init__(self, params: Optional[MagCalParams] = None) -> None:
        self._config: MagCalConfig = MagCalConfig(params or MagCalParams.defaults())
        self.calibration: MagCalibration = MagCalibration.uncalibrated()
        self.wait_count: int = 0
        self.last_trial: Optional[TrialCalibration] = None

    @property
    def params(self) -> MagCalParams:
        """Return the validated calibration parameters."""
        return self._config.params

    def make_buffer(self) -> MagSampleBuffer:
        """Return an empty sample buffer sized by the configuration."""
        return MagSampleBuffer(capacity=self._config.buffer_capacity())

    def reset(self) -> None:
        """Discard the accepted calibration and restart the throttle."""
        self.calibration = MagCalibration.uncalibrated()
        self.wait_count = 0
        self.last_trial = None


def select_tier(count: int, params: MagCalParams) -> SolverTier:
    """Return the richest solver tier supported by a sample count."""
    if count < params.tiers.min_measurements_4:
        return SolverTier.NONE
    if count < params.tiers.min_measurements_7:
        return SolverTier.TIER4
    if count < params.tiers.min_measurements_10:
        return SolverTier.TIER7
    return SolverTier.TIER10


def field_in_range(field_uT: float, params: MagCalParams) -> bool:
    """Return True if a field magnitude is physically plausible.

    NaN is never in range.
    """
    return bool(
        params.acceptance.min_b_uT <= field_uT <= params.acceptance.max_b_uT
    )


def should_accept(
    accepted: MagCalibration,
    trial: TrialCalibration,
    params: MagCalParams,
) -> bool:
    """Apply the acceptance policy to an in-range trial calibration."""
    if not accepted.is_valid():
        return True
    if trial.fit_error_pc <= accepted.fit_error_pc:
        return True
    return bool(
        trial.tier > accepted.tier
        and trial.fit_error_pc <= params.acceptance.richer_tier_max_fit_error_pc
    )


def run_calibration_cycle(
    context: MagCalContext,
    buffer: Union[MagSampleBuffer, MagBufferSnapshot],
) -> None:
    """Run one throttled calibration attempt against the sample buffer."""
    params: MagCalParams = context.params

    context.wait_count += 1
    if context.wait_count < params.schedule.throttle_period:
        return
    context.wait_count = 0

    snapshot: MagBufferSnapshot = (
        buffer.snapshot() if isinstance(buffer, MagSampleBuffer) else buffer
    )

    count: int = snapshot.count_valid()
    tier: SolverTier = select_tier(count, params)
    if tier == SolverTier.NONE:
        _LOG.debug("Skipping calibration with %d valid samples", count)
        return

    # Accepted fit error grows on every attempt
    if context.calibration.is_valid():
        context.calibration = context.calibration.with_aged_fit_error(
            params.acceptance.fit_error_aging
        )

    trial: TrialCalibration = run_solver(tier, snapshot, params)
    context.last_trial = trial

    if not field_in_range(trial.field_uT, params):
        _LOG.debug(
            "Rejected tier %d calibration: B=%.2f uT out of range",
            int(tier),
            trial.field_uT,
        )
        return

    # MagCalibration only holds finite arrays
    if not trial.is_finite():
        _LOG.debug("Rejected tier %d calibration: non-finite fit", int(tier))
        return

    if not should_accept(context.calibration, trial, params):
        _LOG.debug(
            "Rejected tier %d calibration: fit error %.3f%% vs accepted %.3f%%",
            int(tier),
            trial.fit_error_pc,
            context.calibration.fit_error_pc,
        )
        return

    context.calibration = trial.to_calibration()
    _LOG.info(
        "Accepted tier %d calibration: B=%.2f uT, fit error %.3f%%, V=%s",
        int(tier),
        trial.field_uT,
        trial.fit_error_pc,
        np.array2string(trial.hard_iron_uT, precision=2),
    )

################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for the four element hard-iron solver."""

from __future__ import annotations

from typing import Callable

import numpy as np

from oasis_magcal.magcal_types.calibration import TrialCalibration
from oasis_magcal.magcal_types.mag_buffer import EMPTY_FLAG
from oasis_magcal.magcal_types.mag_buffer import MagBufferSnapshot
from oasis_magcal.magcal_types.solver_tier import SolverTier
from oasis_magcal.solver.calibration4 import fit_calibration4


HARD_IRON_UT: np.ndarray = np.array([-20.0, 5.0, 14.0], dtype=np.float64)
FIELD_UT: float = 45.0


def test_recovers_sphere(make_counts: Callable[..., np.ndarray]) -> None:
    """Noise-free sphere samples should give the exact bias and field."""
    raw: np.ndarray = make_counts(
        count=60,
        soft_iron=np.eye(3),
        field_uT=FIELD_UT,
        hard_iron_uT=HARD_IRON_UT,
    )
    trial: TrialCalibration = fit_calibration4(MagBufferSnapshot.from_samples(raw))

    assert trial.tier == SolverTier.TIER4
    assert trial.sample_count == 60
    np.testing.assert_allclose(trial.hard_iron_uT, HARD_IRON_UT, atol=1e-8)
    assert np.isclose(trial.field_uT, FIELD_UT, atol=1e-8)
    assert trial.fit_error_pc < 1e-4
    np.testing.assert_array_equal(trial.soft_iron, np.eye(3))


def test_ignores_empty_slots(make_counts: Callable[..., np.ndarray]) -> None:
    """Slots with a false validity flag should not enter the fit."""
    raw: np.ndarray = make_counts(
        count=50,
        soft_iron=np.eye(3),
        field_uT=FIELD_UT,
        hard_iron_uT=HARD_IRON_UT,
    )
    padded: np.ndarray = np.vstack((np.zeros((10, 3)), raw))
    valid: np.ndarray = np.ones(60, dtype=np.int8)
    valid[:10] = EMPTY_FLAG

    trial: TrialCalibration = fit_calibration4(
        MagBufferSnapshot.from_samples(padded, valid)
    )

    assert trial.sample_count == 50
    np.testing.assert_allclose(trial.hard_iron_uT, HARD_IRON_UT, atol=1e-8)


def test_noisy_fit_error_positive(make_counts: Callable[..., np.ndarray]) -> None:
    """Integer quantization should produce a small positive fit error."""
    raw: np.ndarray = np.round(
        make_counts(
            count=80,
            soft_iron=np.eye(3),
            field_uT=FIELD_UT,
            hard_iron_uT=HARD_IRON_UT,
        )
    )
    trial: TrialCalibration = fit_calibration4(MagBufferSnapshot.from_samples(raw))

    assert 0.0 < trial.fit_error_pc < 1.0
    np.testing.assert_allclose(trial.hard_iron_uT, HARD_IRON_UT, atol=0.1)


def test_coplanar_samples_do_not_raise() -> None:
    """A singular normal matrix should produce a non-finite trial."""
    angles: np.ndarray = np.linspace(0.0, 2.0 * np.pi, 50, endpoint=False)
    raw: np.ndarray = np.column_stack(
        (400.0 * np.cos(angles), 400.0 * np.sin(angles), np.zeros(50))
    )
    trial: TrialCalibration = fit_calibration4(MagBufferSnapshot.from_samples(raw))

    assert not trial.is_finite()


def test_repeatable(make_counts: Callable[..., np.ndarray]) -> None:
    """Re-running on the same snapshot should give identical results."""
    snapshot: MagBufferSnapshot = MagBufferSnapshot.from_samples(
        np.round(make_counts(count=70, soft_iron=np.eye(3)))
    )
    first: TrialCalibration = fit_calibration4(snapshot)
    second: TrialCalibration = fit_calibration4(snapshot)

    assert first.fit_error_pc == second.fit_error_pc
    assert first.field_uT == second.field_uT
    np.testing.assert_array_equal(first.hard_iron_uT, second.hard_iron_uT)

################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Accepted and trial magnetometer calibration records."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import replace
from typing import Any

import numpy as np

from oasis_magcal.config.magcal_params import UT_PER_COUNT
from oasis_magcal.magcal_types.solver_tier import SolverTier


@dataclass(frozen=True)
class MagCalibration:
    """Immutable accepted calibration shared with downstream readers.

    Attributes:
        tier: Solver tier that produced the calibration
        fit_error_pc: Residual fit error in percent, aged on every attempt
        field_uT: Geomagnetic field magnitude B in uT
        four_b_sq: 4 * B^2 in uT^2
        hard_iron_uT: Hard-iron offset V in uT
        soft_iron: Inverse soft-iron correction matrix, unitless
    """

    tier: SolverTier
    fit_error_pc: float
    field_uT: float
    four_b_sq: float
    hard_iron_uT: np.ndarray
    soft_iron: np.ndarray

    def __post_init__(self) -> None:
        """Validate calibration fields and coerce arrays."""
        object.__setattr__(self, "tier", SolverTier(self.tier))
        if self.fit_error_pc < 0.0:
            raise ValueError("fit_error_pc must be non-negative")

        hard_iron_uT: np.ndarray = _as_float_array(
            self.hard_iron_uT, "hard_iron_uT", (3,)
        )
        soft_iron: np.ndarray = _as_float_array(self.soft_iron, "soft_iron", (3, 3))

        object.__setattr__(self, "fit_error_pc", float(self.fit_error_pc))
        object.__setattr__(self, "field_uT", float(self.field_uT))
        object.__setattr__(self, "four_b_sq", float(self.four_b_sq))
        object.__setattr__(self, "hard_iron_uT", hard_iron_uT)
        object.__setattr__(self, "soft_iron", soft_iron)

    @classmethod
    def uncalibrated(cls) -> MagCalibration:
        """Return the record used before any calibration is accepted."""
        return cls(
            tier=SolverTier.NONE,
            fit_error_pc=0.0,
            field_uT=0.0,
            four_b_sq=0.0,
            hard_iron_uT=np.zeros(3, dtype=np.float64),
            soft_iron=np.eye(3, dtype=np.float64),
        )

    def is_valid(self) -> bool:
        """Return True once any solver has been accepted."""
        return self.tier != SolverTier.NONE

    def with_aged_fit_error(self, factor: float) -> MagCalibration:
        """Return a copy with the fit error scaled by an aging factor."""
        return replace(self, fit_error_pc=self.fit_error_pc * float(factor))

    def apply(self, raw_counts: Any, ut_per_count: float = UT_PER_COUNT) -> np.ndarray:
        """Map raw sensor counts to calibrated field vectors in uT.

        Accepts a single reading of shape (3,) or a batch of shape (N, 3).
        """
        counts: np.ndarray = np.asarray(raw_counts, dtype=np.float64)
        if counts.shape[-1:] != (3,) or counts.ndim > 2:
            raise ValueError("raw_counts must have shape (3,) or (N, 3)")
        uncorrected_uT: np.ndarray = counts * ut_per_count - self.hard_iron_uT
        return uncorrected_uT @ self.soft_iron.T


@dataclass(frozen=True)
class TrialCalibration:
    """Candidate calibration produced by a single solver run.

    Values are left unchecked for finiteness: a degenerate fit may carry
    NaN or infinity and is rejected by the field range check.

    Attributes:
        tier: Solver tier that produced the trial
        fit_error_pc: Residual fit error in percent
        field_uT: Geomagnetic field magnitude B in uT
        hard_iron_uT: Hard-iron offset V in uT
        soft_iron: Inverse soft-iron correction matrix, unitless
        sample_count: Number of buffer samples used by the fit
    """

    tier: SolverTier
    fit_error_pc: float
    field_uT: float
    hard_iron_uT: np.ndarray
    soft_iron: np.ndarray
    sample_count: int

    def __post_init__(self) -> None:
        """Coerce trial fields without rejecting non-finite values."""
        object.__setattr__(self, "tier", SolverTier(self.tier))
        object.__setattr__(self, "fit_error_pc", float(self.fit_error_pc))
        object.__setattr__(self, "field_uT", float(self.field_uT))
        object.__setattr__(
            self,
            "hard_iron_uT",
            _as_shaped_array(self.hard_iron_uT, "hard_iron_uT", (3,)),
        )
        object.__setattr__(
            self,
            "soft_iron",
            _as_shaped_array(self.soft_iron, "soft_iron", (3, 3)),
        )
        if self.sample_count < 0:
            raise ValueError("sample_count must be non-negative")

    def is_finite(self) -> bool:
        """Return True if every fitted quantity is a finite number."""
        return bool(
            np.isfinite(self.fit_error_pc)
            and np.isfinite(self.field_uT)
            and np.all(np.isfinite(self.hard_iron_uT))
            and np.all(np.isfinite(self.soft_iron))
        )

    def to_calibration(self) -> MagCalibration:
        """Return the accepted-calibration record for this trial."""
        return MagCalibration(
            tier=self.tier,
            fit_error_pc=self.fit_error_pc,
            field_uT=self.field_uT,
            four_b_sq=4.0 * self.field_uT * self.field_uT,
            hard_iron_uT=self.hard_iron_uT.copy(),
            soft_iron=self.soft_iron.copy(),
        )


def _as_shaped_array(value: Any, name: str, shape: tuple[int, ...]) -> np.ndarray:
    """Coerce a value to a float64 numpy array with a specific shape."""
    array: np.ndarray = np.array(value, dtype=np.float64)
    if array.shape != shape:
        raise ValueError(f"{name} must have shape {shape}")
    return array


def _as_float_array(value: Any, name: str, shape: tuple[int, ...]) -> np.ndarray:
    """Coerce a value to a finite float64 numpy array with a specific shape."""
    array: np.ndarray = _as_shaped_array(value, name, shape)
    if not np.all(np.isfinite(array)):
        raise ValueError(f"{name} must contain finite values")
    return array

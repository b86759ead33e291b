################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""High-level configuration wrapper for magnetometer calibration."""

from __future__ import annotations

from dataclasses import dataclass

from oasis_magcal.config.magcal_params import MagCalParams
from oasis_magcal.config.magcal_params import MagCalParamsError
from oasis_magcal.config.magcal_params import TierParams


class MagCalConfigError(Exception):
    """Raised when calibration configuration validation fails."""


@dataclass(frozen=True)
class MagCalConfig:
    """Convenience wrapper around calibration parameters."""

    params: MagCalParams

    def __init__(self, params: MagCalParams) -> None:
        """Initialize the configuration wrapper and validate."""
        object.__setattr__(self, "params", params)
        self.validate()

    def validate(self) -> None:
        """Validate parameter invariants and cross-namespace policies."""
        try:
            self.params.validate()
        except MagCalParamsError as exc:
            raise MagCalConfigError(str(exc)) from exc

        tiers: TierParams = self.params.tiers
        if not (
            tiers.min_measurements_4
            < tiers.min_measurements_7
            < tiers.min_measurements_10
        ):
            raise MagCalConfigError(
                "tiers thresholds must be strictly increasing from 4 to 10"
            )

        if self.params.acceptance.min_b_uT >= self.params.acceptance.max_b_uT:
            raise MagCalConfigError("acceptance.min_b_uT must be below max_b_uT")

        if tiers.min_measurements_10 > self.params.buffer.capacity:
            raise MagCalConfigError(
                "buffer.capacity must hold tiers.min_measurements_10 samples"
            )

    def buffer_capacity(self) -> int:
        """Return the configured sample buffer capacity."""
        return self.params.buffer.capacity

    def throttle_period(self) -> int:
        """Return the number of invocations per calibration attempt."""
        return self.params.schedule.throttle_period

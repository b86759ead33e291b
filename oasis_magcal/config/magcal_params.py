################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Structured configuration schema for magnetometer calibration."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import fields
from dataclasses import replace
from typing import Any


# Magnetometer sensitivity in uT per raw count
UT_PER_COUNT: float = 0.1
# Nominal geomagnetic field used to condition the fit matrices in uT
DEFAULT_B_UT: float = 50.0

# Minimum valid samples for the 4 element calibration
MIN_MEASUREMENTS_4CAL: int = 40
# Minimum valid samples for the 7 element calibration
MIN_MEASUREMENTS_7CAL: int = 100
# Minimum valid samples for the 10 element calibration
MIN_MEASUREMENTS_10CAL: int = 150

# Minimum geomagnetic field for an acceptable calibration in uT
MIN_B_FIT_UT: float = 22.0
# Maximum geomagnetic field for an acceptable calibration in uT
MAX_B_FIT_UT: float = 67.0

# Number of cycle invocations between calibration attempts
THROTTLE_PERIOD: int = 20
# Multiplicative aging applied to the accepted fit error per attempt
FIT_ERROR_AGING: float = 1.02
# Largest fit error in percent for a richer solver to displace a cheaper one
RICHER_TIER_MAX_FIT_ERROR_PC: float = 4.0

# Capacity of the raw magnetometer sample buffer
MAG_BUFFER_SIZE: int = 650


class MagCalParamsError(Exception):
    """Raised when calibration parameter validation fails."""


def _require_positive(value: float, name: str) -> None:
    """Require a positive value."""
    if value <= 0.0:
        raise MagCalParamsError(f"{name} must be positive")


def _require_positive_int(value: int, name: str) -> None:
    """Require a positive integer value."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise MagCalParamsError(f"{name} must be an int")
    if value <= 0:
        raise MagCalParamsError(f"{name} must be positive")


@dataclass(frozen=True)
class SensorParams:
    """Raw-count scaling for the magnetometer."""

    # Magnetometer sensitivity in uT per raw count
    ut_per_count: float = UT_PER_COUNT
    # Nominal geomagnetic field used for numeric conditioning in uT
    default_b_uT: float = DEFAULT_B_UT


@dataclass(frozen=True)
class TierParams:
    """Sample-count thresholds for solver selection."""

    # Minimum valid samples for the 4 element calibration
    min_measurements_4: int = MIN_MEASUREMENTS_4CAL
    # Minimum valid samples for the 7 element calibration
    min_measurements_7: int = MIN_MEASUREMENTS_7CAL
    # Minimum valid samples for the 10 element calibration
    min_measurements_10: int = MIN_MEASUREMENTS_10CAL


@dataclass(frozen=True)
class AcceptanceParams:
    """Acceptance policy for trial calibrations."""

    # Minimum geomagnetic field in uT
    min_b_uT: float = MIN_B_FIT_UT
    # Maximum geomagnetic field in uT
    max_b_uT: float = MAX_B_FIT_UT
    # Fit error aging factor applied once per attempt
    fit_error_aging: float = FIT_ERROR_AGING
    # Fit error bound in percent for a richer solver to win
    richer_tier_max_fit_error_pc: float = RICHER_TIER_MAX_FIT_ERROR_PC


@dataclass(frozen=True)
class ScheduleParams:
    """Invocation throttling."""

    # Number of cycle invocations between calibration attempts
    throttle_period: int = THROTTLE_PERIOD


@dataclass(frozen=True)
class BufferParams:
    """Raw sample buffer sizing."""

    # Capacity of the raw magnetometer sample buffer
    capacity: int = MAG_BUFFER_SIZE


@dataclass(frozen=True)
class MagCalParams:
    """Complete configuration tree for magnetometer calibration."""

    sensor: SensorParams
    tiers: TierParams
    acceptance: AcceptanceParams
    schedule: ScheduleParams
    buffer: BufferParams

    @classmethod
    def defaults(cls) -> MagCalParams:
        """Return the default calibration parameter tree."""
        return cls(
            sensor=SensorParams(),
            tiers=TierParams(),
            acceptance=AcceptanceParams(),
            schedule=ScheduleParams(),
            buffer=BufferParams(),
        )

    def validate(self) -> None:
        """Validate parameter invariants and constraints."""
        _require_positive(self.sensor.ut_per_count, "sensor.ut_per_count")
        _require_positive(self.sensor.default_b_uT, "sensor.default_b_uT")

        _require_positive_int(self.tiers.min_measurements_4, "tiers.min_measurements_4")
        _require_positive_int(self.tiers.min_measurements_7, "tiers.min_measurements_7")
        _require_positive_int(
            self.tiers.min_measurements_10, "tiers.min_measurements_10"
        )

        _require_positive(self.acceptance.min_b_uT, "acceptance.min_b_uT")
        _require_positive(self.acceptance.max_b_uT, "acceptance.max_b_uT")
        if self.acceptance.fit_error_aging < 1.0:
            raise MagCalParamsError("acceptance.fit_error_aging must be >= 1")
        _require_positive(
            self.acceptance.richer_tier_max_fit_error_pc,
            "acceptance.richer_tier_max_fit_error_pc",
        )

        _require_positive_int(
            self.schedule.throttle_period, "schedule.throttle_period"
        )
        _require_positive_int(self.buffer.capacity, "buffer.capacity")

    def replace(self, **namespace_overrides: Any) -> MagCalParams:
        """Return a modified copy of the parameters."""
        return replace(self, **namespace_overrides)

    def as_nested_dict(self) -> dict[str, Any]:
        """Return a nested dict representation for debugging."""
        return _dataclass_to_dict(self)


def _dataclass_to_dict(value: Any) -> Any:
    """Convert dataclasses into plain Python values."""
    if hasattr(value, "__dataclass_fields__"):
        return {
            field.name: _dataclass_to_dict(getattr(value, field.name))
            for field in fields(value)
        }
    return value

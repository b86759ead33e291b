################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Type definitions for magnetometer calibration."""

from __future__ import annotations

from oasis_magcal.magcal_types.calibration import MagCalibration
from oasis_magcal.magcal_types.calibration import TrialCalibration
from oasis_magcal.magcal_types.mag_buffer import MagBufferError
from oasis_magcal.magcal_types.mag_buffer import MagBufferSnapshot
from oasis_magcal.magcal_types.mag_buffer import MagSampleBuffer
from oasis_magcal.magcal_types.solver_tier import SolverTier


__all__ = [
    "MagBufferError",
    "MagBufferSnapshot",
    "MagCalibration",
    "MagSampleBuffer",
    "SolverTier",
    "TrialCalibration",
]

################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Calibration model tiers."""

from __future__ import annotations

import enum


class SolverTier(enum.IntEnum):
    """
    Enumerates the calibration models by number of fitted parameters

    Higher values model more of the sensor distortion and are preferred once
    enough samples are available.

    Attributes:
        NONE: No calibration has been accepted
        TIER4: Hard iron only, soft iron fixed to identity
        TIER7: Hard iron and diagonal soft iron
        TIER10: Hard iron and full symmetric soft iron
    """

    NONE = 0
    TIER4 = 4
    TIER7 = 7
    TIER10 = 10

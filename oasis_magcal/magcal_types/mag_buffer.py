################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Fixed-capacity buffer of raw magnetometer samples."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np


# Slot holds a usable sample
VALID_FLAG: int = 1
# Slot has never been written
EMPTY_FLAG: int = 0
# Slot was explicitly invalidated
INVALID_SENTINEL: int = -1

# Raw counts are stored as signed 16-bit sensor readings
_RAW_MIN: int = -32768
_RAW_MAX: int = 32767


class MagBufferError(Exception):
    """Raised when sample buffer operations fail."""


@dataclass(frozen=True)
class MagBufferSnapshot:
    """Point-in-time copy of the sample buffer.

    Attributes:
        raw: Raw magnetometer readings in sensor counts, shape (N, 3)
        valid: Per-slot validity flags, shape (N,), using VALID_FLAG,
            EMPTY_FLAG or INVALID_SENTINEL
    """

    raw: np.ndarray
    valid: np.ndarray

    def __post_init__(self) -> None:
        """Validate snapshot arrays and make them read-only."""
        raw: np.ndarray = np.array(self.raw, dtype=np.float64)
        if raw.ndim != 2 or raw.shape[1] != 3:
            raise MagBufferError("raw must have shape (N, 3)")
        valid: np.ndarray = np.array(self.valid, dtype=np.int8)
        if valid.shape != (raw.shape[0],):
            raise MagBufferError("valid must have shape (N,)")

        raw.setflags(write=False)
        valid.setflags(write=False)
        object.__setattr__(self, "raw", raw)
        object.__setattr__(self, "valid", valid)

    @classmethod
    def from_samples(cls, raw: Any, valid: Any = None) -> MagBufferSnapshot:
        """Build a snapshot from raw counts, marking every slot valid by default."""
        raw_array: np.ndarray = np.asarray(raw, dtype=np.float64)
        if raw_array.ndim != 2:
            raise MagBufferError("raw must have shape (N, 3)")
        if valid is None:
            valid = np.full(raw_array.shape[0], VALID_FLAG, dtype=np.int8)
        return cls(raw=raw_array, valid=valid)

    def __len__(self) -> int:
        """Return the number of slots in the snapshot."""
        return int(self.valid.shape[0])

    def valid_mask(self) -> np.ndarray:
        """Return slots whose flag is truthy."""
        return self.valid != EMPTY_FLAG

    def usable_mask(self) -> np.ndarray:
        """Return slots whose flag is not the invalidation sentinel."""
        return self.valid != INVALID_SENTINEL

    def count_valid(self) -> int:
        """Return the number of slots whose flag is truthy."""
        return int(np.count_nonzero(self.valid_mask()))


class MagSampleBuffer:
    """Store raw magnetometer samples in fixed slots with validity flags.

    Slot selection is left to the acquisition code that owns the buffer.
    """

    def __init__(self, *, capacity: int) -> None:
        """Initialize an empty buffer."""
        if not isinstance(capacity, int) or isinstance(capacity, bool):
            raise MagBufferError("Capacity must be an int")
        if capacity <= 0:
            raise MagBufferError("Capacity must be positive")
        self._capacity: int = capacity
        self._raw: np.ndarray = np.zeros((capacity, 3), dtype=np.int16)
        self._valid: np.ndarray = np.full(capacity, EMPTY_FLAG, dtype=np.int8)

    def __len__(self) -> int:
        """Return the buffer capacity."""
        return self._capacity

    @property
    def capacity(self) -> int:
        """Return the number of sample slots."""
        return self._capacity

    def store(self, index: int, raw_counts: Any) -> None:
        """Write raw counts into a slot and mark it valid."""
        self._check_index(index)
        counts: np.ndarray = np.asarray(raw_counts)
        if counts.shape != (3,):
            raise MagBufferError("raw_counts must have shape (3,)")
        if not np.issubdtype(counts.dtype, np.integer):
            raise MagBufferError("raw_counts must be integer sensor counts")
        if np.any(counts < _RAW_MIN) or np.any(counts > _RAW_MAX):
            raise MagBufferError("raw_counts must fit in a signed 16-bit reading")
        self._raw[index] = counts.astype(np.int16)
        self._valid[index] = VALID_FLAG

    def invalidate(self, index: int) -> None:
        """Mark a slot as explicitly invalid."""
        self._check_index(index)
        self._valid[index] = INVALID_SENTINEL

    def clear(self) -> None:
        """Return every slot to the never-written state."""
        self._raw.fill(0)
        self._valid.fill(EMPTY_FLAG)

    def count_valid(self) -> int:
        """Return the number of slots holding a valid sample."""
        return int(np.count_nonzero(self._valid))

    def snapshot(self) -> MagBufferSnapshot:
        """Return a consistent copy of the current buffer contents."""
        return MagBufferSnapshot(raw=self._raw.copy(), valid=self._valid.copy())

    def _check_index(self, index: int) -> None:
        if not isinstance(index, (int, np.integer)) or isinstance(index, bool):
            raise MagBufferError("index must be an int")
        if index < 0 or index >= self._capacity:
            raise MagBufferError(f"index must be in [0, {self._capacity})")

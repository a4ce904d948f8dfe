# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Exception hierarchy for BatchAlchemy.

Each error also derives from the built-in exception callers would naturally
catch for that condition (``ValueError``, ``IndexError``, ``RuntimeError``).
Failures raised by the SQL executor are never wrapped.
"""

from __future__ import annotations


class BatchAlchemyError(Exception):
    """Base class for every error raised by BatchAlchemy."""


class MetadataResolutionError(BatchAlchemyError, ValueError):
    """A record type lacks the structural markers an operation needs."""


class ArgumentError(BatchAlchemyError, ValueError):
    """Caller input cannot produce a valid statement."""


class AllocationBoundsError(BatchAlchemyError, IndexError):
    """A sequence reservation is shorter than the distribution policy requires."""


class StateError(BatchAlchemyError, RuntimeError):
    """The session is not in a state that allows execution."""


__all__ = [
    "BatchAlchemyError",
    "MetadataResolutionError",
    "ArgumentError",
    "AllocationBoundsError",
    "StateError",
]

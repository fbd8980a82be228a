"""Exception taxonomy for the sampling and rendering pipeline."""

from __future__ import annotations


class SNRWatchError(Exception):
    """Base class for recoverable SNRwatch failures."""


class ProviderUnavailable(SNRWatchError):
    """The signal source could not produce a sample for this poll tick.

    Raised for a missing interface, a disconnected adapter, or a failed OS
    query. The sampling loop skips the tick and keeps going.
    """


class AllocationFailure(SNRWatchError):
    """An output buffer could not be allocated or grown."""


class EmptyResult(SNRWatchError):
    """A run finished without a single successful poll."""

"""
simulator.protocols
~~~~~~~~~~~~~~~~~~~
Structural-typing "plug-in point" for epidemiological period distributions.

The risk estimator never hardcodes a distribution: incubation and infectious
periods come from caller-supplied samplers.  Anything callable with a count
and returning that many draws conforms to :class:`Sampler`::

    sampler(n) -> sequence of n non-negative floats

Parameters
----------
n : int
    Number of independent draws requested (``n >= 1``).

Returns
-------
draws : Array-like
    One-dimensional, length ``n``, finite and non-negative.  The estimator
    checks this and raises :class:`~epiflows.errors.InputError` otherwise.
"""
from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ..datamodel import Array

__all__ = ["Sampler", "Array"]


@runtime_checkable
class Sampler(Protocol):
    """Protocol that every period sampler must satisfy."""

    def __call__(self, n: int) -> Array | Sequence[float]:
        """Return *n* independent draws."""
        ...

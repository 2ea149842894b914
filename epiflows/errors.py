"""
epiflows.errors
===============

Centralised custom exceptions for the **epiflows** package.

Every layer (I/O → container builder → estimator → CLIs) signals failures
through the classes below, so user code only needs to catch
:class:`EpiflowsError` to handle anything project-specific.
Errors raised by injected collaborators (samplers, geocoders) are never
wrapped: they propagate untouched.
"""

from __future__ import annotations


class EpiflowsError(Exception):
    """Base-class for all epiflows-specific exceptions."""


class ValidationError(EpiflowsError):
    """
    Raised when a container (or the data used to build one) is malformed or
    inconsistent.

    Typical causes
    --------------
    * Missing column for a named variable, or a dictionary key that resolves
      to a column absent from the location table
    * Duplicate location identifiers
    * Flow records referencing unknown locations
    * Values failing :pydata:`pandera` checks (negative flows, ``first_date``
      after ``last_date`` ...)
    """


class UnknownVariableError(ValidationError, KeyError):
    """
    Raised when a variable dictionary has no entry for a semantic key.

    Also a :class:`KeyError`, so the dictionary honours the mapping protocol.
    """

    __str__ = Exception.__str__


class InputError(EpiflowsError):
    """
    Raised when the parameters of a call are invalid.

    Examples
    --------
    * Non-positive ``n_sim``
    * Source location absent from the location table
    * Source location without outbound flows
    * Sampler returning the wrong number of draws, or negative draws
    """


__all__ = ["EpiflowsError", "ValidationError", "UnknownVariableError", "InputError"]

"""
epiflows.vardict
================

Indirection layer between *semantic* variable names (``pop_size``,
``duration_stay`` ...) and the caller's actual column names in a location
table.

    >>> from epiflows.vardict import VariableDictionary
    >>> vd = VariableDictionary()
    >>> vd.set("pop_size", "population")
    >>> vd.get("pop_size")
    'population'

Entries are *not* checked when set: a key may point at a column that does
not exist yet.  :meth:`VariableDictionary.resolve` is where a missing column
surfaces, as a :class:`~epiflows.errors.ValidationError`.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Mapping

from .datamodel import VariableKey
from .errors import UnknownVariableError, ValidationError

__all__ = ["VariableDictionary", "default_vars"]

_MISSING = object()


def default_vars() -> Dict[str, str]:
    """The built-in mapping: every semantic key points to a same-named column."""
    return {key.value: key.value for key in VariableKey}


def _key(key: str | VariableKey) -> str:
    if isinstance(key, VariableKey):
        return key.value
    if not isinstance(key, str) or not key:
        raise ValidationError(f"Variable keys must be non-empty strings; got {key!r}")
    return key


class VariableDictionary(Mapping[str, str]):
    """
    Semantic key → column name lookup.

    Parameters
    ----------
    mapping
        Entries overriding (or extending) :func:`default_vars`.
    """

    def __init__(self, mapping: Mapping[str, str] | None = None) -> None:
        self._vars: Dict[str, str] = default_vars()
        for key, column in (mapping or {}).items():
            self.set(key, column)

    # -- Mapping protocol ------------------------------------------------- #
    def __getitem__(self, key: str | VariableKey) -> str:
        name = _key(key)
        try:
            return self._vars[name]
        except KeyError:
            raise UnknownVariableError(
                f"Unknown variable '{name}'. Known variables: {sorted(self._vars)}"
            ) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, VariableKey):
            key = key.value
        return key in self._vars

    def __repr__(self) -> str:
        return f"VariableDictionary({self._vars!r})"

    # -- Public API ------------------------------------------------------- #
    def get(self, key: str | VariableKey, default: Any = _MISSING) -> Any:
        """
        Column name registered for *key*.

        Without *default*, an unknown key raises
        :class:`~epiflows.errors.UnknownVariableError`.
        """
        if default is _MISSING:
            return self[key]
        return self._vars.get(_key(key), default)

    def set(self, key: str | VariableKey, column: str) -> None:
        """Point *key* at *column*; validated only when resolved."""
        if not isinstance(column, str) or not column:
            raise ValidationError(
                f"Column name for '{_key(key)}' must be a non-empty string; got {column!r}"
            )
        self._vars[_key(key)] = column

    def resolve(self, key: str | VariableKey, columns: Iterable[str]) -> str:
        """
        Column name for *key*, checked against the table's current *columns*.

        Raises
        ------
        ValidationError
            If *key* is unknown or its column is absent from *columns*.
        """
        column = self.get(key)
        if column not in set(columns):
            raise ValidationError(
                f"Variable '{_key(key)}' maps to column '{column}', "
                "which is not present in the location table"
            )
        return column

    def copy(self) -> "VariableDictionary":
        """Independent snapshot of the current entries."""
        return VariableDictionary(self._vars)

    def to_dict(self) -> Dict[str, str]:
        return dict(self._vars)

"""Variable environment for ${name} substitution

An Environment is an immutable mapping. Commands never edit a shared table;
they derive a new environment with their settings layered on top, and each
testcase keeps the snapshot it ran under.
"""

from typing import Dict, Iterator, Mapping, Optional

from autocheck.scanner import apply_vars


class Environment(Mapping):
    """Immutable, case-insensitive variable table"""

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = {}
        for name, value in (values or {}).items():
            self._values[name.lower()] = str(value)

    def __getitem__(self, name: str) -> str:
        return self._values[name.lower()]

    def __contains__(self, name) -> bool:
        return isinstance(name, str) and name.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Environment({self._values!r})"

    def derive(self, overrides: Optional[Mapping[str, str]] = None, **kwargs) -> "Environment":
        """Return a new environment with overrides applied; self is unchanged."""
        values = dict(self._values)
        for name, value in dict(overrides or {}, **kwargs).items():
            values[name.lower()] = str(value)
        return Environment(values)

    def substitute(self, text: str) -> str:
        """Fill in every ${name} in text."""
        return apply_vars(text, self)

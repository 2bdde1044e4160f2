"""Class binding table: which interface type a stand-in is built against."""

from collections.abc import Iterator, Mapping

from .interfaces import (
    CallableStatement,
    Connection,
    Driver,
    PreparedStatement,
    ResultSet,
    SqlInterface,
    Statement,
)

DEFAULT_BINDINGS: tuple[type[SqlInterface], ...] = (
    Driver,
    Connection,
    Statement,
    PreparedStatement,
    CallableStatement,
    ResultSet,
)


class ClassBindingTable:
    """Map a requested interface to the subtype its stand-ins implement.

    Code under test may expect a narrower interface than the one a method
    declares, e.g. a vendor statement with extra methods::

        bindings.set(Statement, VendorStatement)

    after which every stand-in vended for `Statement` is a `VendorStatement`.
    """

    def __init__(self, bindings: Mapping[type[SqlInterface], type[SqlInterface]] | None = None) -> None:
        self._bindings: dict[type[SqlInterface], type[SqlInterface]] = {}
        if bindings is None:
            bindings = {interface: interface for interface in DEFAULT_BINDINGS}
        self.set_all(bindings)

    def get(self, category: type[SqlInterface]) -> type[SqlInterface] | None:
        return self._bindings.get(category)

    def set(self, category: type[SqlInterface], subtype: type[SqlInterface]) -> None:
        """Bind `category` to `subtype`.

        Raises
        ------
        TypeError
            If `subtype` is not an interface refining `category`.
        """
        if not (isinstance(subtype, type) and issubclass(subtype, SqlInterface)):
            raise TypeError(f"{subtype!r} is not an interface; only interfaces can be intercepted")
        if not issubclass(subtype, category):
            raise TypeError(f"{subtype.__qualname__} does not refine {category.__qualname__}")
        self._bindings[category] = subtype

    def set_all(self, bindings: Mapping[type[SqlInterface], type[SqlInterface]]) -> None:
        """Replace the whole table. Interfaces missing from `bindings` become unbound."""
        previous = self._bindings
        self._bindings = {}
        try:
            for category, subtype in bindings.items():
                self.set(category, subtype)
        except TypeError:
            self._bindings = previous
            raise

    def as_dict(self) -> dict[type[SqlInterface], type[SqlInterface]]:
        return dict(self._bindings)

    def __contains__(self, category: object) -> bool:
        return category in self._bindings

    def __iter__(self) -> Iterator[type[SqlInterface]]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

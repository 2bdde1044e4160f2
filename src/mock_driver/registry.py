"""Process-wide registry of drivers, the way application code obtains connections."""

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager

from more_itertools import first

from .interfaces import Connection, Driver

logger = logging.getLogger(__name__)


class DriverRegistryError(Exception):
    """Registration state does not allow the requested change."""


class NoSuitableDriverError(DriverRegistryError):
    """No registered driver accepted the connection URL."""


class DriverRegistry:
    """Ordered set of drivers consulted by `get_connection`."""

    def __init__(self) -> None:
        self._drivers: list[Driver] = []

    def list_active(self) -> list[Driver]:
        return list(self._drivers)

    def register(self, driver: Driver) -> None:
        """
        Raises
        ------
        DriverRegistryError
            If `driver` is already registered.
        """
        if any(d is driver for d in self._drivers):
            raise DriverRegistryError(f"{driver!r} is already registered")
        self._drivers.append(driver)

    def deregister(self, driver: Driver) -> None:
        """
        Raises
        ------
        DriverRegistryError
            If `driver` is not registered.
        """
        for i, registered in enumerate(self._drivers):
            if registered is driver:
                del self._drivers[i]
                return
        raise DriverRegistryError(f"{driver!r} is not registered")

    def get_connection(self, url: str, properties: Mapping[str, str] | None = None) -> Connection:
        """Ask each driver in registration order; the first connection wins.

        Raises
        ------
        NoSuitableDriverError
            If every driver declined `url`.
        """
        connections = (driver.connect(url, properties) for driver in self.list_active())
        connection = first((c for c in connections if c is not None), None)
        if connection is None:
            raise NoSuitableDriverError(f"No suitable driver found for {url}")
        return connection


driver_manager = DriverRegistry()
"""The registry application code uses unless it is handed another one."""


class Substitution:
    """Swap every registered driver for one entry point, and swap them back.

    `apply` and `restore` must be paired; `substitute` does the pairing on
    every exit path.
    """

    def __init__(self, registry: DriverRegistry, entry_point: Driver) -> None:
        self.registry = registry
        self.entry_point = entry_point
        self._saved: list[Driver] | None = None

    @property
    def applied(self) -> bool:
        return self._saved is not None

    def apply(self) -> None:
        """
        Raises
        ------
        DriverRegistryError
            If the entry point is already registered, e.g. by an earlier
            substitution that was not restored.
        """
        saved = self.registry.list_active()
        if any(driver is self.entry_point for driver in saved):
            raise DriverRegistryError(f"{self.entry_point!r} is already substituted; restore it first")
        for driver in saved:
            self.registry.deregister(driver)
        self.registry.register(self.entry_point)
        self._saved = saved
        logger.info(f"Substituted {self.entry_point!r} for {len(saved)} registered driver(s)")

    def restore(self) -> None:
        """
        Raises
        ------
        DriverRegistryError
            If the substitution was not applied, or the registry changed
            in a way that makes the saved drivers impossible to restore.
        """
        if self._saved is None:
            raise DriverRegistryError("Substitution has not been applied")
        self.registry.deregister(self.entry_point)
        for driver in self._saved:
            self.registry.register(driver)
        logger.info(f"Restored {len(self._saved)} driver(s)")
        self._saved = None


@contextmanager
def substitute(registry: DriverRegistry, entry_point: Driver) -> Iterator[Substitution]:
    """Make `entry_point` the only registered driver inside the block."""
    substitution = Substitution(registry, entry_point)
    substitution.apply()
    try:
        yield substitution
    finally:
        substitution.restore()

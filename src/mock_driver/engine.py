"""
The mock driver engine: run database code against mock objects.

A test hands the engine the mock objects that stand for query results,
substitutes the engine's entry point for the registered drivers and runs
the code under test::

    run = MockDriver.run_with_mocks(load_users, [UsersResultSet()])
    assert run.method_names() == ["connect", "create_statement", ...]

Every object the code under test obtains through `driver_manager` is a
stand-in; the result sets among them read their data from the mock objects,
handed out in order, one per result set.
"""

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Self

from expression.option import unwrap_or, unwrap_or_else

from .bindings import ClassBindingTable
from .factory import StandIn, StandInFactory
from .handler import DispatchContext
from .interfaces import Connection, Driver, SqlInterface
from .provider import DefaultResultSetProvider, ResultSetProvider
from .recorder import CallRecorder, TestRun
from .registry import DriverRegistry, DriverRegistryError, Substitution, driver_manager
from .settings import EngineSettings, Settings

logger = logging.getLogger(__name__)

type TestBody = Callable[[], object]


class MockDriver:
    """Container that runs test bodies against stand-ins and mock objects.

    One engine serves one test at a time: runs must not be nested and an
    engine must not be shared between tests running concurrently.
    """

    def __init__(
        self,
        mock_objects: Iterable[object] = (),
        *,
        registry: DriverRegistry | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self.settings = unwrap_or_else(settings, EngineSettings)
        self.registry = unwrap_or(registry, driver_manager)
        self._context = DispatchContext(
            bindings=ClassBindingTable(),
            provider=DefaultResultSetProvider(strict=self.settings.fail_on_exhausted_provider),
            recorder=CallRecorder(),
            typed_defaults=self.settings.typed_defaults,
        )
        self._factory = StandInFactory(self._context)
        self.entry_point: Driver = self._factory.build(Driver)  # type: ignore[assignment]
        self._substitution: Substitution | None = None
        self.set_mock_objects(mock_objects)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        mock_objects: Iterable[object] = (),
        *,
        registry: DriverRegistry | None = None,
    ) -> Self:
        return cls(mock_objects, registry=registry, settings=settings.engine)

    def set_mock_object(self, mock_object: object) -> None:
        self.set_mock_objects([mock_object])

    def set_mock_objects(self, mock_objects: Iterable[object]) -> None:
        """Replace the mock objects; the next result set gets the first of them."""
        self._context.provider.supply(mock_objects)

    @property
    def result_set_provider(self) -> ResultSetProvider:
        return self._context.provider

    def set_result_set_provider(self, provider: ResultSetProvider) -> None:
        """Replace the default provider, e.g. to pick mock objects by query."""
        self._context.provider = provider

    @property
    def class_bindings(self) -> ClassBindingTable:
        return self._context.bindings

    def get_class_bindings(self) -> dict[type[SqlInterface], type[SqlInterface]]:
        return self._context.bindings.as_dict()

    def set_class_binding(self, category: type[SqlInterface], subtype: type[SqlInterface]) -> None:
        """Vend `subtype` stand-ins wherever `category` is returned.

        Stand-ins built before the call keep their type.
        """
        self._context.bindings.set(category, subtype)

    def set_class_bindings(self, bindings: Mapping[type[SqlInterface], type[SqlInterface]]) -> None:
        """Replace all class bindings; unlisted interfaces become unbound."""
        self._context.bindings.set_all(bindings)

    def new_connection(self, category: type[Connection] = Connection) -> Connection:
        """Build a connection stand-in for code that takes its connection as an argument."""
        return self._factory.build(category)  # type: ignore[return-value]

    def stand_in(self, category: type[SqlInterface], mock_object: object = None) -> StandIn:
        """Build any stand-in directly, optionally bound to `mock_object`."""
        return self._factory.build(category, mock_object)

    @property
    def active_run(self) -> TestRun | None:
        return self._context.recorder.active

    def substitute_entry_point(self) -> None:
        """Make the entry point the only driver in the registry.

        Must be paired with `restore_entry_point`; prefer `substituted`,
        which pairs them on every exit path.

        Raises
        ------
        DriverRegistryError
            If the entry point is already substituted.
        """
        if self._substitution is not None:
            raise DriverRegistryError("Entry point is already substituted; call restore_entry_point first")
        substitution = Substitution(self.registry, self.entry_point)
        substitution.apply()
        self._substitution = substitution

    def restore_entry_point(self) -> None:
        """Re-register the drivers that were active before `substitute_entry_point`.

        Raises
        ------
        DriverRegistryError
            If there is nothing to restore or the registry refuses the change.
        """
        if self._substitution is None:
            substitution = Substitution(self.registry, self.entry_point)
        else:
            substitution = self._substitution
        substitution.restore()
        self._substitution = None

    @contextmanager
    def substituted(self) -> Iterator[Driver]:
        """Substitute the entry point for the duration of the block."""
        self.substitute_entry_point()
        try:
            yield self.entry_point
        finally:
            self.restore_entry_point()

    def run(self, test_body: TestBody, name: str | None = None) -> TestRun:
        """Run `test_body`, recording every intercepted call.

        Failures raised by the body propagate unchanged once the run has
        been closed.
        """
        recorder = self._context.recorder
        run = recorder.begin(unwrap_or(name, getattr(test_body, "__name__", self.settings.default_run_name)))
        logger.info(f"Run test action - {run.name}")
        with recorder.activate(run):
            _ = test_body()
        return run

    @staticmethod
    def run_with_mocks(
        test_body: TestBody,
        mock_objects: Iterable[object],
        *,
        name: str | None = None,
        registry: DriverRegistry | None = None,
        settings: EngineSettings | None = None,
    ) -> TestRun:
        """Substitute, run and restore in one call; the restore always happens."""
        engine = MockDriver(mock_objects, registry=registry, settings=settings)
        with engine.substituted():
            return engine.run(test_body, name)

"""End-to-end tests for MockDriver."""

from typing import Any

import pytest
from support.app import count_orders, load_user_names
from support.result_sets import FailingResultSet, MockNameResultSet, RowsResultSet

from mock_driver import (
    NO_MOCK_OBJECT,
    Connection,
    DriverRegistry,
    DriverRegistryError,
    MockDriver,
    MockObject,
    NoBoundMockObjectError,
    NoMatchingMockMethodError,
    ResultSet,
    ResultSetProviderExhaustedError,
    RunAlreadyActiveError,
    Statement,
    UnboundCategoryError,
)
from mock_driver.settings import EngineSettings


class VendorStatement(Statement):
    def get_warnings(self) -> list[str]: ...


class RealishDriver:
    """Placeholder for a driver registered before a test starts."""

    def connect(self, url: str, properties: Any = None) -> None:  # noqa: ARG002
        return None


@pytest.fixture
def registry() -> DriverRegistry:
    registry = DriverRegistry()
    registry.register(RealishDriver())  # type: ignore[arg-type]
    return registry


@pytest.fixture
def engine(registry: DriverRegistry) -> MockDriver:
    return MockDriver([MockNameResultSet()], registry=registry)


class TestRun:
    def test_next_get_value_next_scenario(self, engine: MockDriver) -> None:
        """Test the canonical one-row scenario and its three-entry log."""
        results: list[object] = []
        rs = engine.stand_in(ResultSet, engine.result_set_provider.next())

        def body() -> None:
            results.append(rs.next())
            results.append(rs.get_value("x"))
            results.append(rs.next())

        run = engine.run(body, "mock name")

        assert results == [True, "mockName", False]
        assert run.name == "mock name"
        assert run.method_names() == ["next", "get_value", "next"]
        assert [call.signature for call in run.calls] == ["next()", "get_value(str)", "next()"]

    def test_run_records_the_whole_chain(self, engine: MockDriver) -> None:
        """Test that chained calls are logged in invocation order."""

        def body() -> None:
            conn = engine.entry_point.connect("jdbc:any")
            assert conn is not None
            stmt = conn.create_statement()
            rs = stmt.execute_query("SELECT 1")
            assert rs.next() is True
            assert rs.get_value("name") == "mockName"

        run = engine.run(body)

        assert run.name == "body"
        assert run.method_names() == ["connect", "create_statement", "execute_query", "next", "get_value"]

    def test_calls_outside_a_run_are_not_recorded(self, engine: MockDriver) -> None:
        """Test that the log only covers calls made while the run is active."""
        conn = engine.new_connection()
        _ = conn.create_statement()

        run = engine.run(lambda: conn.commit(), "commit only")
        _ = conn.rollback()

        assert run.method_names() == ["commit"]
        assert engine.active_run is None

    def test_failure_in_body_propagates_and_keeps_log(self, engine: MockDriver) -> None:
        """Test that a missing mock method aborts the run with a valid partial log."""
        recorded: list[Any] = []

        def body() -> None:
            rs = engine.entry_point.connect("x").create_statement().execute_query("SELECT 1")  # type: ignore[union-attr]
            _ = rs.next()
            recorded.append(engine.active_run)
            _ = rs.get_int("n")

        with pytest.raises(NoMatchingMockMethodError, match=r"get_int\(str\)"):
            _ = engine.run(body, "missing method")

        run = recorded[0]
        assert run.method_names() == ["connect", "create_statement", "execute_query", "next", "get_int"]
        assert engine.active_run is None

    def test_mock_failure_propagates_unchanged(self, registry: DriverRegistry) -> None:
        """Test that exceptions raised by a mock reach the caller as they are."""
        engine = MockDriver([FailingResultSet()], registry=registry)
        rs = engine.new_connection().create_statement().execute_query("SELECT 1")

        with pytest.raises(LookupError, match="fixture has no rows"):
            _ = engine.run(rs.next)

    def test_nested_runs_are_rejected(self, engine: MockDriver) -> None:
        """Test that starting a run inside a run fails instead of mixing logs."""

        def outer() -> None:
            _ = engine.run(lambda: None, "inner")

        with pytest.raises(RunAlreadyActiveError):
            _ = engine.run(outer, "outer")
        assert engine.active_run is None


class TestResultSetProvision:
    def test_second_result_set_is_bound_to_sentinel(self, engine: MockDriver) -> None:
        """Test that running out of mock objects only fails on the first data call."""
        stmt = engine.new_connection().create_statement()
        first = stmt.execute_query("SELECT 1")
        second = stmt.execute_query("SELECT 2")

        assert first.next() is True
        assert second.bound_mock_object is NO_MOCK_OBJECT  # type: ignore[attr-defined]
        with pytest.raises(NoBoundMockObjectError, match="exhausted") as exc_info:
            _ = second.next()
        assert exc_info.value.exhausted is True

    def test_result_sets_bind_mock_objects_in_order(self, registry: DriverRegistry) -> None:
        """Test that [A, B] bind to the first and second result set respectively."""
        a = RowsResultSet([{"id": 1}], label="A")
        b = RowsResultSet([{"id": 2}, {"id": 3}], label="B")
        engine = MockDriver([a, b], registry=registry)
        stmt = engine.new_connection().create_statement()

        first = stmt.execute_query("SELECT * FROM a")
        second = stmt.execute_query("SELECT * FROM b")

        assert first.next() is True
        assert first.get_int("id") == 1
        assert first.next() is False
        assert b.requested_columns == []
        assert second.next() is True
        assert second.get_int("id") == 2
        assert a.requested_columns == ["id"]

    def test_strict_settings_fail_on_exhaustion(self, registry: DriverRegistry) -> None:
        """Test that fail_on_exhausted_provider turns exhaustion into an error."""
        engine = MockDriver(
            [MockNameResultSet()],
            registry=registry,
            settings=EngineSettings(fail_on_exhausted_provider=True),
        )
        stmt = engine.new_connection().create_statement()
        _ = stmt.execute_query("SELECT 1")

        with pytest.raises(ResultSetProviderExhaustedError):
            _ = stmt.execute_query("SELECT 2")

    def test_set_mock_objects_restarts_provider(self, engine: MockDriver) -> None:
        """Test that supplying new mock objects starts from the first one again."""
        stmt = engine.new_connection().create_statement()
        _ = stmt.execute_query("SELECT 1")

        named = MockObject("fresh")
        engine.set_mock_object(named)

        assert stmt.execute_query("SELECT 2").bound_mock_object is named  # type: ignore[attr-defined]

    def test_custom_provider(self, engine: MockDriver) -> None:
        """Test that an overriding provider decides which mock object is bound."""

        class ConstantProvider:
            def __init__(self, mock_object: object) -> None:
                self.mock_object = mock_object
                self.calls = 0

            def next(self) -> object:
                self.calls += 1
                return self.mock_object

            def supply(self, mock_objects: Any) -> None: ...

        provider = ConstantProvider(MockNameResultSet())
        engine.set_result_set_provider(provider)
        stmt = engine.new_connection().create_statement()

        assert stmt.execute_query("SELECT 1").get_value("a") == "mockName"
        assert stmt.execute_query("SELECT 2").get_value("b") == "mockName"
        assert provider.calls == 2
        assert engine.result_set_provider is provider


class TestClassBindings:
    def test_rebinding_affects_later_stand_ins_only(self, engine: MockDriver) -> None:
        """Test that set_class_binding changes the type of subsequently built stand-ins."""
        conn = engine.new_connection()
        before = conn.create_statement()

        engine.set_class_binding(Statement, VendorStatement)
        after = conn.create_statement()

        assert not isinstance(before, VendorStatement)
        assert isinstance(after, VendorStatement)
        assert after.get_warnings() is None
        assert engine.get_class_bindings()[Statement] is VendorStatement

    def test_replacing_bindings_can_unbind(self, engine: MockDriver) -> None:
        """Test that set_class_bindings replaces the table and misses fail hard."""
        conn = engine.new_connection()
        engine.set_class_bindings({Connection: Connection})

        with pytest.raises(UnboundCategoryError, match="Statement"):
            _ = conn.create_statement()


class TestSubstitution:
    def test_restore_returns_registry_to_previous_state(self, engine: MockDriver, registry: DriverRegistry) -> None:
        """Test that substitute then restore leaves the same active drivers."""
        before = registry.list_active()

        engine.substitute_entry_point()
        assert registry.list_active() == [engine.entry_point]
        engine.restore_entry_point()

        assert set(map(id, registry.list_active())) == set(map(id, before))

    def test_substituting_twice_keeps_the_original_drivers(self, engine: MockDriver, registry: DriverRegistry) -> None:
        """Test that a second substitution fails instead of overwriting the saved drivers."""
        before = registry.list_active()
        engine.substitute_entry_point()

        with pytest.raises(DriverRegistryError, match="already substituted"):
            engine.substitute_entry_point()
        engine.restore_entry_point()

        assert registry.list_active() == before

    def test_restore_twice_fails_in_registry(self, engine: MockDriver) -> None:
        """Test that restoring without a substitution propagates the registry error."""
        engine.substitute_entry_point()
        engine.restore_entry_point()

        with pytest.raises(DriverRegistryError):
            engine.restore_entry_point()

    def test_substituted_restores_after_failure(self, engine: MockDriver, registry: DriverRegistry) -> None:
        """Test that the guard restores the registry even when the block raises."""
        before = registry.list_active()

        with pytest.raises(RuntimeError, match="boom"), engine.substituted():
            raise RuntimeError("boom")

        assert registry.list_active() == before

    def test_run_with_mocks_against_application_code(self, registry: DriverRegistry) -> None:
        """Test the static convenience runner against code that uses the registry."""
        rows = RowsResultSet([{"name": "ada"}, {"name": None}, {"name": "grace"}])
        names: list[str] = []
        before = registry.list_active()

        run = MockDriver.run_with_mocks(
            lambda: names.extend(load_user_names(registry)),
            [rows],
            name="load users",
            registry=registry,
        )

        assert names == ["ada", "grace"]
        assert run.method_names()[:6] == [
            "connect",
            "__enter__",
            "create_statement",
            "__enter__",
            "execute_query",
            "__enter__",
        ]
        assert run.method_names().count("get_string") == 3
        assert run.method_names()[-3:] == ["__exit__", "__exit__", "__exit__"]
        assert registry.list_active() == before

    def test_run_with_mocks_prepared_statement(self, registry: DriverRegistry) -> None:
        """Test a prepared statement chain; parameter binding is a no-op."""
        result: list[int] = []

        run = MockDriver.run_with_mocks(
            lambda: result.append(count_orders(7, registry)),
            [RowsResultSet([{"n": 12}])],
            registry=registry,
        )

        assert result == [12]
        assert "set_object" in run.method_names()

    def test_run_with_mocks_restores_after_failure(self, registry: DriverRegistry) -> None:
        """Test that a failing body still leaves the registry restored."""
        before = registry.list_active()

        with pytest.raises(NoBoundMockObjectError):
            _ = MockDriver.run_with_mocks(lambda: load_user_names(registry), [], registry=registry)

        assert registry.list_active() == before

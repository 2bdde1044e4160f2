"""Run database access code in tests against stand-ins fed by mock objects."""

from .bindings import ClassBindingTable
from .descriptor import CallDescriptor, describe_interface
from .engine import MockDriver
from .errors import (
    MockDriverError,
    NoBoundMockObjectError,
    NoMatchingMockMethodError,
    ResultSetProviderExhaustedError,
    RunAlreadyActiveError,
    UnboundCategoryError,
)
from .factory import StandIn, StandInFactory
from .handler import DispatchContext, InterceptionHandler
from .interfaces import (
    CallableStatement,
    Category,
    Closeable,
    Connection,
    Driver,
    PreparedStatement,
    ResultSet,
    SqlInterface,
    Statement,
)
from .mock_object import MockObject
from .provider import NO_MOCK_OBJECT, DefaultResultSetProvider, ResultSetProvider
from .recorder import CallRecorder, TestRun
from .registry import (
    DriverRegistry,
    DriverRegistryError,
    NoSuitableDriverError,
    driver_manager,
    substitute,
)

__all__ = [
    "NO_MOCK_OBJECT",
    "CallDescriptor",
    "CallRecorder",
    "CallableStatement",
    "Category",
    "ClassBindingTable",
    "Closeable",
    "Connection",
    "DefaultResultSetProvider",
    "DispatchContext",
    "Driver",
    "DriverRegistry",
    "DriverRegistryError",
    "InterceptionHandler",
    "MockDriver",
    "MockDriverError",
    "MockObject",
    "NoBoundMockObjectError",
    "NoMatchingMockMethodError",
    "NoSuitableDriverError",
    "PreparedStatement",
    "ResultSet",
    "ResultSetProvider",
    "ResultSetProviderExhaustedError",
    "RunAlreadyActiveError",
    "SqlInterface",
    "StandIn",
    "StandInFactory",
    "Statement",
    "TestRun",
    "UnboundCategoryError",
    "describe_interface",
    "driver_manager",
    "substitute",
]

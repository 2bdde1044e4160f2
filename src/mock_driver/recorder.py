"""Test runs and the log of calls intercepted while they are active."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import attrs

from cattrs_converter import Jsonable, JsonImmutableConverter

from .descriptor import CallDescriptor, format_annotation
from .errors import RunAlreadyActiveError
from .interfaces import Category
from .stopwatch import StopWatch

logger = logging.getLogger(__name__)


@attrs.define(eq=False)
class TestRun:
    """One execution of a test body and every call it made, in order."""

    __test__ = False

    name: str
    calls: list[CallDescriptor] = attrs.field(factory=list)
    stopwatch: StopWatch | None = attrs.field(default=None, repr=False)

    def method_names(self) -> list[str]:
        return [call.name for call in self.calls]

    @property
    def elapsed_ms(self) -> float | None:
        if self.stopwatch is None:
            return None
        return self.stopwatch.elapsed_ms()

    def to_jsonable(self, converter: JsonImmutableConverter | None = None) -> Jsonable:
        """Export the run for reports and snapshot assertions."""
        return (converter or call_log_converter()).unstructure(self)

    def __str__(self) -> str:
        return self.name


class CallRecorder:
    """Append-only call log of the run that is currently active.

    One recorder serves one engine; at most one run is active at a time.
    """

    def __init__(self) -> None:
        self.active: TestRun | None = None

    def begin(self, name: str) -> TestRun:
        return TestRun(name)

    def record(self, run: TestRun, descriptor: CallDescriptor) -> None:
        run.calls.append(descriptor)

    def log(self, run: TestRun) -> tuple[CallDescriptor, ...]:
        return tuple(run.calls)

    @contextmanager
    def activate(self, run: TestRun) -> Iterator[TestRun]:
        """Make `run` the active run for the duration of the block.

        Failures inside the block propagate unchanged after the run has
        been deactivated.

        Raises
        ------
        RunAlreadyActiveError
            If another run is already active on this recorder.
        """
        if self.active is not None:
            raise RunAlreadyActiveError(f"Cannot start {run.name!r} while {self.active.name!r} is active")
        self.active = run
        run.stopwatch = StopWatch.start()
        try:
            yield run
        finally:
            run.stopwatch.stop()
            self.active = None
            logger.info(f"Finished test run {run.name!r}: {len(run.calls)} call(s) in {run.elapsed_ms:.3f} ms")


def _descriptor_to_json(descriptor: CallDescriptor) -> Jsonable:
    return {
        "name": descriptor.name,
        "signature": descriptor.signature,
        "parameter_types": [format_annotation(p) for p in descriptor.parameter_types],
        "declaring_type": descriptor.declaring_type.__qualname__,
        "return_type": format_annotation(descriptor.return_type),
        "declaring_category": _category_name(descriptor.declaring_category),
        "return_category": _category_name(descriptor.return_category),
    }


def _category_name(category: Category | None) -> str | None:
    return category.name if category else None


def call_log_converter() -> JsonImmutableConverter:
    """JSON converter that knows how to export runs and call descriptors."""
    converter = JsonImmutableConverter().register_unstructure_hook(CallDescriptor, _descriptor_to_json)

    def run_to_json(run: TestRun) -> Jsonable:
        return {
            "name": run.name,
            "calls": [converter.unstructure(call) for call in run.calls],
        }

    return converter.register_unstructure_hook(TestRun, run_to_json)

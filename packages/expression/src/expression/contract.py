import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any, NoReturn

# Parameter names whose values never end up in a ContractViolationError context.
SENSITIVE_NAMES = frozenset(
    {
        "password",
        "passwd",
        "pwd",
        "secret",
        "token",
        "key",
        "api_key",
        "auth",
        "properties",
    }
)

REDACTED = "<REDACTED>"


class ContractViolationError(Exception):
    """Exception raised when a guarded function fails in an unexpected way.

    The `contract` decorator raises this for every exception that is not
    listed in its ``known_err`` tuple.

    Attributes
    ----------
    function_name : str | None
        Name of the guarded function.
    original_exception : Exception | None
        The exception that broke the contract.
    context : dict[str, Any]
        Sanitized call arguments, under the ``"args"`` and ``"kwargs"`` keys.

    Examples
    --------
    >>> @contract()
    ... def lookup(table: dict[str, int], key: str) -> int:
    ...     return table[key]
    >>> try:
    ...     lookup({}, "missing")
    ... except ContractViolationError as e:
    ...     print(e.function_name, type(e.original_exception).__name__)
    lookup KeyError
    """

    def __init__(
        self,
        message: str = "contract violation",
        *,
        function_name: str | None = None,
        original_exception: Exception | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.function_name = function_name
        self.original_exception = original_exception
        self.context = context or {}

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.function_name:
            parts.append(f"in function '{self.function_name}'")
        if self.original_exception:
            parts.append(f"caused by {type(self.original_exception).__name__}: {self.original_exception}")
        return " ".join(parts)


def sanitize_arguments(
    fn: Callable[..., Any],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> dict[str, Any]:
    """Replace the values of sensitive parameters with a redaction marker.

    Positional arguments are matched to parameter names through the
    signature of `fn`; when the signature cannot be read only keyword
    arguments are checked.

    Examples
    --------
    >>> def connect(url: str, password: str) -> None: ...
    >>> sanitize_arguments(connect, ("snowflake://acme", "hunter2"), {})
    {'args': ('snowflake://acme', '<REDACTED>'), 'kwargs': {}}
    """
    try:
        param_names = list(inspect.signature(fn).parameters)
    except (ValueError, TypeError):
        param_names = []

    sanitized_args = tuple(
        REDACTED if i < len(param_names) and param_names[i].lower() in SENSITIVE_NAMES else arg
        for i, arg in enumerate(args)
    )
    sanitized_kwargs = {
        key: REDACTED if key.lower() in SENSITIVE_NAMES else value for key, value in kwargs.items()
    }
    return {"args": sanitized_args, "kwargs": sanitized_kwargs}


def _default_map_err(
    err: Exception,
    fn: Callable[..., Any],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> NoReturn:
    raise ContractViolationError(
        "contract violation",
        function_name=fn.__name__,
        original_exception=err,
        context=sanitize_arguments(fn, args, kwargs),
    ) from err


def contract[R, **P](
    *,
    map_err: Callable[
        [Exception, Callable[..., Any], tuple[Any, ...], dict[str, Any]],
        NoReturn,
    ] = _default_map_err,
    known_err: tuple[type[Exception], ...] = (),
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Enforce an error contract on a function.

    Exceptions listed in `known_err` pass through unchanged; any other
    exception is handed to `map_err`, which must raise.

    Parameters
    ----------
    map_err : Callable[[Exception, Callable[..., Any], tuple[Any, ...], dict[str, Any]], NoReturn], optional
        Maps an unexpected exception to the error the caller sees.
        By default a ContractViolationError with sanitized arguments.
    known_err : tuple[type[Exception], ...], optional
        Exception types that belong to the function's documented behaviour.

    Returns
    -------
    Callable[[Callable[P, R]], Callable[P, R]]
        The decorator.

    Examples
    --------
    >>> @contract(known_err=(LookupError,))
    ... def first_row(rows: list[str]) -> str:
    ...     if not rows:
    ...         raise LookupError("no rows")
    ...     return rows[0].upper()
    >>> first_row(["a"])
    'A'
    >>> try:
    ...     first_row([])
    ... except LookupError as e:
    ...     print(e)
    no rows
    >>> try:
    ...     first_row([None])
    ... except ContractViolationError as e:
    ...     print(type(e.original_exception).__name__)
    AttributeError
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        @wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return fn(*args, **kwargs)
            except known_err:
                raise
            except Exception as e:
                map_err(e, fn, args, kwargs)

        return wrapper

    return decorator

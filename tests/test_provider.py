import pytest
from hypothesis import given
from hypothesis import strategies as st

from mock_driver import NO_MOCK_OBJECT, DefaultResultSetProvider, ResultSetProviderExhaustedError
from mock_driver.provider import _NoMockObject


class TestNoMockObject:
    def test_singleton(self) -> None:
        assert _NoMockObject() is NO_MOCK_OBJECT

    def test_falsy_with_readable_repr(self) -> None:
        assert not NO_MOCK_OBJECT
        assert repr(NO_MOCK_OBJECT) == "NO_MOCK_OBJECT"


class TestDefaultResultSetProvider:
    @given(st.lists(st.integers(), max_size=8), st.integers(min_value=0, max_value=12))
    def test_hands_out_in_order_then_sentinel(self, mock_objects: list[int], calls: int) -> None:
        """Test that the first min(n, k) objects come in order, the rest are the sentinel."""
        provider = DefaultResultSetProvider(mock_objects)

        handed_out = [provider.next() for _ in range(calls)]

        served = min(len(mock_objects), calls)
        assert handed_out[:served] == mock_objects[:served]
        assert all(obj is NO_MOCK_OBJECT for obj in handed_out[served:])
        assert provider.position == served
        assert provider.remaining == len(mock_objects) - served

    def test_supply_restarts(self) -> None:
        provider = DefaultResultSetProvider(["a"])
        _ = provider.next()

        provider.supply(["b", "c"])

        assert provider.next() == "b"
        assert provider.remaining == 1

    def test_supply_copies_the_objects(self) -> None:
        mock_objects = ["a"]
        provider = DefaultResultSetProvider(mock_objects)
        mock_objects.append("b")

        assert provider.remaining == 1

    def test_strict_provider_raises(self) -> None:
        provider = DefaultResultSetProvider(["a"], strict=True)
        _ = provider.next()

        with pytest.raises(ResultSetProviderExhaustedError, match="after 1 mock object"):
            _ = provider.next()

    def test_empty_provider(self) -> None:
        provider = DefaultResultSetProvider()
        assert provider.next() is NO_MOCK_OBJECT

"""
ethrecords Fixed Collection Tests
"""

import pytest

from ethrecords.core.collections import Headers, Logs, Transactions
from ethrecords.errors import ErrorCode, IndexOutOfBoundsError


class TestFixedCollection:
    """Checked, read-only access."""

    def test_size_and_get(self):
        logs = Logs(["a", "b", "c"])
        assert logs.size() == 3
        assert len(logs) == 3
        assert logs.get(0) == "a"
        assert logs[2] == "c"
        assert list(logs) == ["a", "b", "c"]

    def test_empty(self):
        headers = Headers()
        assert headers.size() == 0
        with pytest.raises(IndexOutOfBoundsError):
            headers.get(0)

    @pytest.mark.parametrize("index", [-1, 3, 100])
    def test_out_of_bounds(self, index):
        logs = Logs(["a", "b", "c"])
        with pytest.raises(IndexOutOfBoundsError) as exc:
            logs.get(index)
        assert exc.value.code == ErrorCode.INDEX_OUT_OF_BOUNDS

    def test_negative_subscript_rejected(self):
        with pytest.raises(IndexOutOfBoundsError):
            Logs(["a"])[-1]

    def test_non_int_index(self):
        with pytest.raises(TypeError):
            Logs(["a"]).get("0")

    def test_source_not_shared(self):
        source = ["a"]
        logs = Logs(source)
        source.append("b")
        assert logs.size() == 1

    def test_equality_by_type(self):
        assert Logs(["a"]) == Logs(["a"])
        assert Logs(["a"]) != Transactions(["a"])
        assert hash(Logs(["a"])) == hash(Logs(["a"]))

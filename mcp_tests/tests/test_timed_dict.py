import pytest

from core.errors import EmptyReductionError, ValidationError
from core.models import Factory
from core.timed_dict import TimedDict, compare_sort


def test_basic_operations():
    d = TimedDict({"A": 1}, ("B", 2))

    assert d.set("C", 3) == 3
    assert d.size == 3
    assert d.has("C")
    assert d.get("C") == 3
    assert d.delete("C") == 3
    assert not d.has("C")
    assert d.get("C") is None
    assert d.clear() == 2
    assert d.size == 0
    assert len(d) == 0


def test_constructor_merges_sources_first_seen_wins():
    seed = TimedDict({"A": 1, "B": 2})
    d = TimedDict(seed, {"A": 10, "C": 3}, ["D", 4])

    assert list(d) == [("A", 1), ("B", 2), ("C", 3), ("D", 4)]


def test_constructor_rejects_unknown_source():
    with pytest.raises(ValidationError):
        TimedDict(42)


def test_get_default_and_item_access():
    d = TimedDict({"A": 1})

    assert d.get("missing", "fallback") == "fallback"
    assert d["A"] == 1
    with pytest.raises(KeyError):
        d["missing"]

    d["B"] = 2
    assert "B" in d
    del d["B"]
    assert "B" not in d
    with pytest.raises(KeyError):
        del d["B"]


@pytest.mark.parametrize(
    "index, expected",
    [(0, ("A", 1)), (2, ("C", 3)), (-1, ("C", 3)), (-3, ("A", 1)), (3, None), (-4, None)],
)
def test_at(index, expected):
    d = TimedDict({"A": 1, "B": 2, "C": 3})
    assert d.at(index) == expected


def test_ensure_sets_once():
    d = TimedDict()

    assert d.ensure("A", 2) == 2
    assert d.get("A") == 2
    assert d.ensure("A", 4) == 2
    assert d.get("A") == 2


def test_ensure_factory_called_only_when_absent():
    d = TimedDict({"A": 1})
    calls = []

    def make(key):
        calls.append(key)
        return key.lower()

    assert d.ensure("A", Factory(make)) == 1
    assert d.ensure("B", Factory(make)) == "b"
    assert calls == ["B"]


def test_add_only_when_absent():
    d = TimedDict({"A": 1})

    assert d.add("A", 5) is None
    assert d.get("A") == 1
    assert d.add("B", Factory(lambda key: key * 2)) == "BB"
    assert d.get("B") == "BB"


def test_update_only_when_present():
    d = TimedDict({"A": 1})

    assert d.update("B", 5) is None
    assert not d.has("B")
    assert d.update("A", Factory(lambda key: 7)) == 7
    assert d.get("A") == 7


def test_set_existing_key_keeps_position():
    d = TimedDict({"A": 1, "B": 2})
    d.set("A", 9)
    assert list(d) == [("A", 9), ("B", 2)]


def test_delete_missing_returns_none():
    assert TimedDict().delete("nope") is None


def test_sweep_removes_matches():
    d = TimedDict({"A": 1, "B": 2, "C": 3})

    count = d.sweep(lambda value, key: value % 2)

    assert count == 2
    assert list(d) == [("B", 2)]


def test_equals():
    m1 = TimedDict()
    m2 = TimedDict({"A": 2})
    m3 = TimedDict({"A": 4})
    m4 = TimedDict({"B": 2})
    m5 = TimedDict({"A": 2})

    assert m2.equals(None) is False
    assert m2.equals({"A": 2}) is False
    assert m2.equals(m2) is True
    assert m2.equals(m1) is False
    assert m2.equals(m3) is False
    assert m2.equals(m4) is False
    assert m2.equals(m5) is True
    assert m5.equals(m2) is True


def test_equals_uses_identity_for_containers():
    m1 = TimedDict({"A": [1]})
    m2 = TimedDict({"A": [1]})
    shared = [1]
    m3 = TimedDict({"A": shared})
    m4 = TimedDict({"A": shared})

    assert m1.equals(m2) is False
    assert m3.equals(m4) is True


def test_first_and_last():
    d = TimedDict({"A": 1, "B": 2, "C": 3})

    assert list(d.first()) == [("A", 1)]
    assert list(d.first(5)) == [("A", 1), ("B", 2), ("C", 3)]
    assert list(d.last(2)) == [("B", 2), ("C", 3)]
    assert list(d.last(0)) == []


def test_every_find_has_all_has_any():
    d = TimedDict({"A": 1, "B": 2, "C": 3})

    assert d.every(lambda value, key: value > 0)
    assert not d.every(lambda value, key: value > 1)
    assert d.find(lambda value, key: value > 1) == ("B", 2)
    assert d.find(lambda value, key: value > 5) is None
    assert d.has_all("A", "B")
    assert not d.has_all("A", "Z")
    assert d.has_any("Z", "C")
    assert not d.has_any("Y", "Z")


def test_map_and_each():
    d = TimedDict({"A": 1, "B": 2})

    assert d.map(lambda value, key: f"{key}{value}") == ["A1", "B2"]

    seen = []
    assert d.each(lambda value, key: seen.append((key, value))) is d
    assert seen == [("A", 1), ("B", 2)]


def test_reduce_with_initial():
    d = TimedDict({"A": 1, "B": 2, "C": 3})
    assert d.reduce(lambda acc, pair: acc + pair[1], 0) == 6


def test_reduce_without_initial():
    d = TimedDict({"A": 1, "B": 2, "C": 3})
    assert d.reduce(lambda acc, pair: (pair[0], acc[1] + pair[1])) == ("C", 6)


def test_reduce_empty():
    d = TimedDict()

    assert d.reduce(lambda acc, pair: acc + pair[1], 0) == 0
    with pytest.raises(EmptyReductionError):
        d.reduce(lambda acc, pair: 0)
    with pytest.raises(TypeError):
        d.reduce(lambda acc, pair: 0)


def test_clone():
    d = TimedDict({"A": 1, "B": 2, "C": 3})
    c = d.clone()

    assert isinstance(c, TimedDict)
    assert c is not d
    assert list(c) == list(d)
    c.set("D", 4)
    assert not d.has("D")


def test_filter_keeps_matches():
    d = TimedDict({"A": 1, "B": 2, "C": 3})
    f = d.filter(lambda value, key: value % 2)

    assert isinstance(f, TimedDict)
    assert list(f) == [("A", 1), ("C", 3)]
    assert d.size == 3


def test_filter_and_complement_reconstruct_source():
    d = TimedDict({"A": 1, "B": 2, "C": 3, "D": 4})
    odd = d.filter(lambda value, key: value % 2)
    even = d.filter(lambda value, key: not value % 2)

    assert sorted(list(odd) + list(even)) == sorted(d)


def test_partition():
    d = TimedDict({"A": 1, "B": 2})
    first, second = d.partition(lambda value, key: value % 2)

    assert list(first) == [("A", 1)]
    assert list(second) == [("B", 2)]


def test_partition_into_given_containers():
    d = TimedDict({"A": 1, "B": 2})
    odd = TimedDict({"Z": 0})
    even = TimedDict()

    result = d.partition(lambda value, key: value % 2, odd, even)

    assert result[0] is odd
    assert result[1] is even
    assert list(odd) == [("Z", 0), ("A", 1)]
    assert list(even) == [("B", 2)]


def test_concat_keeps_existing_values():
    m1 = TimedDict({"A": 1})
    m2 = TimedDict({"A": 0, "B": 2})

    m3 = m1.concat(m2)

    assert m3 is m1
    assert list(m3) == [("A", 1), ("B", 2)]
    assert list(m2) == [("A", 0), ("B", 2)]


def test_concat_self_is_noop():
    d = TimedDict({"A": 1})
    assert d.concat(d) is d
    assert list(d) == [("A", 1)]


def test_sort_default():
    d = TimedDict({"B": 2, "C": 3, "A": 1})
    assert d.sort() is d
    assert list(d) == [("A", 1), ("B", 2), ("C", 3)]


def test_sort_with_comparator_on_keys():
    d = TimedDict({"B": 1, "C": 1, "A": 1})
    d.sort(lambda va, vb, ka, kb: compare_sort(kb, ka))
    assert list(d.keys()) == ["C", "B", "A"]


def test_compare_sort():
    assert compare_sort(2, 1) == 1
    assert compare_sort(1, 1) == 0
    assert compare_sort(1, 2) == -1


def test_keys_values_items_are_restartable():
    d = TimedDict({"A": 1, "B": 2})

    assert list(d.keys()) == ["A", "B"]
    assert list(d.values()) == [1, 2]
    assert list(d.items()) == list(d.items())
    assert list(iter(d)) == list(iter(d))


@pytest.mark.asyncio
async def test_async_iteration():
    d = TimedDict({"A": 1, "B": 2})
    pairs = [pair async for pair in d]
    assert pairs == [("A", 1), ("B", 2)]


def test_delete_while_iterating():
    d = TimedDict({"A": 1, "B": 2, "C": 3})

    seen = []
    for key, value in d:
        seen.append(key)
        d.delete(key)

    assert seen == ["A", "B", "C"]
    assert d.size == 0


def test_iteration_skips_entries_removed_by_callback():
    d = TimedDict({"A": 1, "B": 2, "C": 3})

    def drop_next(value, key):
        d.delete("B")
        return True

    assert d.every(drop_next)
    assert list(d.keys()) == ["A", "C"]

    d.set("B", 2)
    seen = []
    d.each(lambda value, key: seen.append(key) or d.delete("C"))
    assert seen == ["A", "B"]


def test_reduce_callback_may_mutate():
    d = TimedDict({"A": 1, "B": 2})

    def total(acc, pair):
        d.set(pair[0] + "!", pair[1])
        return acc + pair[1]

    assert d.reduce(total, 0) == 3
    assert list(d.keys()) == ["A", "B", "A!", "B!"]


def test_sweep_predicate_may_delete_entries():
    d = TimedDict({"A": 1, "B": 2, "C": 3})

    def predicate(value, key):
        d.delete("C")
        return key != "B"

    assert d.sweep(predicate) == 1
    assert list(d) == [("B", 2)]


def test_to_string_and_repr():
    d = TimedDict({"A": 1, "B": 2, "C": 3})

    assert str(d) == "1 2 3"
    assert d.to_string(", ") == "1, 2, 3"
    assert d.to_string("", predicate=lambda value, key: value > 1) == "23"
    assert d.to_string("|", formatter=lambda value, key: f"{key}={value}") == "A=1|B=2|C=3"
    assert repr(d) == "TimedDict({'A': 1, 'B': 2, 'C': 3})"


def test_debug_logs_entries(caplog):
    d = TimedDict({"A": 1})

    with caplog.at_level("DEBUG", logger="core.timed_dict"):
        d.debug()

    assert "TimedDict[1] (0 pending timers):" in caplog.text
    assert "'A'" in caplog.text

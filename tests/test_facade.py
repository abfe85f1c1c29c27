"""Unit tests for tracked facades: recorded access modes and read-only enforcement."""

from collections.abc import Mapping, Sequence

import pytest

from sneakyeq import (
    ReadOnlyViolation,
    RevokedSessionError,
    Session,
    SneakyEqualsError,
    TrackedMapping,
    TrackedSequence,
    has_own,
)
from sneakyeq.tracking.ledger import ALL_OWN_KEYS


class TestTrackedMapping:
    """Reads through a mapping facade and what they record."""

    def test_getitem_records_read_and_wraps_children(self) -> None:
        """Indexing records the key and returns a facade for container children."""
        state = {"x": {"y": 1}, "z": 2}
        session = Session()
        proxy = session.track(state)

        child = proxy["x"]
        assert isinstance(child, TrackedMapping)
        assert child["y"] == 1
        assert proxy["z"] == 2

        assert list(session.ledger.get(state).keys) == ["x", "z"]
        assert list(session.ledger.get(state["x"]).keys) == ["y"]

    def test_missing_key_raises_but_is_recorded(self) -> None:
        """A failed read is still a dependency on the key being absent."""
        state = {"a": 1}
        session = Session()
        proxy = session.track(state)

        with pytest.raises(KeyError):
            proxy["b"]

        assert "b" in session.ledger.get(state).keys

    def test_get_with_default(self) -> None:
        """get() records a read and returns the default for absent keys."""
        state = {"a": {"b": 1}}
        session = Session()
        proxy = session.track(state)

        assert proxy.get("missing") is None
        assert proxy.get("missing", 0) == 0
        assert isinstance(proxy.get("a"), TrackedMapping)
        assert list(session.ledger.get(state).keys) == ["missing", "a"]

    def test_contains_records_containment(self) -> None:
        """`in` records a containment check, not a read."""
        state = {"a": 1}
        session = Session()
        proxy = session.track(state)

        assert "a" in proxy
        assert "b" not in proxy

        record = session.ledger.get(state)
        assert list(record.has_keys) == ["a", "b"]
        assert not record.keys

    def test_has_own_records_presence(self) -> None:
        """has_own() records an own-presence check."""
        state = {"a": 1}
        session = Session()
        proxy = session.track(state)

        assert has_own(proxy, "a")
        assert not has_own(proxy, "b")
        assert list(session.ledger.get(state).own_keys) == ["a", "b"]

    def test_enumeration_records_all_own_keys(self) -> None:
        """Iteration and len() depend on the full key set."""
        for use in (list, len, lambda proxy: list(proxy.keys())):
            state = {"a": 1, "b": 2}
            session = Session()
            use(session.track(state))
            assert session.ledger.get(state).own_keys is ALL_OWN_KEYS

    def test_items_and_values(self) -> None:
        """items() and values() enumerate keys and read every value."""
        state = {"a": 1, "b": [2]}
        session = Session()
        proxy = session.track(state)

        items = dict(proxy.items())
        assert items["a"] == 1
        assert isinstance(items["b"], TrackedSequence)
        assert list(proxy.values())[0] == 1

        record = session.ledger.get(state)
        assert record.own_keys is ALL_OWN_KEYS
        assert list(record.keys) == ["a", "b"]

    def test_has_own_after_enumeration_is_not_narrowed(self) -> None:
        """A full enumeration already covers later presence checks."""
        state = {"a": 1}
        session = Session()
        proxy = session.track(state)

        len(proxy)
        has_own(proxy, "a")
        assert session.ledger.get(state).own_keys is ALL_OWN_KEYS

    def test_is_a_mapping(self) -> None:
        """Facades take part in the Mapping protocol."""
        state = {"a": 1}
        proxy = Session().track(state)

        assert isinstance(proxy, Mapping)
        assert proxy == {"a": 1}

    def test_repr_is_not_an_observation(self) -> None:
        """repr() shows the source without touching the ledger."""
        state = {"a": 1}
        session = Session()
        proxy = session.track(state)

        assert "TrackedMapping" in repr(proxy)
        assert session.ledger.get(state) is None

        session.end()
        assert "revoked" in repr(proxy)


class TestTrackedSequence:
    """Reads through a sequence facade and what they record."""

    def test_index_records_read(self) -> None:
        """A non-negative index does not depend on the length."""
        state = [1, 2, 3]
        session = Session()
        proxy = session.track(state)

        assert proxy[0] == 1
        record = session.ledger.get(state)
        assert list(record.keys) == [0]
        assert record.own_keys == {}

    def test_negative_index_observes_length(self) -> None:
        """Counting from the end depends on the length too."""
        state = [1, 2, 3]
        session = Session()
        proxy = session.track(state)

        assert proxy[-1] == 3
        record = session.ledger.get(state)
        assert list(record.keys) == [2]
        assert record.own_keys is ALL_OWN_KEYS

        with pytest.raises(IndexError):
            proxy[-4]

    def test_out_of_range(self) -> None:
        """Reading past the end raises IndexError like a list."""
        proxy = Session().track([1])

        with pytest.raises(IndexError):
            proxy[5]

    def test_slices(self) -> None:
        """Slices read every selected index and keep the source type."""
        session = Session()
        as_list = session.track([1, 2, 3])
        as_tuple = session.track((1, 2, 3))

        assert as_list[1:] == [2, 3]
        assert as_tuple[:2] == (1, 2)
        assert isinstance(as_tuple[:2], tuple)

    def test_iteration(self) -> None:
        """Iteration enumerates indices and wraps container items."""
        state = [{"a": 1}, {"a": 2}]
        session = Session()
        proxy = session.track(state)

        items = list(proxy)
        assert all(isinstance(item, TrackedMapping) for item in items)
        assert [item["a"] for item in reversed(proxy)] == [2, 1]

        record = session.ledger.get(state)
        assert record.own_keys is ALL_OWN_KEYS
        assert list(record.keys) == [0, 1]

    def test_equality(self) -> None:
        """A sequence facade compares equal to a sequence of the same type."""
        session = Session()
        proxy = session.track([1, 2])

        assert isinstance(proxy, Sequence)
        assert proxy == [1, 2]
        assert proxy != [1, 3]
        assert proxy != (1, 2)


class TestReadOnly:
    """Facades reject every mutation, before and after their session ends."""

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda proxy: proxy.__setitem__("a", 2),
            lambda proxy: proxy.__delitem__("a"),
            lambda proxy: setattr(proxy, "a", 2),
            lambda proxy: delattr(proxy, "_source"),
            lambda proxy: proxy.update({"b": 1}),
            lambda proxy: proxy.setdefault("b", 1),
            lambda proxy: proxy.pop("a"),
            lambda proxy: proxy.popitem(),
            lambda proxy: proxy.clear(),
        ],
    )
    def test_mapping_mutations(self, mutate) -> None:
        """Every mutating mapping operation raises ReadOnlyViolation."""
        state = {"a": 1}
        session = Session()
        proxy = session.track(state)

        with pytest.raises(ReadOnlyViolation):
            mutate(proxy)
        session.end()
        with pytest.raises(ReadOnlyViolation):
            mutate(proxy)

        assert state == {"a": 1}

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda proxy: proxy.__setitem__(0, 2),
            lambda proxy: proxy.append(4),
            lambda proxy: proxy.extend([4]),
            lambda proxy: proxy.insert(0, 4),
            lambda proxy: proxy.remove(1),
            lambda proxy: proxy.sort(),
            lambda proxy: proxy.reverse(),
        ],
    )
    def test_sequence_mutations(self, mutate) -> None:
        """Every mutating list operation raises ReadOnlyViolation."""
        state = [1, 2, 3]
        proxy = Session().track(state)

        with pytest.raises(ReadOnlyViolation):
            mutate(proxy)
        assert state == [1, 2, 3]

    def test_augmented_assignment(self) -> None:
        """In-place operators do not fall back to rebinding a copy."""
        mapping = Session().track({"a": 1})
        sequence = Session().track([1])

        with pytest.raises(ReadOnlyViolation):
            mapping |= {"b": 2}
        with pytest.raises(ReadOnlyViolation):
            sequence += [2]
        with pytest.raises(ReadOnlyViolation):
            sequence *= 2

    def test_operators_match_the_container(self) -> None:
        """A mapping has no `+=` and a sequence has no `|=`, as with dict and list."""
        mapping = Session().track({"a": 1})
        sequence = Session().track([1])

        assert not hasattr(mapping, "__iadd__")
        assert not hasattr(mapping, "__imul__")
        assert not hasattr(sequence, "__ior__")

        with pytest.raises(TypeError) as exc_info:
            mapping += [2]
        assert not isinstance(exc_info.value, ReadOnlyViolation)
        with pytest.raises(TypeError) as exc_info:
            sequence |= {2}
        assert not isinstance(exc_info.value, ReadOnlyViolation)

    def test_violation_message(self) -> None:
        """The error names the operation and the container kind."""
        proxy = Session().track([1])

        with pytest.raises(ReadOnlyViolation, match="cannot append to a tracked sequence") as exc_info:
            proxy.append(2)
        assert isinstance(exc_info.value, TypeError)
        assert isinstance(exc_info.value, SneakyEqualsError)


class TestRevocation:
    """Ending a session makes its facades unusable."""

    @pytest.mark.parametrize(
        "use",
        [
            lambda proxy: proxy["a"],
            lambda proxy: proxy.get("a"),
            lambda proxy: "a" in proxy,
            lambda proxy: len(proxy),
            lambda proxy: list(proxy),
            lambda proxy: has_own(proxy, "a"),
        ],
    )
    def test_mapping_access_after_end(self, use) -> None:
        """Any observation through a revoked facade raises RevokedSessionError."""
        session = Session()
        proxy = session.track({"a": 1})
        session.end()

        with pytest.raises(RevokedSessionError):
            use(proxy)

    def test_children_are_revoked_too(self) -> None:
        """Facades created during the session are revoked with it."""
        session = Session()
        proxy = session.track({"a": [1]})
        child = proxy["a"]
        session.end()

        assert proxy.revoked
        assert child.revoked
        with pytest.raises(RevokedSessionError, match="tracked sequence used after its session has ended"):
            child[0]

    def test_revoked_error_is_runtime_error(self) -> None:
        """RevokedSessionError can be caught as a RuntimeError."""
        session = Session()
        proxy = session.track([1])
        session.end()

        with pytest.raises(RuntimeError):
            len(proxy)

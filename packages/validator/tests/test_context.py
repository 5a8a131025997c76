"""Tests for request state, error collection and field context."""

import threading

import pytest

from reqknobs_validator import (
    Context,
    ErrorCollector,
    FailureRecord,
    RequestState,
    RequestValidationError,
    body,
    query,
    run_chains,
)
from reqknobs_validator.context import snapshot
from reqknobs_validator.values import UNSET


def record(path="a", message="m", value=1, location="body"):
    return FailureRecord(location=location, path=path, value=value, message=message)


class TestErrorCollector:
    """Test the append-only collector."""

    def test_append_keeps_order(self):
        errors = ErrorCollector()

        assert errors.append(record("a")) == 0
        assert errors.append(record("b")) == 1
        assert [r.path for r in errors] == ["a", "b"]
        assert len(errors) == 2
        assert not errors.is_empty()

    def test_rebind_message(self):
        errors = ErrorCollector()
        errors.append(record("a", "old"))
        errors.append(record("b", "other"))

        errors.rebind_message(0, "new")

        assert [r.message for r in errors.all()] == ["new", "other"]

    def test_for_field(self):
        errors = ErrorCollector()
        errors.append(record("a", "1"))
        errors.append(record("b", "2"))
        errors.append(record("a", "3"))
        errors.append(record("a", "4", location="query"))

        assert [r.message for r in errors.for_field("body", "a")] == ["1", "3"]

    def test_concurrent_appends(self):
        errors = ErrorCollector()

        def worker(n):
            for i in range(200):
                errors.append(record(f"{n}.{i}"))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(errors) == 1600
        assert len({r.path for r in errors}) == 1600

    def test_to_dict(self):
        assert record(value=UNSET).to_dict() == {"location": "body", "path": "a", "value": None, "message": "m"}


class TestRequestState:
    """Test request-level state."""

    def test_bail_flag_is_monotonic(self):
        state = RequestState()
        assert not state.request_bailed

        state.mark_bailed()
        state.mark_bailed()

        assert state.request_bailed

    def test_raise_for_errors(self):
        state = RequestState()
        state.raise_for_errors()

        state.errors.append(record("a"))
        state.errors.append(record("b", location="query"))

        with pytest.raises(RequestValidationError) as exc_info:
            state.raise_for_errors()

        assert len(exc_info.value.failures) == 2
        assert exc_info.value.context["fields"] == ["body.a", "query.b"]

    @pytest.mark.asyncio
    async def test_matched_data(self, request_data):
        state = await run_chains(
            [
                body("name").trim(),
                body("age").is_int().to_int(),
                body("email").is_int(),
                body("nickname").optional().trim(),
                body("items.*.sku").not_empty(),
                query("page").to_int(),
            ],
            request_data,
        )

        assert state.matched_data() == {
            "body": {"name": "Ada", "age": 36, "items": [{"sku": "A-1"}]},
            "query": {"page": 2},
        }
        assert state.matched_data(locations=["query"]) == {"query": {"page": 2}}

    @pytest.mark.asyncio
    async def test_matched_data_include_optionals(self):
        state = await body("a").optional(nullable=True).is_int().run({"body": {"a": None}})

        assert state.matched_data() == {}
        assert state.matched_data(include_optionals=True) == {"body": {"a": None}}

    @pytest.mark.asyncio
    async def test_matched_data_is_a_copy(self):
        request = {"body": {"a": {"b": 1}}}
        state = await body("a").run(request)

        state.matched_data()["body"]["a"]["b"] = 2

        assert request["body"]["a"]["b"] == 1


class TestContext:
    """Test per-field context."""

    def test_original_value_snapshot(self):
        value = {"a": [1]}
        context = Context(value=value, location="body", path="x", request_state=RequestState())

        value["a"].append(2)

        assert context.original_value == {"a": [1]}

    def test_set_value_writes_through(self):
        request = {"body": {}}
        context = Context(
            value=UNSET,
            location="body",
            path="x",
            request_state=RequestState(),
            request=request,
            segments=("x",),
        )

        context.set_value(5)

        assert context.value == 5
        assert request == {"body": {"x": 5}}

    def test_dry_run_does_not_write(self):
        request = {"body": {}}
        context = Context(
            value=UNSET,
            location="body",
            path="x",
            request_state=RequestState(),
            request=request,
            segments=("x",),
            dry_run=True,
        )

        context.set_value(5)

        assert context.value == 5
        assert request == {"body": {}}

    def test_uncopyable_value_kept_by_reference(self):
        lock = threading.Lock()
        context = Context(value={"lock": lock}, location="body", path="", request_state=RequestState())

        assert context.original_value == {"lock": lock}
        assert snapshot(lock) is lock
        assert snapshot([1]) == [1]

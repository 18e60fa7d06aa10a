"""Tests for detour.proxy.resolver — per-request resolution and propagation."""

import asyncio

import anyio
import pytest

from detour.http.headers import Headers
from detour.http.request import Request
from detour.proxy.resolver import NO_MATCH, Failed, NoMatch, Resolved, Resolver, propagate
from detour.proxy.routes import normalize_router
from detour.proxy.target import TargetSpec

TARGET_B = TargetSpec("https:", "localhost", 6002)
TARGET_C = TargetSpec("https:", "localhost", 6003)


def _request(path: str = "/", host: str | None = "testserver", method: str = "GET") -> Request:
    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    pairs = [("host", host)] if host is not None else []
    return Request(
        method=method,
        path=path,
        headers=Headers(pairs),
        _receive=receive,
    )


class TestFixedTargets:
    async def test_string_target_is_unconditional(self) -> None:
        resolver = Resolver(normalize_router("https://localhost:6003"))
        for request in (_request("/"), _request("/api", "beta.localhost:6000", "POST")):
            assert await resolver.resolve(request) == Resolved(TARGET_C)

    async def test_object_target_is_unconditional(self) -> None:
        resolver = Resolver(normalize_router({"host": "localhost", "port": 6002, "protocol": "https:"}))
        assert await resolver.resolve(_request(host=None)) == Resolved(TARGET_B)

    async def test_no_router(self) -> None:
        resolver = Resolver(None)
        assert await resolver.resolve(_request()) is NO_MATCH


class TestTableRouter:
    async def test_match(self) -> None:
        resolver = Resolver(normalize_router({"beta.localhost:6000": "https://localhost:6002"}))
        assert await resolver.resolve(_request(host="beta.localhost:6000")) == Resolved(TARGET_B)

    async def test_no_match(self) -> None:
        resolver = Resolver(normalize_router({"beta.localhost:6000": "https://localhost:6002"}))
        assert await resolver.resolve(_request(host="alpha.localhost:6000")) is NO_MATCH

    async def test_no_host_header(self) -> None:
        resolver = Resolver(normalize_router({"beta.localhost:6000": "https://localhost:6002"}))
        assert await resolver.resolve(_request(host=None)) is NO_MATCH


class TestCallbackRouter:
    async def test_sync_and_async_are_equivalent(self) -> None:
        def sync_router(request):
            return TARGET_C

        async def async_router(request):
            await asyncio.sleep(0)
            return TARGET_C

        request = _request()
        sync_outcome = await Resolver(normalize_router(sync_router)).resolve(request)
        async_outcome = await Resolver(normalize_router(async_router)).resolve(request)
        assert sync_outcome == async_outcome == Resolved(TARGET_C)

    async def test_receives_request(self) -> None:
        seen: list[Request] = []

        def router(request):
            seen.append(request)
            return TARGET_B

        request = _request("/api")
        await Resolver(normalize_router(router)).resolve(request)
        assert seen == [request]
        assert seen[0] is request

    async def test_none_is_no_match(self) -> None:
        outcome = await Resolver(normalize_router(lambda request: None)).resolve(_request())
        assert isinstance(outcome, NoMatch)

    @pytest.mark.parametrize("empty", ["", {}])
    async def test_empty_result_is_no_match(self, empty) -> None:
        outcome = await Resolver(normalize_router(lambda request: empty)).resolve(_request())
        assert outcome is NO_MATCH

    async def test_async_empty_result_is_no_match(self) -> None:
        async def router(request):
            return {}

        assert await Resolver(normalize_router(router)).resolve(_request()) is NO_MATCH

    async def test_async_none_is_no_match(self) -> None:
        async def router(request):
            return None

        assert await Resolver(normalize_router(router)).resolve(_request()) is NO_MATCH

    async def test_url_string_result(self) -> None:
        outcome = await Resolver(normalize_router(lambda r: "https://localhost:6003")).resolve(
            _request()
        )
        assert outcome == Resolved(TARGET_C)

    async def test_object_result_keeps_protocol(self) -> None:
        def router(request):
            return {"host": "localhost", "port": 6003, "protocol": "https"}

        outcome = await Resolver(normalize_router(router)).resolve(_request())
        assert outcome == Resolved(TargetSpec("https", "localhost", 6003))

    async def test_sync_raise_is_failed_with_same_exception(self) -> None:
        error = RuntimeError("An error thrown in the router")

        def router(request):
            raise error

        outcome = await Resolver(normalize_router(router)).resolve(_request())
        assert isinstance(outcome, Failed)
        assert outcome.cause is error

    async def test_async_raise_is_failed_with_same_exception(self) -> None:
        error = LookupError("no upstream")

        async def router(request):
            await asyncio.sleep(0)
            raise error

        outcome = await Resolver(normalize_router(router)).resolve(_request())
        assert outcome == Failed(error)
        assert outcome.cause is error

    async def test_malformed_url_result_is_failed(self) -> None:
        outcome = await Resolver(normalize_router(lambda r: "nowhere")).resolve(_request())
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.cause, ValueError)

    async def test_wrong_result_type_is_failed(self) -> None:
        outcome = await Resolver(normalize_router(lambda r: 6003)).resolve(_request())
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.cause, TypeError)

    async def test_cancellation_propagates(self) -> None:
        started = asyncio.Event()
        release = asyncio.Event()
        finished: list[object] = []

        async def router(request):
            started.set()
            await release.wait()
            return TARGET_C

        resolver = Resolver(normalize_router(router))

        async def resolve() -> None:
            finished.append(await resolver.resolve(_request()))

        task = asyncio.create_task(resolve())
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        release.set()
        await asyncio.sleep(0)
        assert finished == []

    async def test_pending_router_does_not_block_others(self) -> None:
        release = anyio.Event()
        order: list[str] = []

        async def router(request):
            if request.path == "/slow":
                await release.wait()
                order.append("slow")
                return TARGET_B
            order.append("fast")
            return TARGET_C

        resolver = Resolver(normalize_router(router))
        results: dict[str, object] = {}

        async def run(path: str) -> None:
            results[path] = await resolver.resolve(_request(path))
            if path == "/fast":
                release.set()

        async with anyio.create_task_group() as tg:
            tg.start_soon(run, "/slow")
            tg.start_soon(run, "/fast")

        assert order == ["fast", "slow"]
        assert results == {"/slow": Resolved(TARGET_B), "/fast": Resolved(TARGET_C)}


class TestPropagate:
    def test_resolved(self) -> None:
        assert propagate(Resolved(TARGET_B)) is TARGET_B

    def test_no_match(self) -> None:
        assert propagate(NO_MATCH) is None

    def test_failed_reraises_original(self) -> None:
        error = RuntimeError("An error thrown in the router")
        with pytest.raises(RuntimeError) as excinfo:
            propagate(Failed(error))
        assert excinfo.value is error


def test_resolver_keeps_config() -> None:
    config = normalize_router("https://localhost:6003")
    assert Resolver(config).config is config

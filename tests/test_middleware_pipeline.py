import pytest

from rpcbridge.core.protocol import RpcRequest, RpcResponse
from rpcbridge.middleware import NEXT_CALLED_TWICE, PIPELINE_EXHAUSTED, MiddlewarePipeline, apply_to_methods
from rpcbridge.utils.exceptions import ErrorKind, RpcError


def _recording(log, name):
    async def _mw(_ctx, _req, next):
        log.append(f"enter {name}")
        response = await next()
        log.append(f"exit {name}")
        return response

    return _mw


def _terminal(log):
    async def _handler(_ctx, request, _next):
        log.append("handler")
        return RpcResponse(id=request.id, result="done")

    return _handler


@pytest.mark.asyncio
async def test_dispatch_order_entry_and_unwind():
    log = []
    pipeline = MiddlewarePipeline()
    for name in ("A", "B", "C"):
        pipeline.add(_recording(log, name))

    response = await pipeline.dispatch({}, RpcRequest(method="m", id=1), _terminal(log))

    assert response.result == "done"
    assert log == ["enter A", "enter B", "enter C", "handler", "exit C", "exit B", "exit A"]


@pytest.mark.asyncio
async def test_next_called_twice_is_internal_error():
    pipeline = MiddlewarePipeline()

    async def _greedy(_ctx, _req, next):
        await next()
        return await next()

    pipeline.add(_greedy)
    with pytest.raises(RpcError) as exc:
        await pipeline.dispatch({}, RpcRequest(method="m", id=1), _terminal([]))
    assert exc.value.kind is ErrorKind.INTERNAL
    assert exc.value.message == NEXT_CALLED_TWICE


@pytest.mark.asyncio
async def test_advancing_past_terminal_is_internal_error():
    async def _terminal_calls_next(_ctx, _req, next):
        return await next()

    with pytest.raises(RpcError) as exc:
        await MiddlewarePipeline().dispatch({}, RpcRequest(method="m", id=1), _terminal_calls_next)
    assert exc.value.message == PIPELINE_EXHAUSTED
    assert exc.value.code == -32000


@pytest.mark.asyncio
async def test_sync_middleware_and_short_circuit():
    log = []
    pipeline = MiddlewarePipeline()
    pipeline.add(lambda _ctx, req, _next: RpcResponse(id=req.id, result="cached"))
    pipeline.add(_recording(log, "never"))

    response = await pipeline.dispatch({}, RpcRequest(method="m", id=3), _terminal(log))

    assert response.result == "cached"
    assert log == []


@pytest.mark.asyncio
async def test_non_response_return_is_internal_error():
    pipeline = MiddlewarePipeline()
    pipeline.add(lambda _ctx, _req, _next: 42)
    with pytest.raises(RpcError) as exc:
        await pipeline.dispatch({}, RpcRequest(method="m", id=1), _terminal([]))
    assert exc.value.kind is ErrorKind.INTERNAL


@pytest.mark.asyncio
async def test_disposer_removes_exactly_one_entry():
    log = []
    pipeline = MiddlewarePipeline()
    mw = _recording(log, "X")
    pipeline.add(mw)
    dispose_second = pipeline.add(mw)
    assert len(pipeline) == 2

    dispose_second()
    dispose_second()
    assert len(pipeline) == 1

    await pipeline.dispatch({}, RpcRequest(method="m", id=1), _terminal(log))
    assert log == ["enter X", "handler", "exit X"]


@pytest.mark.asyncio
async def test_removal_during_dispatch_only_affects_later_dispatches():
    log = []
    pipeline = MiddlewarePipeline()
    disposers = {}

    async def _remover(_ctx, _req, next):
        log.append("remover")
        disposers["B"]()
        return await next()

    pipeline.add(_remover)
    disposers["B"] = pipeline.add(_recording(log, "B"))

    await pipeline.dispatch({}, RpcRequest(method="m", id=1), _terminal(log))
    assert log == ["remover", "enter B", "handler", "exit B"]

    log.clear()
    await pipeline.dispatch({}, RpcRequest(method="m", id=2), _terminal(log))
    assert log == ["remover", "handler"]


@pytest.mark.asyncio
async def test_apply_to_methods_scopes_middleware():
    seen = []

    async def _mw(_ctx, req, next):
        seen.append(req.method)
        return await next()

    pipeline = MiddlewarePipeline()
    pipeline.add(apply_to_methods(["add", "concat"], _mw))
    for method in ("add", "concat", "other"):
        await pipeline.dispatch({}, RpcRequest(method=method, id=1), _terminal([]))
    assert seen == ["add", "concat"]


@pytest.mark.asyncio
async def test_apply_to_methods_wildcard_and_single_name():
    seen = []

    def _mw(_ctx, req, next):
        seen.append(req.method)
        return next()

    everything = MiddlewarePipeline()
    everything.add(apply_to_methods("*", _mw))
    await everything.dispatch({}, RpcRequest(method="a", id=1), _terminal([]))
    await everything.dispatch({}, RpcRequest(method="b", id=2), _terminal([]))

    single = MiddlewarePipeline()
    single.add(apply_to_methods("c", _mw))
    await single.dispatch({}, RpcRequest(method="c", id=3), _terminal([]))
    await single.dispatch({}, RpcRequest(method="cc", id=4), _terminal([]))

    assert seen == ["a", "b", "c"]


def test_add_rejects_non_callable():
    with pytest.raises(TypeError):
        MiddlewarePipeline().add("nope")

import asyncio

import pytest

from hxwire.runtime.multiplexer import Multiplexer, Subscription


async def collect(subscription, count):
    received = []
    for _ in range(count):
        received.append(await subscription.receive())
    return received


@pytest.mark.asyncio
async def test_subscription_send_and_receive():
    sub = Subscription()
    assert await sub.send("a")
    assert await sub.receive() == "a"


@pytest.mark.asyncio
async def test_cancelled_subscription_rejects_events():
    sub = Subscription()
    sub.cancel()
    assert sub.cancelled
    assert not await sub.send("a")
    assert await sub.receive() is None


@pytest.mark.asyncio
async def test_queued_event_survives_cancel():
    sub = Subscription()
    await sub.send("last")
    sub.cancel()
    assert await sub.receive() == "last"
    assert await sub.receive() is None


@pytest.mark.asyncio
async def test_blocked_send_gives_up_on_cancel():
    sub = Subscription()
    await sub.send("first")
    pending = asyncio.ensure_future(sub.send("second"))
    await asyncio.sleep(0)
    assert not pending.done()
    sub.cancel()
    assert await asyncio.wait_for(pending, timeout=1) is False


@pytest.mark.asyncio
async def test_cancelled_reader_leaves_no_waiters():
    sub = Subscription()
    reader = asyncio.ensure_future(sub.receive())
    await asyncio.sleep(0)
    reader.cancel()
    with pytest.raises(asyncio.CancelledError):
        await reader
    await asyncio.sleep(0)

    current = asyncio.current_task()
    assert [task for task in asyncio.all_tasks() if task is not current] == []
    assert await sub.send("next")
    assert await asyncio.wait_for(sub.receive(), timeout=1) == "next"


@pytest.mark.asyncio
async def test_fan_out_in_order():
    mux = Multiplexer()
    live = [await mux.subscribe(Subscription()) for _ in range(3)]
    dead = await mux.subscribe(Subscription())
    dead.cancel()

    consumers = [asyncio.ensure_future(collect(sub, 5)) for sub in live]
    for i in range(5):
        await asyncio.wait_for(mux.send(i), timeout=1)
    results = await asyncio.wait_for(asyncio.gather(*consumers), timeout=1)

    assert results == [[0, 1, 2, 3, 4]] * 3
    assert dead not in mux.subscriptions
    assert len(mux.subscriptions) == 3


@pytest.mark.asyncio
async def test_last_event_replayed_to_new_subscriber():
    mux = Multiplexer()
    await mux.send("hello")
    sub = await mux.subscribe(Subscription())
    assert await asyncio.wait_for(sub.receive(), timeout=1) == "hello"


@pytest.mark.asyncio
async def test_start_forwards_events():
    mux = Multiplexer()
    sub = await mux.subscribe(Subscription())
    source = mux.start()
    await source.send("tick")
    assert await asyncio.wait_for(sub.receive(), timeout=1) == "tick"
    source.cancel()
    await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_generator_subscribes_stream():
    mux = Multiplexer()
    stream = Subscription()
    task = asyncio.ensure_future(mux.generator()(stream))
    await asyncio.sleep(0)
    assert mux.subscriptions == [stream]

    await mux.send("update")
    assert await asyncio.wait_for(stream.receive(), timeout=1) == "update"

    stream.cancel()
    await asyncio.wait_for(task, timeout=1)
    await mux.send("after")
    assert mux.subscriptions == []

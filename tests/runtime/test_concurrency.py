# topmark:header:start
#
#   project      : Condor
#   file         : test_concurrency.py
#   file_relpath : tests/runtime/test_concurrency.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Handler stacks are private to each thread and each asyncio task."""

from __future__ import annotations

import asyncio
import threading

from condor.condition import MESSAGE, Condition
from condor.runtime import CallingScope, muffle_message, signal_message
from condor.runtime.stack import handler_stack
from tests.conftest import mark_runtime


def _labels() -> list[str]:
    return [frame.label for frame in handler_stack.frames()]


@mark_runtime
def test_threads_do_not_share_handler_frames() -> None:
    """Frames pushed in a worker thread never show up elsewhere."""
    barrier = threading.Barrier(3)
    seen: dict[str, list[str]] = {}
    heard: dict[str, list[str]] = {"a": [], "b": []}

    def worker(name: str) -> None:
        def on_message(condition: Condition) -> None:
            heard[name].append(condition.message())
            muffle_message()

        with CallingScope([(MESSAGE, on_message)], label=f"worker-{name}"):
            # Both workers hold their scope at the same time.
            barrier.wait(timeout=5)
            signal_message(f"from {name}")
            seen[name] = _labels()
            barrier.wait(timeout=5)

    with CallingScope(label="main"):
        before: list[str] = _labels()
        threads = [threading.Thread(target=worker, args=(n,)) for n in ("a", "b")]
        for thread in threads:
            thread.start()
        barrier.wait(timeout=5)
        barrier.wait(timeout=5)
        for thread in threads:
            thread.join(timeout=5)
        assert _labels() == before

    assert heard == {"a": ["from a"], "b": ["from b"]}
    assert seen["a"][-1] == "worker-a"
    assert "worker-b" not in seen["a"]
    assert seen["b"][-1] == "worker-b"
    assert "worker-a" not in seen["b"]


@mark_runtime
def test_asyncio_tasks_keep_their_own_frames() -> None:
    """Interleaved tasks each see only the frames they installed."""
    seen: dict[int, list[str]] = {}

    async def task(index: int) -> None:
        with CallingScope(label=f"task-{index}"):
            await asyncio.sleep(0)
            seen[index] = _labels()
            await asyncio.sleep(0)

    async def main() -> None:
        await asyncio.gather(*(task(i) for i in range(3)))

    asyncio.run(main())

    assert seen == {0: ["task-0"], 1: ["task-1"], 2: ["task-2"]}
    assert _labels() == []


@mark_runtime
def test_one_calling_scope_entered_by_overlapping_tasks() -> None:
    """A shared scope instance can be held by several tasks that leave in any order."""
    heard: list[str] = []

    def on_message(condition: Condition) -> None:
        heard.append(condition.message())
        muffle_message()

    shared = CallingScope([(MESSAGE, on_message)], label="shared")

    async def task(name: str, delay: float) -> list[str]:
        with shared:
            await asyncio.sleep(delay)
            signal_message(name)
            return _labels()

    async def main() -> list[list[str]]:
        # "fast" enters first and leaves while "slow" still holds the scope.
        return await asyncio.gather(task("fast", 0), task("slow", 0.02))

    labels: list[list[str]] = asyncio.run(main())

    assert labels == [["shared"], ["shared"]]
    assert heard == ["fast", "slow"]
    assert _labels() == []


@mark_runtime
def test_one_calling_scope_entered_by_two_threads() -> None:
    """Threads sharing a scope instance each pop only their own frame."""
    first_in, second_in, first_out = threading.Event(), threading.Event(), threading.Event()
    errors: list[BaseException] = []
    shared = CallingScope(label="shared")

    def first() -> None:
        try:
            with shared:
                first_in.set()
                second_in.wait(timeout=5)
        except BaseException as exc:  # noqa: BLE001
            errors.append(exc)
        finally:
            first_out.set()

    def second() -> None:
        first_in.wait(timeout=5)
        try:
            with shared:
                second_in.set()
                first_out.wait(timeout=5)
        except BaseException as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=first), threading.Thread(target=second)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert errors == []
    assert _labels() == []

import asyncio

import pytest

from sop_assistant.application.fanout import gather_or_cancel
from sop_assistant.domain.errors import EmbeddingUnavailable


@pytest.mark.asyncio
async def test_results_keep_input_order():
    async def delayed(value: int, delay: float) -> int:
        await asyncio.sleep(delay)
        return value

    assert await gather_or_cancel([delayed(1, 0.02), delayed(2, 0.0), delayed(3, 0.01)]) == [1, 2, 3]


@pytest.mark.asyncio
async def test_first_failure_cancels_and_awaits_siblings():
    cancelled: list[str] = []
    finished: list[str] = []

    async def fail() -> None:
        await asyncio.sleep(0)
        raise EmbeddingUnavailable("all embedding transports failed")

    async def slow(name: str) -> None:
        try:
            await asyncio.sleep(0.3)
        except asyncio.CancelledError:
            cancelled.append(name)
            raise
        finished.append(name)

    with pytest.raises(EmbeddingUnavailable):
        await gather_or_cancel([fail(), slow("a"), slow("b")])

    assert sorted(cancelled) == ["a", "b"]
    pending = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
    assert pending == []
    await asyncio.sleep(0.35)
    assert finished == []

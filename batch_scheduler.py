"""
Batch Scheduler - scoort documenten in waves van batch_size.

Per wave worden maximaal batch_size requests tegelijk verstuurd; de
volgende wave start pas als de hele vorige klaar is. Zo krijgt de
backend nooit meer dan batch_size openstaande requests van één call.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence, Tuple

from rerank_schemas import Document, ScoreResult

logger = logging.getLogger(__name__)

ScoreFunction = Callable[[Document], Awaitable[float]]


async def _score_one(index: int, document: Document, score_fn: ScoreFunction) -> ScoreResult:
    score = await score_fn(document)
    return ScoreResult(index=index, score=score)


async def _run_wave(wave: Sequence[Tuple[int, Document]], score_fn: ScoreFunction) -> List[ScoreResult]:
    tasks = [asyncio.ensure_future(_score_one(i, document, score_fn)) for i, document in wave]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        # Geen requests meer na een gefaalde call
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def score_in_waves(
    documents: Sequence[Document],
    score_fn: ScoreFunction,
    batch_size: int,
) -> List[ScoreResult]:
    """
    Scoor alle documenten, maximaal batch_size tegelijk.

    Args:
        documents: Documenten in input volgorde
        score_fn: Async functie die één document scoort
        batch_size: Maximaal aantal gelijktijdige requests

    Returns:
        ScoreResults gesorteerd op index (input volgorde), ongeacht
        in welke volgorde de requests klaar waren

    Raises:
        De eerste fout van score_fn; er is geen partial result. Nog lopende
        requests uit dezelfde wave worden eerst geannuleerd.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    results: List[ScoreResult] = []
    pending = []
    total = len(documents)

    for i, document in enumerate(documents):
        pending.append((i, document))

        if len(pending) >= batch_size or i == total - 1:
            wave = await _run_wave(pending, score_fn)
            results.extend(wave)
            pending = []
            logger.debug(f"[Batch] Wave complete: {len(results)}/{total} documents scored")

    results.sort(key=lambda r: r.index)
    return results

"""
Batch comparison over a directory of images.

Two modes share one pipeline:

    all-pairs   every unordered pair of distinct candidates, n*(n-1)/2 scores
    match       one target image against every candidate

Each candidate is decoded and described exactly once, on a bounded thread
pool (fan-out). Descriptors are collected in the calling thread (fan-in),
then pairs are scored and the report is sorted once at the end, so no
mutable state is shared between workers.

A candidate that fails to decode is recorded as a skipped entry and the
run carries on. Directory errors and configuration mismatches abort it.
"""

import os
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .comparator import PairComparator
from .config import DEFAULT_EXTENSIONS, DEFAULT_WORKERS
from .errors import RECOVERABLE_ERRORS
from .image_io import list_candidates
from .models import ImageDescriptor, RankedReport, SkippedEntry
from .scoring import rank_scores

logger = logging.getLogger(__name__)

# Log describe progress every N images
PROGRESS_EVERY = 100


class BatchOrchestrator:
    """
    Run all-pairs and one-vs-many comparisons over a directory.

    Args:
        comparator: PairComparator used for every decode/describe/score.
        workers: Maximum number of worker threads; 1 runs inline.
        recursive: Descend into subdirectories when listing candidates.
        lister: Callable(directory, extensions, recursive) returning the
            candidate paths, raising DirectoryError on failure.
        cancel_event: When set, no further candidates are scheduled and the
            report is built from what was already described.
    """

    def __init__(self,
                 comparator: PairComparator = None,
                 workers: int = DEFAULT_WORKERS,
                 recursive: bool = True,
                 lister: Callable[..., List[str]] = list_candidates,
                 cancel_event: Optional[threading.Event] = None):
        self.comparator = comparator or PairComparator()
        self.workers = max(1, int(workers))
        self.recursive = recursive
        self.lister = lister
        self.cancel_event = cancel_event or threading.Event()

    def cancel(self) -> None:
        """Stop scheduling new work; in-flight descriptions still finish."""
        self.cancel_event.set()

    def all_pairs(self, directory: str,
                  extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> RankedReport:
        """
        Score every unordered pair of images found in ``directory``.

        Fewer than two usable images yields an empty report.

        Raises:
            DirectoryError: If the directory can't be listed.
        """
        sources = self.lister(directory, extensions, self.recursive)
        described, skipped, interrupted = self._describe_all(sources)

        items = list(described.items())
        scores = []
        for i, (source_a, desc_a) in enumerate(items):
            for source_b, desc_b in items[i + 1:]:
                scores.append(self.comparator.score(desc_a, desc_b, source_a, source_b))

        logger.info(
            f"Scored {len(scores)} pairs from {len(items)} images in {directory}, "
            f"{len(skipped)} skipped"
        )
        return self._report(scores, skipped, interrupted, len(sources))

    def match(self, target: str, directory: str,
              extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> RankedReport:
        """
        Score ``target`` against every image found in ``directory``.

        The target itself is left out when it lives in the directory
        (compared by resolved path).

        Raises:
            DirectoryError: If the directory can't be listed.
            DecodeError, InvalidBufferError: If the target can't be used;
                without it there is nothing to compare.
        """
        sources = self.lister(directory, extensions, self.recursive)
        target_desc = self.comparator.describe(target)

        target_identity = os.path.realpath(target)
        candidates = [s for s in sources if os.path.realpath(s) != target_identity]
        if len(candidates) != len(sources):
            logger.debug(f"Excluded target {target} from its own candidate list")

        described, skipped, interrupted = self._describe_all(candidates)
        scores = [
            self.comparator.score(target_desc, desc, target, source)
            for source, desc in described.items()
        ]

        logger.info(
            f"Matched {target} against {len(scores)} images in {directory}, "
            f"{len(skipped)} skipped"
        )
        return self._report(scores, skipped, interrupted, len(candidates))

    def _describe_all(self, sources: List[str]
                      ) -> Tuple[Dict[str, ImageDescriptor], List[SkippedEntry], bool]:
        """
        Describe every source once, fanning out over the worker pool.

        Returns:
            Tuple of (descriptors keyed by source in input order, skipped
            entries, whether the run was interrupted).
        """
        results: Dict[str, ImageDescriptor] = {}
        skipped: List[SkippedEntry] = []
        interrupted = False

        def _collect(source, future_or_call):
            try:
                results[source] = future_or_call()
            except RECOVERABLE_ERRORS as e:
                logger.warning(f"Skipping {source}: {e}")
                skipped.append(SkippedEntry(source=source, reason=f"{type(e).__name__}: {e}"))
            if (len(results) + len(skipped)) % PROGRESS_EVERY == 0:
                logger.info(f"Described {len(results) + len(skipped)}/{len(sources)} images")

        if self.workers == 1 or len(sources) < 2:
            try:
                for source in sources:
                    if self.cancel_event.is_set():
                        interrupted = True
                        break
                    _collect(source, lambda: self.comparator.describe(source))
            except KeyboardInterrupt:
                logger.warning("Interrupted, reporting partial results")
                interrupted = True
        else:
            executor = ThreadPoolExecutor(max_workers=min(self.workers, len(sources)))
            futures = {executor.submit(self.comparator.describe, s): s for s in sources}
            harvested = set()
            try:
                for future in as_completed(futures):
                    harvested.add(future)
                    _collect(futures[future], future.result)
                    if self.cancel_event.is_set():
                        interrupted = True
                        break
            except KeyboardInterrupt:
                logger.warning("Interrupted, reporting partial results")
                interrupted = True
            finally:
                executor.shutdown(wait=True, cancel_futures=interrupted)

            # Work already in flight when the run was cancelled still counts
            for future, source in futures.items():
                if future not in harvested and future.done() and not future.cancelled():
                    _collect(source, future.result)

        interrupted = interrupted and len(results) + len(skipped) < len(sources)
        if interrupted:
            logger.warning(
                f"Stopped after {len(results) + len(skipped)}/{len(sources)} images"
            )

        ordered = {source: results[source] for source in sources if source in results}
        return ordered, skipped, interrupted

    @staticmethod
    def _report(scores, skipped, interrupted, candidates) -> RankedReport:
        return RankedReport(
            entries=rank_scores(scores),
            skipped=sorted(skipped, key=lambda entry: entry.source),
            interrupted=interrupted,
            candidates=candidates,
        )

# ABOUTME: High-level service API for building the dictionary
# ABOUTME: Reads the index, extracts pages on a thread pool, renders and writes Dictionary.xml

import os
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from pokedict.config import Config, get_config
from pokedict.core.models import DexId, EntryRecord, Index, UnknownEntryError
from pokedict.extraction.base import ExtractionError, Fetcher, ImageCache
from pokedict.extraction.entry import EntryExtractor
from pokedict.extraction.index import read_index
from pokedict.rendering.dictionary import render_dictionary
from pokedict.services.fetcher import Fetcher as HttpFetcher
from pokedict.services.image_cache import ImageCache as DiskImageCache
from pokedict.utils.logging import failure_fields, get_logger, with_pipeline_context

ProgressCallback = Callable[[str, int, int], None]


class BuildError(Exception):
    """Raised when entries failed and the batch was not allowed to continue."""

    def __init__(self, failures: dict[DexId, ExtractionError]):
        if len(failures) == 1:
            ((dex_id, error),) = failures.items()
            message = f"extraction failed for {dex_id}: {error}"
        else:
            message = f"extraction failed for {len(failures)} entries: {', '.join(str(d) for d in sorted(failures))}"
        super().__init__(message)
        self.failures = failures


@dataclass(slots=True)
class BatchResult:
    entries: dict[DexId, EntryRecord] = field(default_factory=dict)
    failures: dict[DexId, ExtractionError] = field(default_factory=dict)


@dataclass(slots=True)
class BuildSummary:
    output_path: Path
    selected: int
    entries_written: int
    failures: dict[DexId, ExtractionError]
    duration_seconds: float


class DictionaryBuildService:
    """Service for turning Bulbapedia pages into the dictionary document."""

    def __init__(
        self,
        config: Config | None = None,
        fetcher: Fetcher | None = None,
        image_cache: ImageCache | None = None,
    ):
        self.config = config or get_config()
        self._owned_fetcher: HttpFetcher | None = None
        if fetcher is None:
            fetcher = self._owned_fetcher = HttpFetcher(
                self.config.fetch_cache_dir,
                request_delay=self.config.request_delay,
                max_attempts=self.config.fetch_attempts,
            )
        self.fetcher = fetcher
        self.image_cache = image_cache or DiskImageCache(self.config.image_dir, fetcher)
        self._index: Index | None = None
        self.logger = get_logger(__name__)

    def read_index(self) -> Index:
        """Read the Pokédex index once per service."""
        if self._index is None:
            self._index = read_index(self.fetcher)
        return self._index

    def extract_entry(self, dex_id: DexId) -> EntryRecord:
        """Extract a single entry by dex number."""
        index = self.read_index()
        if dex_id not in index.pokemon_pages:
            raise UnknownEntryError(f"{dex_id} is not in the index")
        extractor = EntryExtractor(self.fetcher, index, self.image_cache, self.config)
        return extractor.extract(index.pokemon_pages[dex_id])

    def extract_entries(
        self,
        index: Index,
        dex_ids: Sequence[DexId],
        progress_callback: ProgressCallback | None = None,
    ) -> BatchResult:
        """Extract the given entries in parallel.

        Without ``keep_going`` the first failure cancels the pages not started yet
        and raises BuildError; otherwise every page is attempted and failures are
        returned alongside the entries.
        """
        unknown = [str(dex_id) for dex_id in dex_ids if dex_id not in index.pokemon_pages]
        if unknown:
            raise UnknownEntryError(f"dex ids not in the index: {', '.join(unknown)}")

        extractor = EntryExtractor(self.fetcher, index, self.image_cache, self.config)
        max_workers = self.config.max_workers or os.cpu_count() or 1
        total = len(dex_ids)
        result = BatchResult()

        self.logger.info(
            "Starting batch extraction",
            entry_count=total,
            max_workers=max_workers,
            keep_going=self.config.keep_going,
        )

        pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="extract")
        try:
            futures: dict[Future[EntryRecord], DexId] = {
                pool.submit(extractor.extract, index.pokemon_pages[dex_id]): dex_id for dex_id in dex_ids
            }
            for future in as_completed(futures):
                dex_id = futures[future]
                try:
                    result.entries[dex_id] = future.result()
                except ExtractionError as exc:
                    result.failures[dex_id] = exc
                    self.logger.error(
                        "Failed to extract entry",
                        dex_id=str(dex_id),
                        url=index.pokemon_pages[dex_id],
                        **failure_fields(exc),
                    )
                    if not self.config.keep_going:
                        raise BuildError(result.failures) from exc

                if progress_callback:
                    progress_callback(str(dex_id), len(result.entries) + len(result.failures), total)
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

        result.entries = dict(sorted(result.entries.items()))
        self.logger.info(
            "Batch extraction completed",
            total=total,
            successful=len(result.entries),
            failed=len(result.failures),
        )
        return result

    def build(
        self,
        generations: Sequence[int] | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> BuildSummary:
        """Read the index, extract the selected generations, and write the dictionary.

        Raises:
            BuildError: A page failed and ``keep_going`` is off
        """
        start_time = time.time()
        with with_pipeline_context("build", generations=list(generations or [])) as log:
            index = self.read_index()
            dex_ids = index.select(list(generations) if generations else None)
            log.info("Selected entries", entry_count=len(dex_ids))

            batch = self.extract_entries(index, dex_ids, progress_callback)
            document = render_dictionary(batch.entries)

            output_path = self.config.output_path
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(document, encoding="utf-8")

            duration = time.time() - start_time
            log.info(
                "Dictionary written",
                output_path=str(output_path),
                entries=len(batch.entries),
                failed=len(batch.failures),
                duration_seconds=round(duration, 2),
            )

        return BuildSummary(
            output_path=output_path,
            selected=len(dex_ids),
            entries_written=len(batch.entries),
            failures=batch.failures,
            duration_seconds=duration,
        )

    def close(self) -> None:
        if self._owned_fetcher is not None:
            self._owned_fetcher.close()

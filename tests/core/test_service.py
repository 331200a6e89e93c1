# ABOUTME: Tests for the dictionary build service
# ABOUTME: Runs whole builds against in-memory fetcher and image cache fakes

import pytest

from pokedict.core.models import DexId, UnknownEntryError
from pokedict.core.service import BuildError, DictionaryBuildService
from pokedict.extraction.base import ParseFailure, StructuralMismatch
from pokedict.extraction.index import INDEX_URL

BASE = "https://bulbapedia.bulbagarden.net"
SQUIRTLE_URL = f"{BASE}/wiki/Squirtle_(Pok%C3%A9mon)"
WARTORTLE_URL = f"{BASE}/wiki/Wartortle_(Pok%C3%A9mon)"


def _list_page() -> str:
    rows = "".join(
        f'<tr><td>#{number:04d}</td><td><a href="/wiki/{name}_(Pok%C3%A9mon)" title="{name}">{name}</a></td></tr>'
        for number, name in ((7, "Squirtle"), (8, "Wartortle"))
    )
    return f"<html><body><h3>Generation I</h3><table>{rows}</table></body></html>"


@pytest.fixture
def pages(page_builder):
    return {
        INDEX_URL: _list_page().encode("utf-8"),
        SQUIRTLE_URL: page_builder().encode("utf-8"),
        WARTORTLE_URL: page_builder(name="Wartortle", dex="#0008").encode("utf-8"),
    }


@pytest.fixture
def make_service(test_config, fake_fetcher_factory, image_cache):
    def _make(pages, **config_updates):
        config = test_config.model_copy(update={"max_workers": 2, **config_updates})
        return DictionaryBuildService(config, fetcher=fake_fetcher_factory(pages), image_cache=image_cache)

    return _make


class TestExtractEntries:
    """Parallel extraction of a batch."""

    def test_all_entries_in_dex_order(self, make_service, pages):
        service = make_service(pages)
        index = service.read_index()

        result = service.extract_entries(index, [DexId(8), DexId(7)])

        assert list(result.entries) == [DexId(7), DexId(8)]
        assert result.entries[DexId(8)].name == "Wartortle"
        assert result.failures == {}

    def test_progress_reported_per_entry(self, make_service, pages):
        service = make_service(pages)
        calls = []

        service.extract_entries(service.read_index(), [DexId(7), DexId(8)], lambda *args: calls.append(args))

        assert len(calls) == 2
        assert calls[-1][1:] == (2, 2)
        assert {label for label, _, _ in calls} == {"#0007", "#0008"}

    def test_first_failure_raises(self, make_service, pages, page_builder):
        pages[WARTORTLE_URL] = page_builder(info_box_class="wikitable").encode("utf-8")
        service = make_service(pages)

        with pytest.raises(BuildError) as exc_info:
            service.extract_entries(service.read_index(), [DexId(7), DexId(8)])

        assert list(exc_info.value.failures) == [DexId(8)]
        assert isinstance(exc_info.value.failures[DexId(8)], StructuralMismatch)
        assert "#0008" in str(exc_info.value)

    def test_keep_going_collects_failures(self, make_service, pages, page_builder):
        pages[WARTORTLE_URL] = page_builder(info_box_class="wikitable").encode("utf-8")
        service = make_service(pages, keep_going=True)

        result = service.extract_entries(service.read_index(), [DexId(7), DexId(8)])

        assert list(result.entries) == [DexId(7)]
        assert list(result.failures) == [DexId(8)]

    def test_keep_going_survives_malformed_link(self, make_service, pages, page_builder):
        pages[SQUIRTLE_URL] = page_builder(summary='<p>See <a href="http://[broken/x">this</a>.</p>').encode("utf-8")
        service = make_service(pages, keep_going=True)

        result = service.extract_entries(service.read_index(), [DexId(7), DexId(8)])

        assert list(result.entries) == [DexId(8)]
        assert list(result.failures) == [DexId(7)]
        failure = result.failures[DexId(7)]
        assert isinstance(failure, ParseFailure)
        assert failure.stages == ["article body"]
        assert failure.raw == "http://[broken/x"

    def test_unknown_dex_id(self, make_service, pages):
        service = make_service(pages)

        with pytest.raises(UnknownEntryError):
            service.extract_entries(service.read_index(), [DexId(9)])


class TestBuild:
    """End-to-end build into Dictionary.xml."""

    def test_writes_dictionary(self, make_service, pages, test_config):
        service = make_service(pages)

        summary = service.build([1])

        output = test_config.output_path
        assert summary.output_path == output
        assert summary.selected == 2
        assert summary.entries_written == 2
        text = output.read_text(encoding="utf-8")
        assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert text.index('id="pokemon-7"') < text.index('id="pokemon-8"')
        assert text.endswith("</d:dictionary>")

    def test_index_read_once(self, make_service, pages):
        service = make_service(pages)

        service.build()
        service.extract_entry(DexId(7))

        assert [url for url, _ in service.fetcher.calls].count(INDEX_URL) == 1

    def test_keep_going_writes_partial_dictionary(self, make_service, pages, page_builder, test_config):
        pages[WARTORTLE_URL] = page_builder(info_box_class="wikitable").encode("utf-8")
        service = make_service(pages, keep_going=True)

        summary = service.build()

        assert summary.entries_written == 1
        assert list(summary.failures) == [DexId(8)]
        assert 'id="pokemon-8"' not in test_config.output_path.read_text(encoding="utf-8")

    def test_extract_single_entry(self, make_service, pages):
        entry = make_service(pages).extract_entry(DexId(8))

        assert entry.dex_id == DexId(8)
        assert entry.url == WARTORTLE_URL

    def test_extract_single_unknown_entry(self, make_service, pages):
        with pytest.raises(UnknownEntryError):
            make_service(pages).extract_entry(DexId(1))

# ABOUTME: Shared fixtures for the test suite
# ABOUTME: In-memory fetcher and image cache fakes plus a builder for synthetic Pokémon pages

import pytest

from pokedict.config import Config
from pokedict.core.models import DexId, Index

BASE = "https://bulbapedia.bulbagarden.net"
SQUIRTLE_URL = f"{BASE}/wiki/Squirtle_(Pok%C3%A9mon)"
WARTORTLE_URL = f"{BASE}/wiki/Wartortle_(Pok%C3%A9mon)"
THUMB = "https://archives.bulbagarden.net/media/upload/thumb/5/54/0007Squirtle.png/250px-0007Squirtle.png"


class FakeFetcher:
    """Serves canned bodies and records every request."""

    def __init__(self, pages: dict[str, bytes] | None = None):
        self.pages = dict(pages or {})
        self.calls: list[tuple[str, bool]] = []

    def get(self, url: str, document: bool) -> bytes:
        self.calls.append((url, document))
        if url not in self.pages:
            raise LookupError(f"no canned response for {url}")
        return self.pages[url]


class FakeImageCache:
    """Uses the last path segment of the URL as the cache identifier."""

    def __init__(self, failing: set[str] | None = None):
        self.failing = failing or set()
        self.calls: list[str] = []

    def get(self, url: str) -> str:
        self.calls.append(url)
        if url in self.failing:
            raise OSError(f"cannot store {url}")
        return url.rsplit("/", 1)[-1]


def gallery_cell(src: str = THUMB, alt: str = "Squirtle", width: str = "250", caption: str | None = None, style: str = "") -> str:
    style_attr = f' style="{style}"' if style else ""
    small = f"<small>{caption}</small>" if caption is not None else ""
    return (
        f"<td{style_attr}>"
        f'<a href="/wiki/File:{alt}.png" class="image"><img alt="{alt}" src="{src}" width="{width}" height="{width}"></a>'
        f"{small}</td>"
    )


def build_page(
    name: str = "Squirtle",
    dex: str = "#0007",
    categories: str = "Tiny Turtle Pokémon",
    gallery_rows: list[str] | None = None,
    info_rows: list[str] | None = None,
    summary: str | None = None,
    body: str | None = None,
    info_box_class: str = "roundy",
    info_box_style: str = "background: #6890F0; border: 2px solid #4A6FB8; padding: 2px; color: red",
    header: str | None = None,
) -> str:
    """Markup shaped like a Bulbapedia Pokémon article, without inter-tag whitespace."""
    if gallery_rows is None:
        gallery_rows = [f"<tr>{gallery_cell()}</tr>"]
    if info_rows is None:
        info_rows = [
            '<tr><td><b>Type</b> <a href="/wiki/Water_(type)" title="Water (type)">Water</a></td></tr>',
            "<tr><td><b>Abilities</b> Torrent</td></tr>",
            "<tr><td><b>Gender ratio</b> 87.5% male</td></tr>",
            "<tr><td><b>Egg Groups</b> Monster and Water 1</td></tr>",
        ]
    if summary is None:
        summary = (
            "<p><b>Squirtle</b> is a Water-type Pokémon. It evolves into "
            '<a href="/wiki/Wartortle_(Pok%C3%A9mon)" title="Wartortle (Pokémon)">Wartortle</a>.'
            '<sup class="reference"><a href="#cite_note-1">[1]</a></sup></p>'
        )
    if body is None:
        body = "<h2>Biology</h2><p>Squirtle is a small turtle.</p><h2>Game data</h2><p>Stats follow.</p>"
    if header is None:
        name_box = (
            "<table><tr>"
            f'<td><big><big><b>{name}</b></big></big><br><a href="/wiki/Pok%C3%A9mon_category" title="Pokémon category">'
            f'<span class="explain">{categories}</span></a></td>'
            '<td><span lang="ja">ゼニガメ</span><br><i>Zenigame</i></td>'
            "</tr></table>"
        )
        dex_box = f'<a href="/wiki/List_of_Pok%C3%A9mon_by_National_Pok%C3%A9dex_number" title="List"><span>{dex}</span></a>'
        header = (
            '<tr><td colspan="2"><table>'
            f"<tr><td>{name_box}</td><td>{dex_box}</td></tr>"
            f'<tr><td colspan="2"><table>{"".join(gallery_rows)}</table></td></tr>'
            "</table></td></tr>"
        )

    return (
        "<!DOCTYPE html><html><head><title>Squirtle</title></head><body>"
        '<div id="mw-content-text"><div class="mw-parser-output">'
        '<table class="navigation"><tr><td>#0006 Charizard</td><td>#0008 Wartortle</td></tr></table>'
        f'<table class="{info_box_class}" style="{info_box_style}">{header}{"".join(info_rows)}</table>'
        f'{summary}<div id="toc"><h2>Contents</h2></div>{body}'
        "</div></div></body></html>"
    )


@pytest.fixture
def page_builder():
    return build_page


@pytest.fixture
def gallery_cell_builder():
    return gallery_cell


@pytest.fixture
def sample_index() -> Index:
    return Index(
        pokemon_pages={DexId(7): SQUIRTLE_URL, DexId(8): WARTORTLE_URL},
        generations=[[DexId(7), DexId(8)]],
    )


@pytest.fixture
def image_cache() -> FakeImageCache:
    return FakeImageCache()


@pytest.fixture
def fake_fetcher_factory():
    return FakeFetcher


@pytest.fixture
def test_config(tmp_path) -> Config:
    return Config(
        _env_file=None,
        data_dir=tmp_path / "data",
        output_path=tmp_path / "ddk" / "Dictionary.xml",
        max_body_sections=1,
        request_delay=0.0,
    )

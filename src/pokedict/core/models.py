# ABOUTME: Domain models for the dictionary build: dex numbers, entry records, and the index
# ABOUTME: Records are created once per page and never mutated afterwards

from dataclasses import dataclass
from functools import cached_property
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEX_ID_MARKER = "#"
DEX_ID_WIDTH = 4


class UnknownGenerationError(ValueError):
    """Raised when a selection names a generation the index does not have."""

    pass


class UnknownEntryError(ValueError):
    """Raised when a dex number is not in the index."""

    pass


@dataclass(frozen=True, order=True)
class DexId:
    """A National Pokédex number. Strictly positive, formatted as ``#0025``."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"dex id must be an int, got {type(self.value).__name__}")
        if self.value < 1:
            raise ValueError(f"dex id must be positive, got {self.value}")

    @classmethod
    def parse(cls, raw: str) -> Self:
        """Parse ``"#0025"`` or ``"25"``. Raises ValueError on anything else."""
        text = raw.strip()
        if text.startswith(DEX_ID_MARKER):
            text = text[len(DEX_ID_MARKER) :]
        if not text.isdigit():
            raise ValueError(f"not a dex id: {raw!r}")
        return cls(int(text))

    def format(self) -> str:
        return f"{DEX_ID_MARKER}{self.value:0{DEX_ID_WIDTH}d}"

    def predecessor(self) -> Self | None:
        if self.value == 1:
            return None
        return type(self)(self.value - 1)

    def successor(self) -> Self:
        return type(self)(self.value + 1)

    def __str__(self) -> str:
        return self.format()


class EntryImage(BaseModel):
    """One gallery image of an entry."""

    model_config = ConfigDict(frozen=True)

    href: str = Field(description="Resolved href of the link wrapping the image")
    alt: str = Field(description="Alt text of the image")
    width: int = Field(description="Declared display width in pixels")
    src: str = Field(description="Cache-relative image path")
    caption_text: str | None = Field(default=None, description="Caption as plain text")
    caption_html: str | None = Field(default=None, description="Caption as XHTML fragment")
    flex: bool = Field(default=False, description="Shared a gallery row with at least one sibling image")


class EntryRecord(BaseModel):
    """Structured extraction result for one Pokémon page."""

    model_config = ConfigDict(frozen=True)

    url: str
    info_box_style: dict[str, str] = Field(description="Allow-listed inline style of the info box")
    dex_id: DexId
    name: str
    categories_html: tuple[str, ...]
    name_jp_text: str
    name_jp_html: str
    name_jp_translit_html: str
    images: tuple[EntryImage, ...]
    top_info_boxes_html: tuple[str, ...]
    extra_info_boxes_html: tuple[str, ...]
    summary_html: str
    body_html: str


class Index(BaseModel):
    """Dex number to page URL mapping, plus the dex numbers of each generation.

    ``generations[0]`` holds Generation I.
    """

    model_config = ConfigDict(frozen=True)

    pokemon_pages: dict[DexId, str]
    generations: list[list[DexId]] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_generations(self) -> Self:
        for number, members in enumerate(self.generations, start=1):
            missing = [dex_id for dex_id in members if dex_id not in self.pokemon_pages]
            if missing:
                raise ValueError(f"generation {number} lists unknown dex ids: {[str(m) for m in missing]}")
        return self

    @cached_property
    def ids_by_url(self) -> dict[str, DexId]:
        return {url: dex_id for dex_id, url in self.pokemon_pages.items()}

    def dex_id_for_url(self, url: str) -> DexId | None:
        return self.ids_by_url.get(url)

    def generation_of(self, dex_id: DexId) -> int | None:
        for number, members in enumerate(self.generations, start=1):
            if dex_id in members:
                return number
        return None

    def select(self, generations: list[int] | None = None) -> list[DexId]:
        """Dex ids of the requested generations (all entries when None), in dex order."""
        if not generations:
            return sorted(self.pokemon_pages)
        for number in generations:
            if not 1 <= number <= len(self.generations):
                raise UnknownGenerationError(f"unknown generation {number} (index has {len(self.generations)})")
        return sorted({dex_id for number in generations for dex_id in self.generations[number - 1]})

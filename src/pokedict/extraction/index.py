# ABOUTME: Reads the National Pokédex list page into an Index of page URLs and generations
# ABOUTME: Also holds the Roman numeral conversion used for "Generation IV" headings

import re

from pokedict.core.models import DexId, Index
from pokedict.extraction.base import Fetcher, MissingElement, ParseFailure, UnexpectedShape
from pokedict.extraction.dom import attribute, parse_document, select_first, text_contents
from pokedict.extraction.images import absolute_url
from pokedict.utils.logging import get_logger, with_operation_context

INDEX_URL = "https://bulbapedia.bulbagarden.net/wiki/List_of_Pokémon_by_National_Pokédex_number"
ENTRY_LINK_SELECTOR = "a[href$='mon)']"
GENERATION_HEADING = re.compile(r"Generation\s+([IVXLCDM]+)\b")

_ROMAN_NUMERALS = (
    (1000, "M"),
    (900, "CM"),
    (500, "D"),
    (400, "CD"),
    (100, "C"),
    (90, "XC"),
    (50, "L"),
    (40, "XL"),
    (10, "X"),
    (9, "IX"),
    (5, "V"),
    (4, "IV"),
    (1, "I"),
)
_ROMAN_VALUES = {"I": 1, "V": 5, "X": 10, "L": 50, "C": 100, "D": 500, "M": 1000}

logger = get_logger(__name__)


def to_roman(value: int) -> str:
    if not 1 <= value <= 3999:
        raise ValueError(f"roman numerals cover 1..3999, got {value}")
    parts = []
    for amount, numeral in _ROMAN_NUMERALS:
        count, value = divmod(value, amount)
        parts.append(numeral * count)
    return "".join(parts)


def parse_roman(text: str) -> int:
    """Parse a canonical Roman numeral such as ``"IV"``.

    Non-canonical spellings (``"IIII"``, ``"VX"``) are rejected.

    Raises:
        ValueError: The text is not a canonical numeral
    """
    if not text or any(char not in _ROMAN_VALUES for char in text):
        raise ValueError(f"not a roman numeral: {text!r}")

    total = 0
    for position, char in enumerate(text):
        value = _ROMAN_VALUES[char]
        following = _ROMAN_VALUES[text[position + 1]] if position + 1 < len(text) else 0
        total += -value if value < following else value

    if total < 1 or total > 3999 or to_roman(total) != text:
        raise ValueError(f"not a canonical roman numeral: {text!r}")
    return total


def parse_index(html: str, base_url: str = INDEX_URL) -> Index:
    """Build the index from the list page markup.

    Raises:
        MissingElement: A dex row has no page link, or comes before any generation heading
        ParseFailure: A generation heading has a malformed numeral
        UnexpectedShape: Generations are not numbered 1, 2, 3, ... without gaps
    """
    doc = parse_document(html)

    pokemon_pages: dict[DexId, str] = {}
    generations: dict[int, list[DexId]] = {}
    current: int | None = None

    for node in doc.find_all(["h2", "h3", "h4", "tr"]):
        if node.name != "tr":
            match = GENERATION_HEADING.match(text_contents(node).strip())
            if match:
                try:
                    current = parse_roman(match.group(1))
                except ValueError:
                    raise ParseFailure("generation number", match.group(1)) from None
                generations.setdefault(current, [])
            continue

        first_cell = select_first(node, "td")
        if first_cell is None:
            continue
        try:
            dex_id = DexId.parse(text_contents(first_cell))
        except ValueError:
            continue

        link = select_first(node, ENTRY_LINK_SELECTOR)
        href = attribute(link, "href")
        if not href:
            raise MissingElement(f"link for entry {dex_id}", ENTRY_LINK_SELECTOR)
        if current is None:
            raise MissingElement(f"generation heading before entry {dex_id}", "Generation <numeral>")

        # alternate forms repeat the dex number
        if dex_id not in pokemon_pages:
            generations[current].append(dex_id)
        pokemon_pages[dex_id] = absolute_url(base_url, href, f"link for entry {dex_id}")

    numbers = sorted(generations)
    if numbers != list(range(1, len(numbers) + 1)):
        raise UnexpectedShape("generation numbering", "1, 2, 3, ... without gaps", numbers)

    return Index(pokemon_pages=pokemon_pages, generations=[generations[number] for number in numbers])


@with_operation_context("read_index", url=INDEX_URL)
def read_index(fetcher: Fetcher) -> Index:
    """Fetch and parse the National Pokédex list."""
    html = fetcher.get(INDEX_URL, document=True).decode("utf-8")
    index = parse_index(html, INDEX_URL)
    logger.info(
        "Read Pokédex index",
        entries=len(index.pokemon_pages),
        generations=len(index.generations),
    )
    return index

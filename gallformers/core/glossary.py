"""
Gallformers Glossary Linker
Turns glossary entries into match stems and splits prose into plain-text and
glossary-link segments
"""

import re
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import quote

logger = logging.getLogger(__name__)

# Glossary page that cross-page links point at
GLOSSARY_PATH = "/glossary/"

_ANCHOR_SEPARATORS = re.compile(r"[\s!\"#$%&'()*+,./:;<=>?@\[\\\]^`{|}~]+")


class DataAccessFailure(Exception):
    """Raised when the glossary could not be fetched"""


@dataclass(frozen=True)
class GlossaryEntry:
    """A glossary term as supplied by the data-access layer"""
    id: int
    word: str
    definition: str = ""
    urls: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Stem:
    """Normalized form of a glossary word used for matching"""
    entry: GlossaryEntry
    stem: str


@dataclass(frozen=True)
class PlainText:
    value: str

    @property
    def text(self) -> str:
        return self.value


@dataclass(frozen=True)
class GlossaryLink:
    term: str
    display_text: str
    entry: GlossaryEntry
    same_document: bool
    # Fragment id of the entry, unique within the glossary it was matched against
    anchor: str = ""

    @property
    def text(self) -> str:
        return self.display_text


Segment = Union[PlainText, GlossaryLink]

GlossaryFetcher = Callable[[], Awaitable[Sequence[GlossaryEntry]]]


@dataclass(frozen=True)
class LinkDescriptor:
    href: str
    text: str


def _fold(text: str) -> str:
    # Per character so stems and text fold identically
    return "".join(ch.casefold() for ch in text)


def _fold_with_offsets(text: str) -> Tuple[str, List[int]]:
    """
    Case-fold text and map every folded code point back to its source index

    Some characters fold to more than one code point ('İ' -> 'i̇', 'ß' -> 'ss'),
    so folded offsets cannot be used on the original text directly.
    """
    pieces = []
    offsets = []
    for index, ch in enumerate(text):
        folded = ch.casefold()
        pieces.append(folded)
        offsets.extend([index] * len(folded))
    return "".join(pieces), offsets


def normalize(word: str) -> str:
    return _fold(word.strip())


def stem_text(entries: Sequence[GlossaryEntry]) -> List[Stem]:
    """
    Build one stem per glossary entry

    Args:
        entries: Glossary entries in any order

    Returns:
        Stems in the same order as the entries
    """
    return [Stem(entry=entry, stem=normalize(entry.word)) for entry in entries]


def _build_pattern(stems: Sequence[Stem]):
    """
    Build a single regex matching any stem at word boundaries

    Alternatives are ordered longest first so the regex engine prefers the
    longest stem at a given position. The sort is stable, so equally long
    stems keep their input order. Stems are already case-folded and the pattern
    runs against folded text, so no case flag is needed.
    """
    owners: Dict[str, Stem] = {}
    for stem in stems:
        # Empty stems can never match; duplicates resolve to the first entry
        if stem.stem and stem.stem not in owners:
            owners[stem.stem] = stem

    if not owners:
        return None, [], owners

    ordered = sorted(owners.keys(), key=len, reverse=True)
    alternatives = "|".join(f"({re.escape(term)})" for term in ordered)
    pattern = re.compile(f"(?<!\\w)(?:{alternatives})(?!\\w)")

    return pattern, ordered, owners


def annotate(text: Optional[str], same_document: bool, stems: Sequence[Stem]) -> List[Segment]:
    """
    Split text into plain-text and glossary-link segments

    Args:
        text: Text to annotate, None is treated as empty
        same_document: Whether links should target anchors on the current page
        stems: Stems produced by stem_text

    Returns:
        Ordered segments whose text concatenates back to the input
    """
    text = text or ""
    if not text:
        return []

    pattern, ordered, owners = _build_pattern(stems)
    if pattern is None:
        return [PlainText(text)]

    anchors = assign_anchors([stem.entry for stem in stems])
    folded, offsets = _fold_with_offsets(text)

    segments: List[Segment] = []
    position = 0

    for match in pattern.finditer(folded):
        # Widen to whole source characters
        start = offsets[match.start()]
        end = offsets[match.end() - 1] + 1
        if start < position:
            # Began inside a character the previous match already consumed
            continue
        if start > position:
            segments.append(PlainText(text[position:start]))

        term = ordered[match.lastindex - 1]
        entry = owners[term].entry
        segments.append(GlossaryLink(
            term=term,
            display_text=text[start:end],
            entry=entry,
            same_document=same_document,
            anchor=anchors[entry],
        ))
        position = end

    if position < len(text):
        segments.append(PlainText(text[position:]))

    logger.debug(f"Annotated {len(text)} chars into {len(segments)} segments")
    return segments


def link_from_stems(text: Optional[str], same_document: bool) -> Callable[[Sequence[Stem]], List[Segment]]:
    """Curried form of annotate, reusable against several stem sets"""
    def link(stems: Sequence[Stem]) -> List[Segment]:
        return annotate(text, same_document, stems)

    return link


def anchor_id(word: str) -> str:
    """
    Fragment identifier for a glossary word, e.g. 'Leaf Vein' -> 'leaf-vein'

    Words made only of punctuation give an empty slug; use entry_anchor or
    assign_anchors when an entry is at hand.
    """
    slug = _ANCHOR_SEPARATORS.sub("-", normalize(word)).strip("-")
    return quote(slug, safe="-_")


def entry_anchor(entry: GlossaryEntry) -> str:
    return anchor_id(entry.word) or f"term-{entry.id}"


def assign_anchors(entries: Sequence[GlossaryEntry]) -> Dict[GlossaryEntry, str]:
    """
    Give every entry a fragment id that is unique within the glossary

    The first entry to claim a slug keeps it; later entries with the same slug
    ('leaf vein' and 'leaf-vein') get their id appended.

    Args:
        entries: Full glossary, in the order it was fetched

    Returns:
        Mapping of entry to anchor
    """
    anchors: Dict[GlossaryEntry, str] = {}
    taken = set()

    for entry in entries:
        if entry in anchors:
            continue

        anchor = entry_anchor(entry)
        if anchor in taken:
            base = f"{anchor}-{entry.id}"
            anchor = base
            suffix = 2
            while anchor in taken:
                anchor = f"{base}-{suffix}"
                suffix += 1

        anchors[entry] = anchor
        taken.add(anchor)

    return anchors


def link_anchor(link: GlossaryLink) -> str:
    """Anchor a link points at, for links built without a glossary context"""
    return link.anchor or entry_anchor(link.entry)


def make_link(anchor: str, display_text: str, same_document: bool) -> LinkDescriptor:
    if same_document:
        href = f"#{anchor}"
    else:
        href = f"{GLOSSARY_PATH}#{anchor}"
    return LinkDescriptor(href=href, text=display_text)


async def fetch_glossary(fetch_entries: Optional[GlossaryFetcher] = None) -> List[GlossaryEntry]:
    """
    Fetch all glossary entries through the injected fetcher

    Args:
        fetch_entries: Async callable returning entries, defaults to the
            configured glossary source

    Returns:
        List of glossary entries

    Raises:
        DataAccessFailure: If the fetch failed for any reason
    """
    if fetch_entries is None:
        from .store import default_source
        fetch_entries = default_source().fetch_all

    try:
        entries = await fetch_entries()
    except DataAccessFailure as e:
        logger.error(f"Glossary fetch failed: {e}")
        raise
    except Exception as e:
        logger.error(f"Glossary fetch failed: {e}")
        raise DataAccessFailure(f"Failed to fetch glossary: {e}") from e

    return list(entries)


async def link_text_from_glossary(text: Optional[str],
                                  fetch_entries: Optional[GlossaryFetcher] = None) -> List[Segment]:
    """
    Fetch the glossary and link every known term found in text

    Links target the glossary page, which is what embedded descriptions need.
    """
    entries = await fetch_glossary(fetch_entries)
    return annotate(text or "", False, stem_text(entries))


async def link_texts_from_glossary(texts: Sequence[Optional[str]],
                                   fetch_entries: Optional[GlossaryFetcher] = None) -> List[List[Segment]]:
    """Link several passages against a single glossary fetch"""
    entries = await fetch_glossary(fetch_entries)
    stems = stem_text(entries)
    return [annotate(text, False, stems) for text in texts]


def link_definitions(entries: Sequence[GlossaryEntry]) -> List[Tuple[GlossaryEntry, List[Segment]]]:
    """
    Link terms inside each entry's definition to anchors on the glossary page

    Args:
        entries: Full glossary

    Returns:
        List of (entry, definition segments) pairs in input order
    """
    stems = stem_text(entries)
    return [(entry, annotate(entry.definition, True, stems)) for entry in entries]

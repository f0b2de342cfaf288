from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make api_server importable when running tests from the repo root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from gallformers.core.glossary import GlossaryEntry, stem_text  # noqa: E402
from gallformers.core.store import StaticGlossarySource  # noqa: E402


@pytest.fixture
def entries() -> list[GlossaryEntry]:
    return [
        GlossaryEntry(id=0, word="foo", definition="Foo bar baz"),
        GlossaryEntry(id=1, word="bar", definition="Hello Foo bar baz"),
    ]


@pytest.fixture
def stems(entries):
    return stem_text(entries)


@pytest.fixture
def gall_entries() -> list[GlossaryEntry]:
    return [
        GlossaryEntry(id=5, word="bud", definition="an undeveloped shoot"),
        GlossaryEntry(id=6, word="Bud Gall", definition="a gall formed from a bud",
                      urls=("https://en.wikipedia.org/wiki/Gall",)),
        GlossaryEntry(id=16, word="midrib", definition="the central vein of a leaf"),
        GlossaryEntry(id=22, word="vein", definition="a vascular bundle"),
    ]


@pytest.fixture
def static_source(gall_entries) -> StaticGlossarySource:
    return StaticGlossarySource(gall_entries)

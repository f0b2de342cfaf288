"""
Gallformers Glossary Sources
Fetches glossary entries from YAML files, an HTTP endpoint or memory
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests
import yaml

from .config import GallformersConfig
from .glossary import DataAccessFailure, GlossaryEntry

logger = logging.getLogger(__name__)

# Embedded glossary of plant and insect terms
DEFAULT_GLOSSARY_YAML = """
- id: 1
  word: abaxial
  definition: "the lower surface of a leaf, facing away from the stem"
- id: 2
  word: adaxial
  definition: "the upper surface of a leaf, facing toward the stem"
- id: 3
  word: agamic
  definition: "the asexual, all-female generation of a cynipid wasp with alternating generations"
- id: 4
  word: alternating generations
  definition: "a life cycle in which a sexual and an agamic generation follow each other, often inducing different galls on different plant parts"
- id: 5
  word: bud
  definition: "an undeveloped shoot, flower or leaf, often enclosed in scales"
- id: 6
  word: bud gall
  definition: "a gall formed from the tissues of a bud, usually replacing it entirely"
- id: 7
  word: catkin
  definition: "a slim, cylindrical flower cluster, typical of oaks, willows and birches"
- id: 8
  word: cecidium
  definition: "another word for a gall; the abnormal plant growth induced by another organism"
  urls:
    - "https://en.wikipedia.org/wiki/Gall"
- id: 9
  word: cynipid
  definition: "a gall wasp of the family Cynipidae, the most prolific gall inducers on oaks"
  urls:
    - "https://en.wikipedia.org/wiki/Cynipidae"
- id: 10
  word: detachable
  definition: "a gall that falls from the host plant when mature"
- id: 11
  word: erineum
  definition: "a felt-like patch of abnormal plant hairs induced by eriophyid mites"
- id: 12
  word: eriophyid
  definition: "a mite of the family Eriophyidae, microscopic and worm-like, many of which induce galls"
- id: 13
  word: integral
  definition: "a gall that cannot be removed from the host without tearing plant tissue"
- id: 14
  word: larval chamber
  definition: "the cavity inside a gall in which the gall inducer develops"
- id: 15
  word: leaf
  definition: "the flattened, usually green, photosynthetic organ of a plant"
- id: 16
  word: midrib
  definition: "the central vein of a leaf"
- id: 17
  word: monothalamous
  definition: "a gall with a single larval chamber"
- id: 18
  word: petiole
  definition: "the stalk that attaches a leaf to the stem"
- id: 19
  word: polythalamous
  definition: "a gall with many larval chambers"
- id: 20
  word: sessile
  definition: "attached directly by its base, without a stalk"
- id: 21
  word: stem
  definition: "the main structural axis of a plant, bearing buds and shoots"
- id: 22
  word: vein
  definition: "a vascular bundle running through a leaf blade"
- id: 23
  word: woolly
  definition: "covered in long, soft, matted hairs"
"""


def parse_entries(records: Any) -> List[GlossaryEntry]:
    """
    Validate raw glossary records and convert them to entries

    Args:
        records: Sequence of mappings with id, word, definition and urls

    Returns:
        List of GlossaryEntry in input order

    Raises:
        DataAccessFailure: If the records are malformed
    """
    if records is None:
        return []
    if isinstance(records, dict) and "entries" in records:
        records = records["entries"]
    if not isinstance(records, list):
        raise DataAccessFailure(f"Expected a list of glossary records, got {type(records).__name__}")

    entries = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise DataAccessFailure(f"Glossary record {index} is not a mapping")

        entry_id = record.get("id")
        word = record.get("word")
        definition = record.get("definition") or ""
        urls = record.get("urls") or []

        # bool is an int subclass but never a valid id
        if not isinstance(entry_id, int) or isinstance(entry_id, bool):
            raise DataAccessFailure(f"Glossary record {index} has an invalid id: {entry_id!r}")
        if not isinstance(word, str) or not word.strip():
            raise DataAccessFailure(f"Glossary record {index} has an empty word")
        if not isinstance(definition, str):
            raise DataAccessFailure(f"Glossary record {index} has a non-text definition")
        if not isinstance(urls, list) or not all(isinstance(u, str) for u in urls):
            raise DataAccessFailure(f"Glossary record {index} has invalid urls")

        entries.append(GlossaryEntry(id=entry_id, word=word, definition=definition, urls=tuple(urls)))

    return entries


def entries_to_records(entries: Iterable[GlossaryEntry]) -> List[Dict[str, Any]]:
    """Inverse of parse_entries, used when exporting a glossary"""
    return [
        {"id": e.id, "word": e.word, "definition": e.definition, "urls": list(e.urls)}
        for e in entries
    ]


class StaticGlossarySource:
    """Glossary held in memory"""

    def __init__(self, entries: Sequence[GlossaryEntry]):
        self.entries = list(entries)

    async def fetch_all(self) -> List[GlossaryEntry]:
        return list(self.entries)


class YamlGlossarySource:
    """
    Glossary read from a YAML file, or the embedded default glossary
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None

    def _read(self) -> str:
        if self.path is None:
            return DEFAULT_GLOSSARY_YAML
        return self.path.read_text(encoding="utf-8")

    def load(self) -> List[GlossaryEntry]:
        """Synchronous load, raising DataAccessFailure on any problem"""
        origin = str(self.path) if self.path else "embedded glossary"
        try:
            records = yaml.safe_load(self._read())
        except OSError as e:
            raise DataAccessFailure(f"Could not read glossary {origin}: {e}") from e
        except yaml.YAMLError as e:
            raise DataAccessFailure(f"Could not parse glossary {origin}: {e}") from e

        entries = parse_entries(records)
        logger.info(f"Loaded glossary with {len(entries)} terms from {origin}")
        return entries

    async def fetch_all(self) -> List[GlossaryEntry]:
        return await asyncio.to_thread(self.load)


class HttpGlossarySource:
    """
    Glossary fetched as JSON from a remote endpoint
    """

    def __init__(self, url: str, timeout: int = 10, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def load(self) -> List[GlossaryEntry]:
        try:
            response = self.session.get(self.url, timeout=self.timeout,
                                        headers={"Accept": "application/json"})
            response.raise_for_status()
            records = response.json()
        except requests.RequestException as e:
            raise DataAccessFailure(f"Could not fetch glossary from {self.url}: {e}") from e
        except json.JSONDecodeError as e:
            raise DataAccessFailure(f"Glossary at {self.url} is not valid JSON: {e}") from e

        entries = parse_entries(records)
        logger.info(f"Fetched glossary with {len(entries)} terms from {self.url}")
        return entries

    async def fetch_all(self) -> List[GlossaryEntry]:
        return await asyncio.to_thread(self.load)


def source_from_config(config: GallformersConfig):
    """
    Pick the glossary source named by the configuration

    Raises:
        ValueError: For unknown source kinds or a missing http url
    """
    kind = config.glossary.source
    if kind == "yaml":
        return YamlGlossarySource(config.glossary.path)
    elif kind == "http":
        if not config.glossary.url:
            raise ValueError("The http glossary source needs a url")
        return HttpGlossarySource(config.glossary.url, timeout=config.glossary.timeout)
    else:
        raise ValueError(f"Unknown glossary source: {kind}")


def default_source():
    """Source named by the current environment, read at call time"""
    return source_from_config(GallformersConfig())

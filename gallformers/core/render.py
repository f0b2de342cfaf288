"""
Gallformers Segment Rendering
Serializes annotated segments and renders them as HTML, Markdown or text
"""

from html import escape
from typing import Any, Dict, List, Sequence

from .glossary import (
    GlossaryEntry,
    GlossaryLink,
    PlainText,
    Segment,
    assign_anchors,
    link_anchor,
    link_definitions,
    make_link,
)

FORMATS = ("html", "markdown", "text")


def serialize(segments: Sequence[Segment]) -> List[Dict[str, Any]]:
    """
    Convert segments to JSON-safe dictionaries

    Args:
        segments: Output of the annotator

    Returns:
        List of dictionaries tagged with "type"
    """
    data = []
    for segment in segments:
        if isinstance(segment, GlossaryLink):
            entry = segment.entry
            data.append({
                "type": "link",
                "term": segment.term,
                "text": segment.display_text,
                "same_document": segment.same_document,
                "anchor": link_anchor(segment),
                "href": make_link(link_anchor(segment), segment.display_text, segment.same_document).href,
                "entry": {
                    "id": entry.id,
                    "word": entry.word,
                    "definition": entry.definition,
                    "urls": list(entry.urls),
                },
            })
        else:
            data.append({"type": "text", "text": segment.value})
    return data


def deserialize(data: Sequence[Dict[str, Any]]) -> List[Segment]:
    """Rebuild segments from the output of serialize"""
    segments: List[Segment] = []
    for item in data:
        kind = item.get("type")
        if kind == "text":
            segments.append(PlainText(item["text"]))
        elif kind == "link":
            entry = item["entry"]
            segments.append(GlossaryLink(
                term=item["term"],
                display_text=item["text"],
                entry=GlossaryEntry(
                    id=entry["id"],
                    word=entry["word"],
                    definition=entry.get("definition", ""),
                    urls=tuple(entry.get("urls", [])),
                ),
                same_document=bool(item.get("same_document", False)),
                anchor=item.get("anchor", ""),
            ))
        else:
            raise ValueError(f"Unknown segment type: {kind}")
    return segments


def _link_html(segment: GlossaryLink) -> str:
    link = make_link(link_anchor(segment), segment.display_text, segment.same_document)
    title = escape(segment.entry.definition, quote=True)
    return f'<a class="glossary-term" href="{escape(link.href, quote=True)}" title="{title}">{escape(link.text)}</a>'


def _escape_markdown(text: str) -> str:
    return text.replace("[", "\\[").replace("]", "\\]")


def _link_markdown(segment: GlossaryLink) -> str:
    link = make_link(link_anchor(segment), segment.display_text, segment.same_document)
    title = segment.entry.definition.replace('"', '\\"')
    text = _escape_markdown(link.text)
    if title:
        return f'[{text}]({link.href} "{title}")'
    return f"[{text}]({link.href})"


def render_segments(segments: Sequence[Segment], format: str = "html") -> str:
    """
    Render segments in the given format

    Args:
        segments: Output of the annotator
        format: "html", "markdown" or "text"

    Returns:
        Rendered string, segments concatenated in order
    """
    if format == "html":
        return "".join(
            _link_html(s) if isinstance(s, GlossaryLink) else escape(s.value, quote=False)
            for s in segments
        )
    elif format == "markdown":
        return "".join(_link_markdown(s) if isinstance(s, GlossaryLink) else _escape_markdown(s.value) for s in segments)
    elif format == "text":
        return "".join(s.text for s in segments)
    else:
        raise ValueError(f"Unknown format: {format}")


def render_glossary(entries: Sequence[GlossaryEntry], format: str = "html") -> str:
    """
    Render the glossary page, with terms inside definitions linked in-page

    Args:
        entries: Full glossary
        format: "html", "markdown" or "text"

    Returns:
        Rendered glossary page body
    """
    if format not in FORMATS:
        raise ValueError(f"Unknown format: {format}")

    anchors = assign_anchors(entries)
    linked = sorted(link_definitions(entries), key=lambda pair: pair[0].word.lower())

    if format == "html":
        html = "<dl>\n"
        for entry, segments in linked:
            html += f'  <dt id="{anchors[entry]}"><strong>{escape(entry.word)}</strong></dt>\n'
            html += f"  <dd>{render_segments(segments, 'html')}"
            for url in entry.urls:
                html += f' <a class="reference" href="{escape(url, quote=True)}">{escape(url)}</a>'
            html += "</dd>\n"
        html += "</dl>"
        return html

    lines = []
    for entry, segments in linked:
        if format == "markdown":
            lines.append(f'<a id="{anchors[entry]}"></a>**{entry.word}**: {render_segments(segments, "markdown")}')
            for url in entry.urls:
                lines.append(f"- <{url}>")
        else:
            lines.append(f"{entry.word}: {entry.definition}")
            for url in entry.urls:
                lines.append(f"  {url}")
        lines.append("")
    return "\n".join(lines).rstrip("\n")

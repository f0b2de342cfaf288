from .glossary import (
    DataAccessFailure,
    GlossaryEntry,
    GlossaryLink,
    LinkDescriptor,
    PlainText,
    Stem,
    anchor_id,
    annotate,
    assign_anchors,
    entry_anchor,
    link_anchor,
    link_definitions,
    link_from_stems,
    link_text_from_glossary,
    link_texts_from_glossary,
    make_link,
    stem_text,
)

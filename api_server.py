#!/usr/bin/env python3
"""
Gallformers REST API Server
Provides HTTP endpoints for page renderers to link glossary terms in descriptions
"""

import asyncio
import logging

from flask import Flask, request, jsonify
from flask_cors import CORS

from gallformers.core.config import GallformersConfig
from gallformers.core.glossary import (
    DataAccessFailure,
    annotate,
    assign_anchors,
    fetch_glossary,
    link_text_from_glossary,
    link_texts_from_glossary,
    stem_text,
)
from gallformers.core.render import FORMATS, render_glossary, render_segments, serialize
from gallformers.core.store import source_from_config

logger = logging.getLogger(__name__)


def create_app(config: GallformersConfig = None, source=None) -> Flask:
    """
    Build the Flask application

    Args:
        config: Configuration, defaults to one read from the environment
        source: Glossary source, defaults to the one named by the configuration
    """
    config = config or GallformersConfig()
    source = source or source_from_config(config)

    app = Flask(__name__)
    CORS(app, origins=config.api.cors_origins)

    @app.errorhandler(DataAccessFailure)
    def glossary_unavailable(e):
        logger.error(f"Glossary unavailable: {e}")
        return jsonify({"error": f"Glossary unavailable: {str(e)}"}), 503

    def requested_format(value):
        if value is not None and value not in FORMATS:
            return None
        return value or "html"

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({"status": "healthy", "message": "Gallformers glossary API is running"})

    @app.route('/api/glossary', methods=['GET'])
    def glossary():
        """List every glossary entry with its anchor id"""
        entries = asyncio.run(fetch_glossary(source.fetch_all))
        anchors = assign_anchors(entries)
        return jsonify({
            "entries": [
                {
                    "id": e.id,
                    "word": e.word,
                    "definition": e.definition,
                    "urls": list(e.urls),
                    "anchor": anchors[e]
                }
                for e in entries
            ]
        })

    @app.route('/api/glossary/page', methods=['GET'])
    def glossary_page():
        """Rendered glossary page with in-page links between definitions"""
        format = requested_format(request.args.get('format'))
        if format is None:
            return jsonify({"error": f"Unknown format: {request.args.get('format')}"}), 400

        entries = asyncio.run(fetch_glossary(source.fetch_all))
        return jsonify({"format": format, "rendered": render_glossary(entries, format)})

    @app.route('/api/link', methods=['POST'])
    def link():
        """
        Body: { "text": "...", "format": "html", "same_document": false }
        Returns: { "segments": [...], "rendered": "..." }
        """
        data = request.get_json(silent=True) or {}
        format = requested_format(data.get('format'))
        if format is None:
            return jsonify({"error": f"Unknown format: {data.get('format')}"}), 400

        text = data.get('text')
        if text is not None and not isinstance(text, str):
            return jsonify({"error": "text must be a string"}), 400

        if data.get('same_document'):
            entries = asyncio.run(fetch_glossary(source.fetch_all))
            segments = annotate(text, True, stem_text(entries))
        else:
            segments = asyncio.run(link_text_from_glossary(text, source.fetch_all))

        return jsonify({
            "segments": serialize(segments),
            "rendered": render_segments(segments, format)
        })

    @app.route('/api/link/batch', methods=['POST'])
    def link_batch():
        """
        Body: { "texts": ["...", null, "..."] }
        Returns: { "results": [[...], [...], [...]] }
        """
        data = request.get_json(silent=True) or {}
        texts = data.get('texts')
        if not isinstance(texts, list) or not all(t is None or isinstance(t, str) for t in texts):
            return jsonify({"error": "texts must be a list of strings"}), 400

        results = asyncio.run(link_texts_from_glossary(texts, source.fetch_all))
        return jsonify({"results": [serialize(segments) for segments in results]})

    return app


if __name__ == '__main__':
    config = GallformersConfig()
    logging.basicConfig(level=config.log_level)
    app = create_app(config)

    print("Starting Gallformers glossary API server...")
    print(f"\nStarting Flask server on http://{config.api.host}:{config.api.port}")
    print("Press Ctrl+C to stop\n")
    app.run(host=config.api.host, port=config.api.port, debug=config.api.debug)

#!/usr/bin/env python3
"""
Gallformers CLI Interface
Links glossary terms in text from the command line
"""

import sys
import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from gallformers.core.config import GallformersConfig
from gallformers.core.glossary import (
    DataAccessFailure,
    GlossaryEntry,
    GlossaryLink,
    annotate,
    assign_anchors,
    fetch_glossary,
    link_anchor,
    make_link,
    stem_text,
)
from gallformers.core.render import render_segments, serialize
from gallformers.core.store import HttpGlossarySource, YamlGlossarySource, source_from_config

console = Console()


class GallformersCLI:
    """Command-line interface for the glossary linker"""

    def __init__(self, source):
        self.source = source
        self.entries: Optional[List[GlossaryEntry]] = None

    def load_glossary(self) -> List[GlossaryEntry]:
        """Fetch the glossary once per session"""
        if self.entries is None:
            with console.status("[bold green]Loading glossary..."):
                self.entries = asyncio.run(fetch_glossary(self.source.fetch_all))
        return self.entries

    def link(self, text: str, format: str = "text", same_document: bool = False):
        """Annotate text and print it in the requested format"""
        segments = annotate(text, same_document, stem_text(self.load_glossary()))

        if format == "segments":
            table = Table(title="🔗 Segments")
            table.add_column("#", style="dim")
            table.add_column("Kind", style="cyan")
            table.add_column("Text", style="green", overflow="fold")
            table.add_column("Link", style="yellow")

            for i, segment in enumerate(segments):
                if isinstance(segment, GlossaryLink):
                    href = make_link(link_anchor(segment), segment.display_text, same_document).href
                    table.add_row(str(i), "link", segment.display_text, href)
                else:
                    table.add_row(str(i), "text", repr(segment.value), "")
            console.print(table)

        elif format == "text":
            # Highlight linked terms in the terminal
            for segment in segments:
                if isinstance(segment, GlossaryLink):
                    console.print(segment.display_text, style="bold underline cyan", end="", markup=False)
                else:
                    console.print(segment.value, end="", markup=False, highlight=False)
            console.print()

        else:
            console.print(render_segments(segments, format), markup=False, highlight=False)

        links = sum(1 for s in segments if isinstance(s, GlossaryLink))
        console.print(f"[dim]{links} glossary terms linked[/dim]")
        return segments

    def list_glossary(self):
        """Print the glossary as a table"""
        entries = self.load_glossary()
        anchors = assign_anchors(entries)

        table = Table(title="📖 Glossary")
        table.add_column("ID", style="dim")
        table.add_column("Word", style="cyan")
        table.add_column("Anchor", style="yellow")
        table.add_column("Definition", style="green", overflow="fold")

        for entry in sorted(entries, key=lambda e: e.word.lower()):
            table.add_row(str(entry.id), entry.word, anchors[entry], entry.definition)

        console.print(table)

    def export(self, segments, output_path: str):
        """Export segments as JSON, or as rendered Markdown for .md files"""
        output_path = Path(output_path)

        try:
            if output_path.suffix == ".md":
                output_path.write_text(render_segments(segments, "markdown"), encoding="utf-8")
            else:
                with open(output_path, 'w', encoding='utf-8') as f:
                    json.dump(serialize(segments), f, indent=2, ensure_ascii=False)

            console.print(f"✅ Exported segments to {output_path}", style="green")

        except OSError as e:
            console.print(f"❌ Export failed: {str(e)}", style="red")

    def interactive_mode(self, format: str = "text", same_document: bool = False):
        """Link text typed at the prompt"""
        console.print(Panel(
            "[bold cyan]Gallformers Glossary Linker[/bold cyan]\n"
            "Type some text to link glossary terms, or use commands:\n"
            "  /help - Show commands\n"
            "  /list - Show the glossary\n"
            "  /exit - Exit",
            title="🌿 Welcome",
            border_style="cyan"
        ))

        while True:
            try:
                text = console.input("\n[bold cyan]Text:[/bold cyan] ")

                if text.startswith("/"):
                    if not self._handle_command(text):
                        break
                elif text.strip():
                    self.link(text, format, same_document)

            except (KeyboardInterrupt, EOFError):
                console.print("\n👋 Goodbye!", style="yellow")
                break

    def _handle_command(self, command: str) -> bool:
        """Handle special commands, returning False to leave the session"""
        cmd = command.split(maxsplit=1)[0].lower()

        if cmd == "/exit":
            console.print("👋 Goodbye!", style="yellow")
            return False

        elif cmd == "/help":
            help_text = """
[bold]Available Commands:[/bold]
  /help  - Show this help
  /list  - Show the glossary
  /exit  - Exit the program
            """
            console.print(Panel(help_text, title="Help", border_style="green"))

        elif cmd == "/list":
            self.list_glossary()

        else:
            console.print(f"Unknown command: {cmd}", style="red")

        return True


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Gallformers - link glossary terms in plant gall descriptions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive mode
  gallformers

  # Link a description and print HTML
  gallformers "Integral bud gall on the midrib" --format html

  # Use a custom glossary and export the segments
  gallformers --file description.txt --glossary glossary.yaml --export segments.json

  # Show the glossary
  gallformers --list
        """
    )

    parser.add_argument("text", nargs="?", help="Text to link")
    parser.add_argument("--file", "-f", help="Read the text from a file")
    parser.add_argument(
        "--format", "-F",
        choices=["text", "html", "markdown", "segments"],
        default="text",
        help="Output format (default: text)"
    )
    parser.add_argument(
        "--same-document",
        action="store_true",
        help="Link to anchors on the current page instead of the glossary page"
    )
    parser.add_argument("--glossary", "-g", help="YAML glossary file")
    parser.add_argument("--url", help="URL of a JSON glossary endpoint")
    parser.add_argument("--config", "-c", help="YAML configuration file")
    parser.add_argument("--list", "-l", action="store_true", help="Show the glossary")
    parser.add_argument("--export", "-e", help="Export results to file (.json or .md)")

    args = parser.parse_args(argv)

    try:
        config = GallformersConfig.load_from_file(args.config) if args.config else GallformersConfig()
    except ValueError as e:
        console.print(f"❌ {str(e)}", style="red")
        return 1

    logging.basicConfig(level=config.log_level)

    if args.glossary:
        source = YamlGlossarySource(args.glossary)
    elif args.url:
        source = HttpGlossarySource(args.url, timeout=config.glossary.timeout)
    else:
        try:
            source = source_from_config(config)
        except ValueError as e:
            console.print(f"❌ {str(e)}", style="red")
            return 1

    cli = GallformersCLI(source)

    try:
        if args.list:
            cli.list_glossary()

        text = args.text
        if args.file:
            text = Path(args.file).read_text(encoding="utf-8")

        if text is not None:
            segments = cli.link(text, args.format, args.same_document)
            if args.export:
                cli.export(segments, args.export)
        elif not args.list:
            cli.interactive_mode(args.format, args.same_document)

    except DataAccessFailure as e:
        console.print(f"❌ Glossary unavailable: {str(e)}", style="red")
        return 1
    except OSError as e:
        console.print(f"❌ Could not read {args.file}: {str(e)}", style="red")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

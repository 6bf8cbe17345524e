#!/usr/bin/env python3
"""
Document Analysis Runner

Runs the full document analysis on a text file:
1. Grammar check (LanguageTool)
2. Sentiment (HuggingFace, or local lexicon)
3. Entities and topics (TextRazor, if configured)
4. Readability and statistics (local)

Usage:
    # Optional keys (analysis degrades gracefully without them):
    export TEXTRAZOR_API_KEY=your_key
    export HUGGINGFACE_API_KEY=your_key

    python scripts/analyze_document.py notes.txt
    python scripts/analyze_document.py notes.txt --json --summary
"""

import asyncio
import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


async def run_analysis(path: Path, as_json: bool = False, with_summary: bool = False) -> int:
    """Analyze one file and print the report."""
    from src.analyzer import DocumentAnalyzer
    from src.integrations import ExternalAPIClients

    text = path.read_text(encoding="utf-8")

    async with ExternalAPIClients() as clients:
        clients.config.log_status()
        report = await DocumentAnalyzer.from_clients(clients).analyze_document(text)
        summary = await clients.huggingface.summarize(text) if with_summary else None

    if as_json:
        data = report.to_dict()
        if summary is not None:
            data["summary"] = summary
        print(json.dumps(data, indent=2, ensure_ascii=False))
        return 0

    stats = report.stats
    readability = report.readability
    print(f"\n{'=' * 60}")
    print(f"DOCUMENT ANALYSIS: {path.name}")
    print(f"{'=' * 60}")
    print(f"Words: {stats.word_count}  Sentences: {stats.sentence_count}  "
          f"Paragraphs: {stats.paragraph_count}  Characters: {stats.char_count}")
    print(f"Readability: {readability.score}/100 ({readability.grade_level}), "
          f"~{readability.reading_time} min read")
    print(f"Sentiment: {report.sentiment.label.value} "
          f"({report.sentiment.score}, {report.sentiment.confidence.value} confidence)")

    print(f"\nGrammar issues: {report.grammar.error_count}")
    for finding in report.grammar.errors[:10]:
        fix = f" -> {finding.suggestions[0]}" if finding.suggestions else ""
        print(f"  [{finding.category}] '{finding.original_text}'{fix}: {finding.short_message}")

    if report.entities.entities:
        print("\nEntities:")
        for entity in report.entities.entities[:10]:
            print(f"  {entity.text} ({entity.type}) relevance={entity.relevance}")
    if report.entities.topics:
        print("\nTopics: " + ", ".join(t.label for t in report.entities.topics))

    if summary is not None:
        print(f"\nSummary:\n  {summary}")

    return 0


def main():
    parser = argparse.ArgumentParser(description="Analyze a text document")
    parser.add_argument("file", type=Path, help="UTF-8 text file to analyze")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--summary", action="store_true", help="Also summarize the document")

    args = parser.parse_args()

    load_dotenv()

    if not args.file.is_file():
        print(f"ERROR: File not found: {args.file}")
        sys.exit(1)

    sys.exit(asyncio.run(run_analysis(args.file, args.json, args.summary)))


if __name__ == "__main__":
    main()

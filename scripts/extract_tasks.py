"""Extract tasks from a local minutes file and print them as JSON."""

import argparse
import json
import logging
import mimetypes
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from meeting_tasks.errors import (
    DocumentExtractionError,
    ExtractionFailedError,
    UnsupportedFileTypeError,
)
from meeting_tasks.extraction.extractor import extract_tasks
from meeting_tasks.ingestion.documents import extract_text
from meeting_tasks.storage import get_supabase_client, store_task


def main() -> int:
    parser = argparse.ArgumentParser(description="Extract tasks from meeting minutes")
    parser.add_argument("path", type=Path, help="Minutes file (.txt, .pdf, .docx, .vtt, .json)")
    parser.add_argument(
        "--mime",
        default=None,
        help="MIME type of the file (default: guessed from the extension)",
    )
    parser.add_argument(
        "--store",
        action="store_true",
        help="Also insert the extracted tasks into the Supabase tasks table",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline progress")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.path.exists():
        print(f"File not found: {args.path}", file=sys.stderr)
        return 1

    mime = args.mime or mimetypes.guess_type(args.path.name)[0] or ""
    try:
        text = extract_text(args.path.read_bytes(), mime, args.path.name)
    except (UnsupportedFileTypeError, DocumentExtractionError) as exc:
        print(f"Could not read {args.path}: {exc}", file=sys.stderr)
        return 1

    try:
        tasks = extract_tasks(text)
    except ExtractionFailedError as exc:
        print(f"Extraction failed ({exc.category}): {exc.cause}", file=sys.stderr)
        return 2

    output = [task.to_dict() for task in tasks]

    if args.store:
        client = get_supabase_client()
        for task, row in zip(tasks, output, strict=True):
            row["id"] = str(store_task(client, task)["id"])

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

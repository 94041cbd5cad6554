# bulk_generate_pdfs.py
import argparse
import json
import logging
import os
from pathlib import Path

from config import Config
from models import Document
from pdf_service import generate_and_store_pdf, pdf_path_for

logger = logging.getLogger("bulk_generate_pdfs")


def load_document(path: Path) -> Document:
    with open(path, "r", encoding="utf-8") as fh:
        return Document.from_dict(json.load(fh))


def main(argv=None):
    parser = argparse.ArgumentParser(description="Bulk generate quote and invoice PDFs from JSON exports.")
    parser.add_argument("source", help="Directory containing one <document>.json per quote or invoice.")
    parser.add_argument("--year", type=str, default="", help="Only generate PDFs for a given year (YYYY).")
    parser.add_argument("--all", action="store_true", help="Regenerate PDFs even if one already exists.")
    parser.add_argument("--out", type=str, default="", help="Exports directory (defaults to EXPORTS_DIR).")
    args = parser.parse_args(argv)

    logging.basicConfig(level=Config.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    exports_dir = args.out or Config.EXPORTS_DIR
    Path(exports_dir).mkdir(parents=True, exist_ok=True)

    target_year = (args.year or "").strip()
    if target_year and not (target_year.isdigit() and len(target_year) == 4):
        raise SystemExit("Year must be 4 digits, e.g. --year 2025")

    sources = sorted(Path(args.source).glob("*.json"))
    if not sources:
        print(f"No JSON documents found in {args.source}.")
        return 0

    total = len(sources)
    generated = 0
    skipped = 0
    failed = 0

    for i, src in enumerate(sources, start=1):
        label = src.stem
        try:
            doc = load_document(src)
            label = doc.number or label
            if target_year and str(doc.year or "") != target_year:
                skipped += 1
                print(f"[{i}/{total}] SKIP  {label} (not {target_year})")
                continue

            existing = pdf_path_for(doc, exports_dir)
            if os.path.exists(existing) and not args.all:
                skipped += 1
                print(f"[{i}/{total}] SKIP  {label} (already has PDF)")
                continue

            path = generate_and_store_pdf(doc, exports_dir)
            generated += 1
            print(f"[{i}/{total}] DONE  {label} -> {path}")

        except Exception as e:
            failed += 1
            logger.exception("Failed to render %s", src)
            print(f"[{i}/{total}] FAIL  {label}  ({e})")

    print("\nBulk PDF generation complete.")
    print(f"Generated: {generated}")
    print(f"Skipped:   {skipped}")
    print(f"Failed:    {failed}")
    print(f"Exports:   {exports_dir}")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())

"""
main.py — Work Done Status Deck — CLI Entry Point.

Extracts the five-column Work Done table from a status report and renders
it in any combination of output formats. Stages share the RecordSet in
memory; the input is read once.

Usage:
    python main.py status.docx --pptx               # slide deck
    python main.py status.xlsx --html --pdf         # HTML report + PDF deck
    python main.py status.txt --all                 # every format
    python main.py status.txt --preview             # log the extracted table only
    python main.py status.txt --remote http://host:5000/api/generate-ppt
    python main.py status.docx --all --config custom.yaml --log-level DEBUG

Outputs (data/output/):
    WorkDoneStatus_{stem}.pptx   — paginated slide deck
    WorkDoneStatus_{stem}.html   — standalone HTML report
    WorkDoneStatus_{stem}.pdf    — printable PDF deck
    WorkDoneStatus_{stem}.xlsx   — records workbook
"""

import argparse
import logging
import logging.handlers
import os
import sys
from datetime import datetime
from pathlib import Path

from statusdeck.config import load_config


def _configure_logging(log_dir: str = "logs", level: str = "INFO") -> None:
    """Configure rotating file handler + stream handler.

    Args:
        log_dir: Directory for log files.
        level: Log level string.
    """
    effective_level = os.environ.get("LOG_LEVEL", level).upper()
    numeric = getattr(logging, effective_level, logging.INFO)

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_file = Path(log_dir) / f"statusdeck_{datetime.today().strftime('%Y%m%d')}.log"

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    fh = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=10 * 1024 * 1024, backupCount=7, encoding="utf-8"
    )
    fh.setFormatter(fmt)
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(numeric)
    root.addHandler(fh)
    root.addHandler(sh)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="statusdeck",
        description="Work Done Status Deck — status report to slides / HTML.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py status.docx --pptx
  python main.py status.xlsx --html --pdf
  python main.py status.txt --all
  python main.py status.txt --remote http://localhost:5000/api/generate-ppt
        """,
    )
    parser.add_argument("input", help="Status report (.txt, .docx, .html, .xlsx, .xls)")
    parser.add_argument("--config", default="config.yaml",
                        help="Path to config.yaml (default: config.yaml)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    outputs = parser.add_argument_group("Outputs")
    outputs.add_argument("--pptx", action="store_true", help="Generate PowerPoint deck")
    outputs.add_argument("--html", action="store_true", help="Generate HTML report")
    outputs.add_argument("--pdf", action="store_true", help="Generate PDF deck")
    outputs.add_argument("--excel", action="store_true", help="Generate Excel workbook")
    outputs.add_argument("--all", action="store_true",
                         help="Generate every local output: pptx -> html -> pdf -> excel")
    outputs.add_argument("--remote", metavar="URL", nargs="?", const="",
                         help="Render the deck on a remote slide service "
                              "(URL defaults to remote.url in config)")
    outputs.add_argument("--preview", action="store_true",
                         help="Log the extracted table")
    return parser.parse_args(argv)


def _log_preview(records, logger: logging.Logger) -> None:
    from statusdeck.pagination import row_label

    for number, record in enumerate(records, start=1):
        logger.info(
            "  %-28s | %-14s | %-40s | %-8s | %s",
            row_label(number, record)[:28],
            record.module[:14],
            record.description[:40],
            record.deployment_status,
            record.delivery_date,
        )


def run_pipeline(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Execute extraction and the requested output stages.

    Args:
        args: Parsed CLI arguments.
        logger: Configured root logger.

    Returns:
        0 on success, 1 on error.
    """
    from statusdeck.errors import DecodeFailure, InputRejected
    from statusdeck.excel_export import generate_excel
    from statusdeck.extraction import extract_file
    from statusdeck.html_report import generate_html
    from statusdeck.pdf_deck import generate_pdf
    from statusdeck.remote import request_remote_deck
    from statusdeck.slides import generate_pptx

    config_path = args.config
    do_all = args.all
    stem = Path(args.input).stem

    # -------------------------------------------------------------------------
    # Stage 1: Extraction
    # -------------------------------------------------------------------------
    logger.info("=" * 65)
    logger.info("STAGE 1: Extraction -- %s", args.input)
    logger.info("=" * 65)
    try:
        records = extract_file(args.input, config_path)
    except InputRejected as exc:
        logger.error("%s", exc.message)
        return 1
    except DecodeFailure as exc:
        logger.error("Could not process file: %s", exc.message)
        return 1

    if args.preview or not any([do_all, args.pptx, args.html, args.pdf,
                                args.excel, args.remote is not None]):
        _log_preview(records, logger)

    stages = [
        ("PowerPoint Deck", do_all or args.pptx, generate_pptx),
        ("HTML Report",     do_all or args.html, generate_html),
        ("PDF Deck",        do_all or args.pdf, generate_pdf),
        ("Excel Workbook",  do_all or args.excel, generate_excel),
    ]

    # -------------------------------------------------------------------------
    # Stages 2-5: Local renderers
    # -------------------------------------------------------------------------
    for number, (title, wanted, render) in enumerate(stages, start=2):
        if not wanted:
            continue
        logger.info("=" * 65)
        logger.info("STAGE %d: %s", number, title)
        logger.info("=" * 65)
        try:
            path = render(records, config_path, stem)
            logger.info("%s generated: %s", title, path)
        except Exception as exc:
            logger.error("%s generation failed: %s", title, exc, exc_info=True)
            return 1

    # -------------------------------------------------------------------------
    # Stage 6: Remote slide service
    # -------------------------------------------------------------------------
    if args.remote is not None:
        logger.info("=" * 65)
        logger.info("STAGE 6: Remote Slide Service")
        logger.info("=" * 65)
        cfg = load_config(config_path)
        url = args.remote or cfg["remote"]["url"]
        output_path = Path(cfg["paths"]["output_dir"]) / f"WorkDoneStatus_{stem}_remote.pptx"
        try:
            request_remote_deck(records, url, output_path,
                                timeout=cfg["remote"]["timeout_seconds"])
        except Exception as exc:
            logger.error("Remote rendering failed: %s", exc, exc_info=True)
            return 1

    logger.info("=" * 65)
    logger.info("PIPELINE COMPLETE -- %d row(s) from %s", len(records), Path(args.input).name)
    logger.info("=" * 65)
    return 0


def main(argv=None) -> None:
    """Parse args, configure logging, and run pipeline."""
    args = _parse_args(argv)
    cfg = load_config(args.config)

    _configure_logging(log_dir=cfg["paths"]["log_dir"], level=args.log_level)
    logger = logging.getLogger(__name__)

    logger.info(
        "Work Done Status Deck v1.0 | %s",
        datetime.today().strftime("%Y-%m-%d %H:%M:%S"),
    )
    sys.exit(run_pipeline(args, logger))


if __name__ == "__main__":
    main()

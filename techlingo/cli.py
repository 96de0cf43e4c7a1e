# techlingo/cli.py
"""
Command line interface for TechLingo.

    techlingo INPUT... [-o OUTPUT] [--no-ocr] [--settings PATH] [--api-key KEY] [--verbose]
    techlingo render MARKDOWN... -o OUTPUT [--settings PATH] [--verbose]

The first form translates one PDF or up to 10 page images with Gemini.
`render` composes already translated Markdown pages (one file per page)
without calling the AI backend.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from techlingo import __app_name__, __version__

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

# Third-party loggers that are noisy at DEBUG/INFO
_QUIET_LOGGERS = ['httpx', 'httpcore', 'google_genai', 'google_genai.models', 'pdfminer', 'PIL']


def setup_logging(verbose: bool = False, logs_dir: Optional[Path] = None):
    """Configure logging to console and file.

    Log file location: ~/.techlingo/logs/techlingo.log (UTF-8, append mode).
    Falls back to console-only logging if the directory is not writable.

    Returns:
        tuple: (console_handler, file_handler) to keep references alive
    """
    if logs_dir is None:
        logs_dir = Path.home() / ".techlingo" / "logs"
    log_file_path = logs_dir / "techlingo.log"

    # Create console handler first (always works)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))

    file_handler = None
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    except OSError as e:
        print(f"[WARNING] Failed to create log file {log_file_path}: {e}", file=sys.stderr)
        file_handler = None

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    # Remove existing handlers that might interfere
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)
    if file_handler:
        root_logger.addHandler(file_handler)

    # Suppress verbose logging from third-party libraries
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.debug("%s %s starting (argv: %s)", __app_name__, __version__, sys.argv)
    if file_handler:
        logger.debug("Log file: %s", log_file_path)
    else:
        logger.warning("File logging disabled - console only")

    return (console_handler, file_handler)


def _resolve_settings_path(value: Optional[Path]) -> Path:
    from techlingo.config.settings import get_default_settings_path

    if value is None:
        return get_default_settings_path()
    if value.is_dir():
        return value / "settings.json"
    return value


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--settings",
        type=Path,
        help="settings.json path or config directory (default: bundled config/)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging on the console")


def build_translate_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="techlingo",
        description="Translate technical document pages into a one-page-per-page PDF. "
                    "Use 'techlingo render' to compose already translated Markdown.",
    )
    parser.add_argument("inputs", nargs="+", type=Path, metavar="INPUT",
                        help="one PDF, or up to 10 images (.jpg .jpeg .png .webp)")
    parser.add_argument("--output", "-o", type=Path,
                        help="output PDF (default: <input>_translated.pdf)")
    parser.add_argument("--no-ocr", action="store_true",
                        help="fail instead of running OCR on scanned PDFs")
    parser.add_argument("--api-key", help="Gemini API key (default: GEMINI_API_KEY / GOOGLE_API_KEY)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _add_common_arguments(parser)
    return parser


def build_render_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="techlingo render",
        description="Compose translated Markdown pages (one file per page) into a PDF.",
    )
    parser.add_argument("pages", nargs="+", type=Path, metavar="MARKDOWN",
                        help="page text files, in page order")
    parser.add_argument("--output", "-o", type=Path, required=True, help="output PDF")
    _add_common_arguments(parser)
    return parser


def _print_progress(progress) -> None:
    detail = f" ({progress.phase_detail})" if progress.phase_detail else ""
    print(f"[{progress.percentage:4.0%}] {progress.status}{detail}", flush=True)


def run_translate(args: argparse.Namespace) -> int:
    from techlingo.config.settings import AppSettings
    from techlingo.models.types import TranslationStatus
    from techlingo.services.exceptions import TranslationBackendError
    from techlingo.services.gemini_client import GeminiPageTranslator
    from techlingo.services.prompt_builder import PromptBuilder
    from techlingo.services.translation_service import TranslationService

    logger = logging.getLogger(__name__)
    settings = AppSettings.load(_resolve_settings_path(args.settings))

    try:
        translator = GeminiPageTranslator(
            api_key=args.api_key,
            model=settings.gemini_model,
            temperature=settings.temperature,
            prompt_builder=PromptBuilder(settings.target_language),
            request_timeout=settings.request_timeout,
        )
    except TranslationBackendError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    service = TranslationService(translator, settings)
    try:
        result = service.translate_file(
            args.inputs,
            args.output,
            allow_ocr=not args.no_ocr,
            progress_callback=_print_progress,
        )
    except KeyboardInterrupt:
        service.cancel()
        logger.info("Interrupted by user")
        print("Cancelled", file=sys.stderr)
        return EXIT_CANCELLED

    print(result.get_summary())
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    if result.status is TranslationStatus.CANCELLED:
        return EXIT_CANCELLED
    if not result.succeeded:
        return EXIT_FAILURE

    print(f"Output: {result.output_path}")
    return EXIT_OK


def run_render(args: argparse.Namespace) -> int:
    from techlingo.config.settings import AppSettings
    from techlingo.processors.layout_fitter import MeasurementError
    from techlingo.processors.pdf_processor import PdfProcessor

    settings = AppSettings.load(_resolve_settings_path(args.settings))
    try:
        pages_text = [path.read_text(encoding='utf-8-sig') for path in args.pages]
        PdfProcessor(settings).generate_pdf(pages_text, args.output)
    except (OSError, UnicodeDecodeError, MeasurementError) as e:
        logging.getLogger(__name__).exception("Render failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    print(f"Output: {args.output}")
    return EXIT_OK


# Global reference to keep log handlers alive
_global_log_handlers = None


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    global _global_log_handlers

    argv = list(sys.argv[1:] if argv is None else argv)
    if argv and argv[0] == "render":
        args = build_render_parser().parse_args(argv[1:])
        runner = run_render
    else:
        args = build_translate_parser().parse_args(argv)
        runner = run_translate

    _global_log_handlers = setup_logging(args.verbose)
    return runner(args)


if __name__ == "__main__":
    sys.exit(main())

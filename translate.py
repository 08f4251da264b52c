"""
Command-line interface for EPUB translation
"""
import argparse
import asyncio
import sys

from tqdm.auto import tqdm

from epub_scribe.config import (
    BACKEND,
    DEFAULT_SOURCE_LANGUAGE,
    DEFAULT_TARGET_LANGUAGE,
    MAX_CHUNK_SIZE,
    MAX_CONCURRENT,
    OPENROUTER_API_KEY,
    OPENROUTER_MODEL,
    SUPPORTED_LANGUAGES,
    TranslationConfig,
)
from epub_scribe.core.backends import BACKENDS
from epub_scribe.core.epub import ArchiveError, PipelineError, translate_epub_file
from epub_scribe.utils.file_utils import default_output_path, get_unique_output_path, report_path_for
from epub_scribe.utils.unified_logger import LogType, setup_cli_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Translate the text of an EPUB book, keeping images, styles and structure intact.")
    parser.add_argument("-i", "--input", required=True, help="Path to the input EPUB file.")
    parser.add_argument("-o", "--output", default=None, help="Path to the output file. If not specified, uses <input>_<target>.epub.")
    parser.add_argument("-sl", "--source_lang", default=DEFAULT_SOURCE_LANGUAGE, choices=sorted(SUPPORTED_LANGUAGES), help=f"Source language code (default: {DEFAULT_SOURCE_LANGUAGE}).")
    parser.add_argument("-tl", "--target_lang", default=DEFAULT_TARGET_LANGUAGE, choices=sorted(code for code in SUPPORTED_LANGUAGES if code != 'auto'), help=f"Target language code (default: {DEFAULT_TARGET_LANGUAGE}).")
    parser.add_argument("--backend", default=BACKEND, choices=list(BACKENDS), help=f"Translation backend (default: {BACKEND}).")
    parser.add_argument("--endpoint", default=None, help="Endpoint override for the direct or google backend.")
    parser.add_argument("--openrouter_api_key", default=OPENROUTER_API_KEY, help="OpenRouter API key (required if using openrouter backend).")
    parser.add_argument("-m", "--model", default=OPENROUTER_MODEL, help=f"OpenRouter model (default: {OPENROUTER_MODEL}).")
    parser.add_argument("--max-concurrent", dest="max_concurrent", type=int, default=MAX_CONCURRENT, help=f"Concurrent backend requests (default: {MAX_CONCURRENT}).")
    parser.add_argument("-cs", "--chunk-size", dest="chunk_size", type=int, default=MAX_CHUNK_SIZE, help=f"Max characters per chunk (default: {MAX_CHUNK_SIZE}).")
    parser.add_argument("--report", action="store_true", help="Write a comparison report next to the output file.")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output.")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.output is None:
        args.output = default_output_path(args.input, args.target_lang)

    # Ensure output path is unique (add number suffix if file exists)
    args.output = get_unique_output_path(args.output)

    if args.backend == "openrouter" and not args.openrouter_api_key:
        parser.error("--openrouter_api_key is required when using openrouter backend")

    try:
        config = TranslationConfig.from_cli_args(args)
    except ValueError as e:
        parser.error(str(e))

    logger = setup_cli_logger(enable_colors=config.enable_colors)

    logger.info("Translation Started", LogType.TRANSLATION_START, {
        'source_lang': args.source_lang,
        'target_lang': args.target_lang,
        'backend': args.backend,
        'input_file': args.input,
        'output_file': args.output,
    })

    log_callback = logger.create_legacy_callback()
    report_path = report_path_for(args.output) if args.report else None

    progress_bar = tqdm(total=100, desc="Translating", unit="%", bar_format="{l_bar}{bar}| {n:.0f}/{total:.0f}%")

    def on_progress(percent: float) -> None:
        progress_bar.update(percent - progress_bar.n)

    try:
        result = asyncio.run(translate_epub_file(
            args.input,
            args.output,
            args.source_lang,
            args.target_lang,
            on_progress,
            config=config,
            log_callback=log_callback,
            report_filepath=report_path,
        ))
    except (ArchiveError, PipelineError) as e:
        progress_bar.close()
        logger.error(f"Translation failed: {e}", LogType.ERROR_DETAIL, {
            'details': type(e).__name__,
            'entry': getattr(e, 'entry_name', None) or args.input,
        })
        return 1
    progress_bar.close()

    for failure in result.failures:
        logger.warning(f"{failure.entry_name}: {failure.reason}")

    logger.info("Translation Completed", LogType.TRANSLATION_END, {
        'output_file': args.output,
        'stats': result.stats,
    })
    if report_path:
        logger.info(f"📝 Comparison report: {report_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
File naming helpers for translation output
"""
from pathlib import Path


def default_output_path(input_path, target_language):
    """
    Output path used when none is given: ``<stem>_<target>.epub`` next to the input.

    Examples:
        books/novel.epub, 'es' -> books/novel_es.epub
    """
    path = Path(input_path)
    return str(path.with_name(f"{path.stem}_{target_language}.epub"))


def report_path_for(output_path):
    """Comparison report path for an output file: ``<stem>_report.txt``."""
    path = Path(output_path)
    return str(path.with_name(f"{path.stem}_report.txt"))


def get_unique_output_path(output_path):
    """
    Generate a unique output path by adding a number suffix if the file already exists.

    Args:
        output_path (str): Desired output path

    Returns:
        str: Unique output path (original or with numeric suffix)

    Examples:
        book_es.epub -> book_es.epub (if doesn't exist)
        book_es.epub -> book_es (1).epub (if book_es.epub exists)
    """
    path = Path(output_path)

    if not path.exists():
        return output_path

    parent = path.parent
    stem = path.stem
    suffix = path.suffix

    counter = 1
    while True:
        new_path = parent / f"{stem} ({counter}){suffix}"
        if not new_path.exists():
            return str(new_path)

        counter += 1
        if counter > 9999:
            raise RuntimeError(f"Could not find unique filename after 9999 attempts for: {output_path}")

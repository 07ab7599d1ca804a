"""
Validation utilities for the pipeline
"""

from pathlib import Path
from typing import Union


def validate_pdf_file(file_path: Union[str, Path]) -> bool:
    """
    Validate if the provided file is a valid PDF

    Args:
        file_path: Path to the PDF file

    Returns:
        True if valid PDF

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a readable, non-empty PDF
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    if not path.is_file():
        raise ValueError(f"Not a file: {file_path}")

    if path.suffix.lower() != '.pdf':
        raise ValueError(f"Not a PDF file: {file_path}")

    if path.stat().st_size == 0:
        raise ValueError(f"Empty file: {file_path}")

    # Check PDF header
    with open(path, 'rb') as f:
        header = f.read(5)
        if header != b'%PDF-':
            raise ValueError(f"Invalid PDF header: {file_path}")

    return True


def ensure_output_dir(output_path: Union[str, Path]) -> Path:
    """
    Ensure output directory exists

    Args:
        output_path: Path to the directory

    Returns:
        Path object for the directory
    """
    directory = Path(output_path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory

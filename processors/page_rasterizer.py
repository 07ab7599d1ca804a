"""
PDF to page image rasterizer backed by poppler's pdftoppm
"""

import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Union

import fitz  # PyMuPDF

from utils.config import RasterizerConfig
from utils.errors import RasterizationFailed
from utils.logger import logger
from utils.validators import validate_pdf_file


# pdftoppm writes these next to progress records on stderr
DIAGNOSTIC_PREFIXES = (
    "Syntax Error",
    "Syntax Warning",
    "Internal Error",
    "I/O Error",
    "Command Line Error",
    "Permission Error",
)

# <page> <last page> <image path>
_PROGRESS_RECORD_RE = re.compile(r"^\s*\d+\s+\d+\s+\S")


@dataclass(frozen=True)
class PageImage:
    """One rasterized page of a PDF"""
    pdf_path: str
    page_number: int
    image_path: str


class PageRasterizer(Protocol):
    """Turns a PDF into an ordered list of page images"""

    def rasterize(self, pdf_path: Union[str, Path], timeout: Optional[float] = None) -> List[PageImage]:
        ...


def parse_progress_stream(stream: str, pdf_path: Union[str, Path]) -> List[PageImage]:
    """
    Parse pdftoppm's -progress output into page images

    Args:
        stream: Raw stderr of pdftoppm
        pdf_path: PDF the stream belongs to

    Returns:
        Page images numbered 1..N in emission order
    """
    image_paths = []
    for line in stream.splitlines():
        if not line.strip():
            continue
        if line.startswith(DIAGNOSTIC_PREFIXES):
            logger.debug(f"Skipping pdftoppm diagnostic: {line}")
            continue
        if not _PROGRESS_RECORD_RE.match(line):
            logger.debug(f"Skipping unrecognized pdftoppm line: {line}")
            continue

        image_paths.append(line.strip().split(maxsplit=2)[2])

    return [
        PageImage(pdf_path=str(pdf_path), page_number=index, image_path=image_path)
        for index, image_path in enumerate(image_paths, 1)
    ]


def count_pdf_pages(pdf_path: Union[str, Path]) -> int:
    """Read the page count of a PDF with PyMuPDF"""
    doc = fitz.open(str(pdf_path))
    try:
        return doc.page_count
    finally:
        doc.close()


class PdftoppmRasterizer:
    """Rasterize PDFs to PNG pages with the pdftoppm executable"""

    def __init__(self, config: Optional[RasterizerConfig] = None):
        """
        Initialize the rasterizer

        Args:
            config: Rasterizer configuration (binary, work directory, dpi, timeout)
        """
        self.config = config or RasterizerConfig()

    def _build_command(self, pdf_path: Path) -> List[str]:
        output_prefix = Path(self.config.work_dir) / self.config.image_basename
        return [
            self.config.binary,
            "-png",
            "-progress",
            "-r", str(self.config.image_dpi),
            str(pdf_path),
            str(output_prefix),
        ]

    def rasterize(self, pdf_path: Union[str, Path], timeout: Optional[float] = None) -> List[PageImage]:
        """
        Convert every page of a PDF to an image file

        Args:
            pdf_path: Path to a readable PDF
            timeout: Deadline in seconds for the pdftoppm process

        Returns:
            Page images in page order. Image files are left on disk.

        Raises:
            RasterizationFailed: Invalid input, process failure, timeout or page count mismatch
        """
        pdf_path = Path(pdf_path)
        try:
            validate_pdf_file(pdf_path)
        except (FileNotFoundError, ValueError) as e:
            raise RasterizationFailed(str(e), pdf_path=pdf_path) from e

        Path(self.config.work_dir).mkdir(parents=True, exist_ok=True)
        command = self._build_command(pdf_path)
        timeout = timeout if timeout is not None else self.config.timeout

        logger.debug(f"Running: {' '.join(command)}")
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False
            )
        except FileNotFoundError as e:
            raise RasterizationFailed(f"{self.config.binary} not found", pdf_path=pdf_path) from e
        except subprocess.TimeoutExpired as e:
            stderr = e.stderr.decode(errors="replace") if isinstance(e.stderr, bytes) else (e.stderr or "")
            raise RasterizationFailed(
                f"{self.config.binary} timed out after {timeout}s", pdf_path=pdf_path, diagnostics=stderr
            ) from e

        if completed.returncode != 0:
            logger.error(f"pdftoppm error: {completed.stderr}")
            raise RasterizationFailed(
                f"{self.config.binary} exited with status {completed.returncode}",
                pdf_path=pdf_path,
                diagnostics=completed.stderr
            )

        pages = parse_progress_stream(completed.stderr, pdf_path)
        if not pages:
            raise RasterizationFailed("No page images produced", pdf_path=pdf_path, diagnostics=completed.stderr)

        if self.config.verify_page_count:
            try:
                expected = count_pdf_pages(pdf_path)
            except (RuntimeError, ValueError) as e:
                raise RasterizationFailed(
                    f"Could not read page count: {e}", pdf_path=pdf_path, diagnostics=completed.stderr
                ) from e
            if expected != len(pages):
                raise RasterizationFailed(
                    f"Expected {expected} page images, parsed {len(pages)}",
                    pdf_path=pdf_path,
                    diagnostics=completed.stderr
                )

        logger.info(f"🖼️ Rasterized {pdf_path.name} into {len(pages)} pages")
        return pages

"""
Paper Assembler: rasterize one PDF and fold every page into a markdown file
"""

import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from extractors.page_extractor import PageExtractor
from processors.page_rasterizer import PageImage, PageRasterizer, PdftoppmRasterizer
from utils.config import Config, get_config
from utils.errors import PipelineError, RasterizationFailed
from utils.logger import logger
from utils.validators import ensure_output_dir


PAGE_MARKER = "Page {page_number}"


@dataclass(frozen=True)
class PaperArtifact:
    """An assembled paper ready for review"""
    title: str
    path: Path
    page_count: int
    pdf_path: str
    authors: List[str] = field(default_factory=list)
    created_at: str = ""


def format_page(content: str, page_number: int) -> str:
    """Page content followed by its page-boundary marker"""
    return f"{content}\n{PAGE_MARKER.format(page_number=page_number)}\n\n"


def paper_filename(pdf_path: Union[str, Path], paper_index: Optional[int] = None) -> str:
    """Markdown filename for one paper, prefixed with its position in the run when given"""
    stem = Path(pdf_path).stem
    if paper_index is None:
        return f"{stem}.md"
    return f"{paper_index:02d}-{stem}.md"


def order_pages(pages: List[PageImage], pdf_path: Path) -> List[PageImage]:
    """Pages sorted by number; anything but exactly 1..N is rejected"""
    ordered = sorted(pages, key=lambda page: page.page_number)
    numbers = [page.page_number for page in ordered]
    if numbers != list(range(1, len(ordered) + 1)):
        raise RasterizationFailed(f"Page numbers must run 1..{len(ordered)}, got {numbers}", pdf_path=pdf_path)
    return ordered


class PaperAssembler:
    """Drive rasterization and page extraction across all pages of one PDF"""

    def __init__(
        self,
        config: Optional[Config] = None,
        rasterizer: Optional[PageRasterizer] = None,
        extractor: Optional[PageExtractor] = None
    ):
        self.config = config or get_config()
        self.rasterizer = rasterizer or PdftoppmRasterizer(self.config.rasterizer)
        self.extractor = extractor or PageExtractor(self.config)

    def assemble(
        self,
        pdf_path: Union[str, Path],
        output_dir: Union[str, Path],
        paper_index: Optional[int] = None
    ) -> PaperArtifact:
        """
        Assemble one PDF into a per-paper markdown file

        Pages are processed strictly in order. Each page image is deleted right
        after its content is appended. The first failure propagates and the
        partially written file stays on disk.

        Args:
            pdf_path: Input PDF
            output_dir: Directory for the markdown file (created if absent)
            paper_index: Position of this paper in the run, prefixed to the filename
                so inputs sharing a file stem never share an output file

        Returns:
            The completed paper artifact
        """
        pdf_path = Path(pdf_path)
        start_time = time.time()

        pages = order_pages(self.rasterizer.rasterize(pdf_path), pdf_path)

        output_path = ensure_output_dir(output_dir) / paper_filename(pdf_path, paper_index)
        title = ""
        authors: List[str] = []
        created_at = ""

        logger.info(f"📄 Assembling {pdf_path.name} ({len(pages)} pages) into {output_path}")

        # Truncate leftovers from an earlier run before appending
        output_path.write_text("", encoding="utf-8")

        for page in pages:
            try:
                result = self.extractor.extract(page)
            except PipelineError as e:
                e.add_context(pdf_path=pdf_path, page_number=page.page_number)
                logger.error(f"Failed to process page {page.page_number} of {pdf_path.name}: {e}")
                raise

            if page.page_number == 1:
                title = result.title.strip() or pdf_path.stem
                authors = list(result.authors)
                created_at = result.created_at

            with open(output_path, "a", encoding="utf-8") as f:
                f.write(format_page(result.content, page.page_number))

            os.remove(page.image_path)
            logger.debug(f"Page {page.page_number} appended, removed {page.image_path}")

        logger.info(
            f"✅ Assembled '{title}' from {len(pages)} pages in {time.time() - start_time:.2f}s"
        )
        return PaperArtifact(
            title=title,
            path=output_path,
            page_count=len(pages),
            pdf_path=str(pdf_path),
            authors=authors,
            created_at=created_at
        )

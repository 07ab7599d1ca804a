"""
Pipeline Driver: assemble every input PDF, then synthesize and write the review
"""

import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from processors.paper_assembler import PaperArtifact, PaperAssembler, paper_filename
from processors.review_synthesizer import ReviewSynthesizer
from utils.config import Config, get_config
from utils.errors import PipelineAborted, PipelineError
from utils.logger import logger, log_step
from utils.validators import ensure_output_dir


class PipelineDriver:
    """Paper digestion and review synthesis pipeline"""

    def __init__(
        self,
        config: Optional[Config] = None,
        assembler: Optional[PaperAssembler] = None,
        synthesizer: Optional[ReviewSynthesizer] = None
    ):
        """
        Initialize the pipeline

        Args:
            config: Optional configuration object
            assembler: Per-paper assembler, built from config when omitted
            synthesizer: Review synthesizer, built from config when omitted
        """
        self.config = config or get_config()
        self.assembler = assembler or PaperAssembler(self.config)
        self.synthesizer = synthesizer or ReviewSynthesizer(self.config)
        self.last_report: Dict[str, Any] = {}

        logger.info("✅ Paper digestion pipeline initialized")

    def run(self, pdf_paths: Sequence[Union[str, Path]], output_dir: Optional[Union[str, Path]] = None) -> Path:
        """
        Assemble all papers in order, then write the synthesized review

        Args:
            pdf_paths: Input PDFs, processed in the given order
            output_dir: Output directory (defaults to config.output_dir)

        Returns:
            Path to the written review file

        Raises:
            ValueError: No input PDFs, or a paper file would collide with the review file
            PipelineAborted: A paper failed to assemble; the review is not attempted
        """
        if not pdf_paths:
            raise ValueError("No input PDFs given")

        for index, pdf_path in enumerate(pdf_paths):
            if paper_filename(pdf_path, index) == self.config.review_filename:
                raise ValueError(
                    f"Paper file for {pdf_path} would overwrite the review file {self.config.review_filename}"
                )

        output_dir = Path(output_dir or self.config.output_dir)
        start_time = time.time()
        papers: List[PaperArtifact] = []

        for index, pdf_path in enumerate(pdf_paths):
            log_step(f"Paper {index + 1}/{len(pdf_paths)}", str(pdf_path))
            try:
                papers.append(self.assembler.assemble(pdf_path, output_dir, paper_index=index))
            except (PipelineError, OSError) as e:
                logger.error(f"Aborting run, paper {index} ({pdf_path}) failed: {e}")
                raise PipelineAborted(index, pdf_path, e) from e

        log_step("Review synthesis", f"{len(papers)} papers")
        review = self.synthesizer.synthesize(papers)

        review_path = ensure_output_dir(output_dir) / self.config.review_filename
        review_path.write_text(review.content, encoding="utf-8")

        processing_time = time.time() - start_time
        self.last_report = {
            'output_path': str(review_path),
            'review_title': review.title,
            'references': len(review.references),
            'processing_time': processing_time,
            'papers': [
                {
                    'pdf_path': paper.pdf_path,
                    'title': paper.title,
                    'markdown_path': str(paper.path),
                    'pages': paper.page_count
                }
                for paper in papers
            ]
        }

        logger.info("✨ Processing Complete!")
        logger.info(f"⏱️ Processing time: {processing_time:.2f} seconds")
        return review_path

"""
Review Synthesizer for generating one review paper from all assembled papers
"""

from pathlib import Path
from typing import List, Optional, Sequence

from extractors.llm_client import Message, StructuredLLMClient
from processors.paper_assembler import PaperArtifact
from prompts import REVIEW_PAPER_PROMPT, get_paper_message
from schemas import REVIEW_SCHEMA, ReviewPaperResult
from utils.config import Config, get_config
from utils.errors import PaperUnreadable
from utils.logger import logger


class ReviewSynthesizer:
    """Synthesize a cross-paper review with a single schema-constrained call"""

    def __init__(self, config: Optional[Config] = None, client: Optional[StructuredLLMClient] = None):
        """Initialize review synthesizer with LLM client"""
        self.config = config or get_config()
        self.client = client or StructuredLLMClient(self.config.llm)
        logger.debug(f"Review synthesizer using {self.config.llm.provider}: {self.config.llm.model}")

    def _read_paper(self, paper: PaperArtifact) -> str:
        path = Path(paper.path)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PaperUnreadable(path) from e
        if not content.strip():
            raise PaperUnreadable(path, reason="empty")
        return content

    def build_messages(self, papers: Sequence[PaperArtifact]) -> List[Message]:
        """Review prompt followed by one message per paper, in the given order"""
        messages: List[Message] = [[REVIEW_PAPER_PROMPT]]
        for paper in papers:
            messages.append([get_paper_message(paper.title, self._read_paper(paper))])
        return messages

    def synthesize(self, papers: Sequence[PaperArtifact], timeout: Optional[float] = None) -> ReviewPaperResult:
        """
        Generate the review paper

        Args:
            papers: Assembled papers, one message each in the given order
            timeout: Deadline in seconds for the model call

        Returns:
            Validated review paper result

        Raises:
            ValueError: No papers given
            PaperUnreadable: A paper file is missing, unreadable or empty
            MissingCredential, InferenceFailed, SchemaViolation: As for page extraction
        """
        if not papers:
            raise ValueError("At least one paper is required to synthesize a review")

        self.client.require_credential()
        messages = self.build_messages(papers)

        logger.info(f"📝 Synthesizing review from {len(papers)} papers")
        response = self.client.complete(
            messages,
            REVIEW_SCHEMA,
            max_tokens=self.config.llm.review_max_tokens,
            timeout=timeout
        )
        if response.truncated:
            logger.warning(
                f"Review output hit the {self.config.llm.review_max_tokens} token limit and was truncated"
            )

        review = REVIEW_SCHEMA.parse(response.payload)
        logger.info(f"✅ Review '{review.title}' generated: {len(review.content)} characters, "
                    f"{len(review.references)} references")
        return review

"""
LLM (GPT/Claude) based page image extractor with schema-validated output
"""

from typing import Optional

from extractors.llm_client import StructuredLLMClient
from processors.image_encoder import ImageEncoder
from processors.page_rasterizer import PageImage
from prompts import PAGE_EXTRACTION_PROMPT
from schemas import EXTRACTION_SCHEMA, ExtractionResult
from utils.config import Config, get_config
from utils.errors import PipelineError
from utils.logger import logger, log_extraction_result


class PageExtractor:
    """Extract title, authors, date and markdown content from one page image"""

    def __init__(
        self,
        config: Optional[Config] = None,
        client: Optional[StructuredLLMClient] = None,
        encoder: Optional[ImageEncoder] = None
    ):
        """
        Initialize page extractor

        Args:
            config: Optional configuration object
            client: Inference backend client, built from config when omitted
            encoder: Image encoder, built from config when omitted
        """
        self.name: str = "PageExtractor"
        self.config = config or get_config()
        self.client = client or StructuredLLMClient(self.config.llm)
        self.encoder = encoder or ImageEncoder(
            max_dimension=self.config.max_image_dimension,
            fetch_timeout=self.config.image_fetch_timeout
        )

    def extract(self, page_image: PageImage, timeout: Optional[float] = None) -> ExtractionResult:
        """
        Extract structured content from a single page image

        Args:
            page_image: Rasterized page to process
            timeout: Deadline in seconds for the image fetch and the model call

        Returns:
            Validated extraction result

        Raises:
            MissingCredential: No API key configured (checked before any I/O)
            SourceUnreadable, DecodeUnsupported: Page image could not be encoded
            InferenceFailed: Backend or transport failure
            SchemaViolation: Response does not match the extraction schema
        """
        self.client.require_credential()

        try:
            encoded = self.encoder.encode(page_image.image_path, timeout=timeout)
            response = self.client.complete(
                [[PAGE_EXTRACTION_PROMPT], [encoded]],
                EXTRACTION_SCHEMA,
                max_tokens=self.config.llm.max_tokens,
                timeout=timeout
            )
            if response.truncated:
                logger.warning(f"Extraction output truncated for page {page_image.page_number}")
            result = EXTRACTION_SCHEMA.parse(response.payload)
        except PipelineError as e:
            e.add_context(pdf_path=page_image.pdf_path, page_number=page_image.page_number)
            log_extraction_result(self.name, False, str(e))
            raise

        log_extraction_result(
            self.name, True,
            f"Page {page_image.page_number}: {len(result.content)} characters"
        )
        return result

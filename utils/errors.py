"""
Error types raised by the paper digestion pipeline
"""

from pathlib import Path
from typing import List, Optional, Union


PathLike = Union[str, Path]


class PipelineError(Exception):
    """Base pipeline exception, carries the offending PDF/page when known"""

    def __init__(
        self,
        message: str,
        pdf_path: Optional[PathLike] = None,
        page_number: Optional[int] = None
    ):
        self.message = message
        self.pdf_path = str(pdf_path) if pdf_path is not None else None
        self.page_number = page_number
        super().__init__(self._format())

    def add_context(self, pdf_path: Optional[PathLike] = None, page_number: Optional[int] = None):
        """Fill in the PDF/page this error belongs to, keeping context already set"""
        if self.pdf_path is None and pdf_path is not None:
            self.pdf_path = str(pdf_path)
        if self.page_number is None:
            self.page_number = page_number
        self.args = (self._format(),)
        return self

    def _format(self) -> str:
        context = []
        if self.pdf_path:
            context.append(self.pdf_path)
        if self.page_number is not None:
            context.append(f"page {self.page_number}")
        if context:
            return f"{self.message} [{', '.join(context)}]"
        return self.message


class RasterizationFailed(PipelineError):
    """The rasterizer could not turn a PDF into page images"""

    def __init__(self, message: str, pdf_path: Optional[PathLike] = None, diagnostics: str = ""):
        self.diagnostics = diagnostics
        super().__init__(message, pdf_path=pdf_path)


class ImageEncodingError(PipelineError):
    """Base error for page image loading and encoding"""

    def __init__(self, message: str, location: str):
        self.location = location
        super().__init__(f"{message}: {location}")


class SourceUnreadable(ImageEncodingError):
    """Local file could not be opened or remote fetch failed"""
    pass


class DecodeUnsupported(ImageEncodingError):
    """Bytes are not a decodable raster image"""
    pass


class MissingCredential(PipelineError):
    """No API key configured for the selected provider"""

    def __init__(self, provider: str, env_var: str):
        self.provider = provider
        self.env_var = env_var
        super().__init__(f"{env_var} is not set (required for provider '{provider}')")


class InferenceFailed(PipelineError):
    """Transport or backend failure during a model call"""
    pass


class SchemaViolation(PipelineError):
    """Model output did not validate against the declared schema"""

    def __init__(self, schema_name: str, errors: List[str]):
        self.schema_name = schema_name
        self.errors = errors
        super().__init__(f"Response does not match schema '{schema_name}': {'; '.join(errors)}")


class PaperUnreadable(PipelineError):
    """An assembled paper file is missing, unreadable or empty"""

    def __init__(self, path: PathLike, reason: str = "unreadable"):
        self.path = str(path)
        super().__init__(f"Paper file {reason}: {self.path}")


class PipelineAborted(PipelineError):
    """A paper failed to assemble, the whole run is abandoned"""

    def __init__(self, paper_index: int, pdf_path: PathLike, cause: Exception):
        self.paper_index = paper_index
        self.cause = cause
        super().__init__(f"Paper #{paper_index} failed: {cause}", pdf_path=pdf_path)


__all__ = [
    'PipelineError',
    'RasterizationFailed',
    'ImageEncodingError',
    'SourceUnreadable',
    'DecodeUnsupported',
    'MissingCredential',
    'InferenceFailed',
    'SchemaViolation',
    'PaperUnreadable',
    'PipelineAborted'
]

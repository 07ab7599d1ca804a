"""
Configuration management for the paper digestion pipeline
"""

import os
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class LLMConfig(BaseModel):
    """LLM provider configuration"""
    provider: str = Field(default="openai", pattern="^(anthropic|openai)$")
    openai_api_key: Optional[str] = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))
    anthropic_api_key: Optional[str] = Field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY"))
    openai_model: str = Field(default="gpt-4o")
    claude_model: str = Field(default="claude-sonnet-4-20250514")
    max_tokens: int = Field(default=16384)
    review_max_tokens: int = Field(default=16384)
    temperature: float = Field(default=0.1)
    request_timeout: float = Field(default=600.0, gt=0)
    max_retries: int = Field(default=0, ge=0)

    @property
    def model(self) -> str:
        """Model identifier for the active provider"""
        return self.claude_model if self.provider == "anthropic" else self.openai_model


class RasterizerConfig(BaseModel):
    """pdftoppm configuration"""
    binary: str = Field(default="pdftoppm")
    work_dir: str = Field(default="tmp")
    image_basename: str = Field(default="tmpPdfImage")
    image_dpi: int = Field(default=150, ge=72, le=600)
    timeout: float = Field(default=300.0, gt=0)
    verify_page_count: bool = Field(default=True)


class Config(BaseModel):
    """Main pipeline configuration"""
    llm: LLMConfig = Field(default_factory=LLMConfig)
    rasterizer: RasterizerConfig = Field(default_factory=RasterizerConfig)
    output_dir: str = Field(default="output")
    review_filename: str = Field(default="review.md")
    image_fetch_timeout: float = Field(default=60.0, gt=0)
    max_image_dimension: int = Field(default=7999, gt=0)


# Global configuration instance
_config = None


def get_config() -> Config:
    """Get current configuration"""
    global _config
    if _config is None:
        _config = Config()
    return _config

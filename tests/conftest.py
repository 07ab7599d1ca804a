"""
Shared fixtures for pipeline tests.

Nothing here touches the network or needs poppler installed: the rasterizer,
the extractor and the inference backend are replaced by fakes from tests.fakes.
"""

from pathlib import Path

import pytest

from tests.fakes import make_png_bytes
from utils.config import Config, LLMConfig, RasterizerConfig


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        llm=LLMConfig(openai_api_key="test-openai-key", anthropic_api_key="test-anthropic-key"),
        rasterizer=RasterizerConfig(work_dir=str(tmp_path / "work")),
        output_dir=str(tmp_path / "output")
    )


@pytest.fixture
def output_dir(tmp_path) -> Path:
    return tmp_path / "output"


@pytest.fixture
def png_file(tmp_path) -> Path:
    path = tmp_path / "page.png"
    path.write_bytes(make_png_bytes())
    return path


@pytest.fixture
def pdf_file(tmp_path) -> Path:
    path = tmp_path / "paper.pdf"
    path.write_bytes(b"%PDF-1.4\n%minimal\n")
    return path

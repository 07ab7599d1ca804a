"""
Tests for running the whole pipeline over several PDFs.
"""

from pathlib import Path

import pytest

from processors.paper_assembler import PaperArtifact, PaperAssembler, paper_filename
from processors.pipeline_driver import PipelineDriver
from processors.review_synthesizer import ReviewSynthesizer
from schemas import ExtractionResult, ReviewPaperResult
from tests.fakes import FakeExtractor, FakeLLMClient, FakeRasterizer, review_payload
from utils.errors import InferenceFailed, PipelineAborted, RasterizationFailed


class FakeAssembler:
    """Assembles every PDF except those mapped to an error"""

    def __init__(self, failures=None):
        self.failures = failures or {}
        self.calls = []

    def assemble(self, pdf_path, output_dir, paper_index=None):
        self.calls.append(str(pdf_path))
        if str(pdf_path) in self.failures:
            raise self.failures[str(pdf_path)]
        path = Path(output_dir) / paper_filename(pdf_path, paper_index)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"content of {pdf_path}\nPage 1\n\n")
        return PaperArtifact(title=f"Title of {pdf_path}", path=path, page_count=1, pdf_path=str(pdf_path))


class EchoExtractor:
    """Page content names the PDF it came from"""

    def extract(self, page_image, timeout=None):
        return ExtractionResult(
            title=f"Title of {page_image.pdf_path}",
            authors=[],
            content=f"from {page_image.pdf_path}",
            createdAt=""
        )


class FakeSynthesizer:
    def __init__(self):
        self.calls = []

    def synthesize(self, papers, timeout=None):
        self.calls.append(list(papers))
        return ReviewPaperResult(title="Review", content="# Review\n\nBody [1] [2]", references=["[1] a", "[2] b"])


class TestRun:
    """Tests for PipelineDriver.run."""

    def test_second_paper_failure_aborts_before_synthesis(self, config, output_dir):
        cause = RasterizationFailed("pdftoppm exited with status 1", "p2.pdf")
        assembler = FakeAssembler(failures={"p2.pdf": cause})
        synthesizer = FakeSynthesizer()
        driver = PipelineDriver(config, assembler=assembler, synthesizer=synthesizer)

        with pytest.raises(PipelineAborted) as exc_info:
            driver.run(["p1.pdf", "p2.pdf"], output_dir)

        assert exc_info.value.paper_index == 1
        assert exc_info.value.cause is cause
        assert exc_info.value.pdf_path == "p2.pdf"
        assert synthesizer.calls == []
        assert not (output_dir / config.review_filename).exists()

    def test_first_failure_stops_remaining_papers(self, config, output_dir):
        assembler = FakeAssembler(failures={"p1.pdf": InferenceFailed("timeout")})
        driver = PipelineDriver(config, assembler=assembler, synthesizer=FakeSynthesizer())

        with pytest.raises(PipelineAborted) as exc_info:
            driver.run(["p1.pdf", "p2.pdf", "p3.pdf"], output_dir)

        assert exc_info.value.paper_index == 0
        assert assembler.calls == ["p1.pdf"]

    def test_success_writes_review_verbatim(self, config, output_dir):
        synthesizer = FakeSynthesizer()
        driver = PipelineDriver(config, assembler=FakeAssembler(), synthesizer=synthesizer)

        review_path = driver.run(["p1.pdf", "p2.pdf"], output_dir)

        assert review_path == output_dir / "review.md"
        assert review_path.read_text(encoding="utf-8") == "# Review\n\nBody [1] [2]"
        assert [paper.pdf_path for paper in synthesizer.calls[0]] == ["p1.pdf", "p2.pdf"]
        assert driver.last_report["references"] == 2
        assert [paper["pdf_path"] for paper in driver.last_report["papers"]] == ["p1.pdf", "p2.pdf"]

    def test_default_output_dir_from_config(self, config):
        driver = PipelineDriver(config, assembler=FakeAssembler(), synthesizer=FakeSynthesizer())

        review_path = driver.run(["p1.pdf"])

        assert review_path == Path(config.output_dir) / "review.md"

    def test_no_inputs(self, config):
        with pytest.raises(ValueError):
            PipelineDriver(config, assembler=FakeAssembler(), synthesizer=FakeSynthesizer()).run([])


class TestEndToEnd:
    """Real assembler and synthesizer wired to in-memory fakes."""

    def test_two_papers_into_review(self, config, tmp_path, output_dir):
        client = FakeLLMClient(payload=review_payload())
        assembler = PaperAssembler(
            config,
            rasterizer=FakeRasterizer(tmp_path / "work", page_count=2),
            extractor=FakeExtractor(["intro", "results"], titles=["First Page Title", "ignored"])
        )
        driver = PipelineDriver(config, assembler=assembler, synthesizer=ReviewSynthesizer(config, client=client))

        review_path = driver.run(["alpha.pdf", "beta.pdf"], output_dir)

        assert (output_dir / "00-alpha.md").read_text() == "intro\nPage 1\n\nresults\nPage 2\n\n"
        assert (output_dir / "01-beta.md").exists()
        messages = client.requests[0]["messages"]
        assert len(messages) == 3
        assert messages[1][0].startswith("Title: First Page Title\n\nintro\nPage 1")
        assert review_path.read_text(encoding="utf-8") == "# Review\n\nTransformers [1] and RNNs [2]."

    def test_same_stem_papers_both_reach_the_review(self, config, tmp_path, output_dir):
        client = FakeLLMClient(payload=review_payload())
        assembler = PaperAssembler(
            config,
            rasterizer=FakeRasterizer(tmp_path / "work", page_count=1),
            extractor=EchoExtractor()
        )
        driver = PipelineDriver(config, assembler=assembler, synthesizer=ReviewSynthesizer(config, client=client))
        first, second = str(Path("a/paper.pdf")), str(Path("b/paper.pdf"))

        driver.run([first, second], output_dir)

        messages = client.requests[0]["messages"]
        assert f"from {first}\nPage 1" in messages[1][0]
        assert f"from {second}\nPage 1" in messages[2][0]
        assert (output_dir / "00-paper.md").read_text() == f"from {first}\nPage 1\n\n"
        assert (output_dir / "01-paper.md").read_text() == f"from {second}\nPage 1\n\n"


class TestReviewFileCollision:
    """Tests keeping per-paper files and the review file apart."""

    def test_paper_named_review_keeps_its_own_file(self, config, output_dir):
        driver = PipelineDriver(config, assembler=FakeAssembler(), synthesizer=FakeSynthesizer())

        review_path = driver.run(["review.pdf"], output_dir)

        assert review_path == output_dir / "review.md"
        assert review_path.read_text(encoding="utf-8") == "# Review\n\nBody [1] [2]"
        assert (output_dir / "00-review.md").read_text() == "content of review.pdf\nPage 1\n\n"

    def test_colliding_review_filename_rejected_before_any_work(self, config, output_dir):
        config.review_filename = "00-review.md"
        assembler = FakeAssembler()
        synthesizer = FakeSynthesizer()
        driver = PipelineDriver(config, assembler=assembler, synthesizer=synthesizer)

        with pytest.raises(ValueError, match="would overwrite the review file"):
            driver.run(["review.pdf"], output_dir)

        assert assembler.calls == []
        assert synthesizer.calls == []

#!/usr/bin/env python3
"""
Kenkyu: research paper digestion and review synthesis
Main CLI interface
"""

import argparse
import json
import sys
from typing import List, Optional

from utils.config import get_config
from utils.errors import PipelineAborted, PipelineError
from utils.logger import setup_logger, logger
from processors.pipeline_driver import PipelineDriver


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Digest research papers into markdown and synthesize a review paper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples: kenkyu paper1.pdf paper2.pdf --out output
        """
    )

    parser.add_argument(
        'pdfs',
        nargs='+',
        help='Input PDF files, reviewed in the given order'
    )

    parser.add_argument(
        '--out', '-o',
        dest='output_dir',
        type=str,
        help='Output directory for per-paper markdown and the review (default: output)'
    )

    parser.add_argument(
        '--llm',
        type=str,
        choices=['openai', 'anthropic'],
        help='LLM provider to use'
    )

    parser.add_argument(
        '--model',
        type=str,
        help='Model identifier for the selected provider'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Console log level'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    args = build_parser().parse_args(argv)

    setup_logger(level=args.log_level)
    config = get_config()

    if args.llm:
        config.llm.provider = args.llm
    if args.model:
        if config.llm.provider == "anthropic":
            config.llm.claude_model = args.model
        else:
            config.llm.openai_model = args.model
    logger.info(f"✅ Using {config.llm.provider} ({config.llm.model})")

    try:
        pipeline = PipelineDriver(config)
        review_path = pipeline.run(args.pdfs, args.output_dir)
    except PipelineAborted as e:
        logger.error(f"Pipeline aborted: {e}")
        print(f"\n❌ Error: paper {e.paper_index + 1} ({e.pdf_path}) failed: {e.cause}", file=sys.stderr)
        return 1
    except (PipelineError, ValueError) as e:
        logger.error(f"Pipeline failed: {e}")
        print(f"\n❌ Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(pipeline.last_report, indent=2, ensure_ascii=False))
    print(f"\n✅ Success! Review saved to: {review_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Logging utilities for the paper digestion pipeline
"""

import sys
from loguru import logger
from rich.console import Console

# Configure console for rich output
console = Console(stderr=True)

# Configure logger
logger.remove()  # Remove default handler
logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level="INFO"
)


def log_extraction_result(extractor_name: str, success: bool, details: str = ""):
    """Log extraction result with appropriate formatting"""
    if success:
        logger.success(f"{extractor_name}: Extraction completed. {details}")
    else:
        logger.error(f"{extractor_name}: Extraction failed. {details}")


def log_step(step: str, description: str = ""):
    """Log a pipeline step"""
    logger.info(f"[STEP] {step}: {description}")
    console.print(f"[bold blue]→[/bold blue] {step}", style="bold")
    if description:
        console.print(f"  {description}", style="dim")


def setup_logger(level: str = "INFO", log_file: str = "kenkyu.log"):
    """
    Setup logger with specified level

    Args:
        level: Logging level for the console sink
        log_file: Rotating log file, always written at DEBUG level
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=level.upper()
    )
    logger.add(
        log_file,
        rotation="10 MB",
        retention="7 days",
        level="DEBUG"
    )
    return logger


__all__ = ['logger', 'console', 'log_extraction_result', 'log_step', 'setup_logger']

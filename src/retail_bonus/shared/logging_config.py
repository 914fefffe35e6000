"""Logging configuration for the bonus engine and its CLI."""
import logging
import sys


def configure_structured_logging(level: str = "INFO"):
    """Configure root logging; structured entries arrive pre-formatted as JSON."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",  # JSON already formatted
        stream=sys.stderr,
        force=True,
    )

    # Keep validation chatter out of the CLI output
    logging.getLogger("pydantic").setLevel(logging.WARNING)

"""Basic logging setup for the API process."""
import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level.upper())
        return  # already configured
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
    handler.setFormatter(formatter)
    root.setLevel(level.upper())
    root.addHandler(handler)

    # SDK clients are chatty at INFO.
    for noisy in ("httpx", "urllib3", "google_genai", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

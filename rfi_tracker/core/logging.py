import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once at startup."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("rfi_tracker").setLevel(level.upper())

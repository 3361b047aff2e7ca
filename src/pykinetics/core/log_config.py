import logging
import sys

def setup_logging(level=logging.INFO, format_string='%(asctime)s - %(name)s - %(levelname)s - %(message)s'):
    """Configures basic logging to stdout."""
    logging.basicConfig(
        level=level,
        format=format_string,
        stream=sys.stdout
    )

# Process-wide diagnostic log
logger = logging.getLogger("pykinetics")

def write_log(msg: str, level: int = logging.WARNING) -> None:
    """Write one line to the process-wide diagnostic log."""
    logger.log(level, msg.rstrip("\n"))

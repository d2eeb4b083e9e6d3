import logging
import os
import sys

# Log to stderr (unbuffered, better for containers)
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "DEBUG").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)

# httpx logs every request at INFO and httpcore dumps connection state at DEBUG
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.INFO)
logging.getLogger("slack_sdk").setLevel(logging.INFO)

logger = logging.getLogger("kbbot")

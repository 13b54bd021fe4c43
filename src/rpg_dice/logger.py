# rpg_dice/logger.py
import logging

from rich.logging import RichHandler

# Configure the RichHandler for readable console output
handler = RichHandler(show_time=False, rich_tracebacks=True, log_time_format="[%X]")

# Define the format for our log messages
FORMAT = "%(message)s"
formatter = logging.Formatter(FORMAT)
handler.setFormatter(formatter)

# Package logger; the level is adjusted once settings are loaded (see config.py)
logger = logging.getLogger("rpg_dice")
logger.setLevel(logging.INFO)

logger.addHandler(handler)

# Prevent the log messages from being duplicated by the root logger
logger.propagate = False

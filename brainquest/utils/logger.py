# brainquest/utils/logger.py
import logging
import sys
from brainquest.utils.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Engine, collaborators and endpoints all log through this one logger.
logger = logging.getLogger("brainquest")
logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

# Uvicorn's reloader re-imports this module; start from a clean handler list.
for existing in list(logger.handlers):
    logger.removeHandler(existing)

_stdout_handler = logging.StreamHandler(sys.stdout)
_stdout_handler.setFormatter(logging.Formatter(LOG_FORMAT))
logger.addHandler(_stdout_handler)

# Keep records out of the root logger so pytest and uvicorn do not print them twice.
logger.propagate = False

"""Terminal snake: a fixed-tick ASCII snake game for a raw-mode terminal."""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

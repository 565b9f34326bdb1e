"""exptrack - terminal client for a paginated expense-tracking REST backend."""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

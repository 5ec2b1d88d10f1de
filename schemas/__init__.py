"""
Pydantic schemas for records, events and API request/response validation.
"""

from .common import *
from .volunteer import *
from .mission import *
from .recognition import *
from .training import *
from .events import *
from .status import *
from .risk import *

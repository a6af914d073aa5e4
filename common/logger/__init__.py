# common/logger/__init__.py
from .logger import *
from .phase_timer import *

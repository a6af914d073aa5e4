# common/api_error/__init__.py
from .config_error import *
from .seeder_error import *

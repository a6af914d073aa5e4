# csv_seeder/loader/__init__.py
from .loader_config import *
from .records import *
from .sink import *
from .source import *
from .csv_loader import *

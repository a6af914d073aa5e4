# csv_seeder/db/__init__.py
from .db_manager import *
from .table_sink import *

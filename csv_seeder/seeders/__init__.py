# csv_seeder/seeders/__init__.py
from .csv_seeder import *
from .registry import *

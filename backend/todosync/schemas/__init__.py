# todosync/schemas/__init__.py
"""
Schema module initialization.
Exports all schema classes from submodules for convenient imports.
"""
from .auth import *
from .todo import *

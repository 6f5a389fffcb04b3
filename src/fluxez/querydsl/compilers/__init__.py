from .base import BaseCompiler
from .sql import SqlCompiler, sql_compiler
from .wire import WireCompiler, wire_compiler

__all__ = (
    "BaseCompiler",
    "SqlCompiler",
    "sql_compiler",
    "WireCompiler",
    "wire_compiler",
)

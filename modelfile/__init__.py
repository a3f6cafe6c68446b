"""
Model description language: scanner, parser and error reporting.
"""

from .errors import ErrorReporter, ModelDescriptionError
from .scanner import ModelScanner
from .parser import ModelDescription, ModelParser, parse_model, load_model

__all__ = [
    'ErrorReporter',
    'ModelDescriptionError',
    'ModelScanner',
    'ModelDescription',
    'ModelParser',
    'parse_model',
    'load_model'
]

"""
Reporting and output formatting
"""

from .console import ConsoleReporter
from .json_reporter import JSONReporter
from .text_reporter import TextReporter

__all__ = ["ConsoleReporter", "JSONReporter", "TextReporter"]

from typing import Optional


class StringAnalyzerError(Exception):
    """Base class for errors raised by the string analyzer."""


class TypeMismatch(StringAnalyzerError, TypeError):
    """Input that must be a string was something else."""

    def __init__(self, message: str = "value must be a string", received: Optional[type] = None):
        super().__init__(message)
        self.received = received


class Unparseable(StringAnalyzerError, ValueError):
    """No natural-language rule matched the sentence."""

    def __init__(self, sentence: str, message: str = "Unable to parse natural language query"):
        super().__init__(message)
        self.sentence = sentence


class InvalidFilter(StringAnalyzerError, ValueError):
    """An explicit filter parameter failed validation."""


class Conflict(StringAnalyzerError):
    """A record with the same identifier already exists."""

    def __init__(self, identifier: str):
        super().__init__("String already exists")
        self.identifier = identifier


class NotFound(StringAnalyzerError):
    """No record exists for the identifier."""

    def __init__(self, identifier: str, message: str = "String not found"):
        super().__init__(message)
        self.identifier = identifier

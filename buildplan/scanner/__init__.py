"""Scanner module for reading literal values out of JS/TS config files.

Public API:
    find_property(source, language, name) -> str | None
    find_nested_property(source, language, path) -> str | None
"""

from buildplan.scanner.ast_scanner import find_nested_property, find_property, language_for

__all__ = ["find_property", "find_nested_property", "language_for"]

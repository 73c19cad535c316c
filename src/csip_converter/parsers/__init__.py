"""Parsers for reading information packages."""

from .eark_package_parser import EARKPackageParser
from .mets_parser import METSParser

__all__ = ["EARKPackageParser", "METSParser"]

"""Compilers for serializing information packages."""

from .compiler import Compiler
from .eark_package_compiler import EARKPackageCompiler
from .mets_compiler import METSCompiler
from .premis_compiler import PREMISCompiler

__all__ = ["Compiler", "EARKPackageCompiler", "METSCompiler", "PREMISCompiler"]

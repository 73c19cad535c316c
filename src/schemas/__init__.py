"""Schema definitions for csip-converter."""

from .package import InformationPackage, IPAgent, IPFile, IPMetadata, IPType

__all__ = [
    "InformationPackage",
    "IPAgent",
    "IPFile",
    "IPMetadata",
    "IPType",
]

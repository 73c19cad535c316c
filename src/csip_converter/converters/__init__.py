"""Converters between SIP, AIP and DIP packages."""

from .aip_to_dip import AIPToDIPConverter
from .converter import PackageConverter
from .sip_to_aip import SIPToAIPConverter

__all__ = ["PackageConverter", "AIPToDIPConverter", "SIPToAIPConverter"]

"""Convert E-ARK information packages between SIP, AIP and DIP forms."""

__version__ = "1.0.0"

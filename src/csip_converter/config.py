"""Converter settings.

Settings are immutable and shared by every conversion a converter runs.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from schemas.package import IPAgent

from . import __version__

CSIP_PROFILE = "https://earkcsip.dilcis.eu/profile/E-ARK-CSIP.xml"
SIP_PROFILE = "https://earksip.dilcis.eu/profile/E-ARK-SIP.xml"
DIP_PROFILE = "https://earkdip.dilcis.eu/profile/E-ARK-DIP.xml"

SCHEMA_EARK_CSIP = "DILCISExtensionMETS.xsd"
SCHEMA_EARK_SIP = "DILCISExtensionSIPMETS.xsd"
SCHEMA_METS = "mets1_12.xsd"
SCHEMA_XLINK = "xlink.xsd"
SCHEMA_PREMIS = "premis.xsd"

DEFAULT_SCHEMAS = (SCHEMA_EARK_CSIP, SCHEMA_EARK_SIP, SCHEMA_METS, SCHEMA_XLINK)

SOFTWARE_VERSION_NOTE = "SOFTWARE VERSION"


class ConverterSettings(BaseModel):
    """Settings injected into the converters.

    Attributes:
        dip_profile: Profile URI given to every DIP
        default_schemas: Schema files injected when a source package has none
        schema_dir: Directory holding schema files; the bundled schemas are
            used when None
        staging_dir: Directory staging roots are created in; the system
            temp directory is used when None
        software_name: Name recorded for the converting software
        software_version: Version recorded for the converting software
    """

    model_config = ConfigDict(frozen=True)

    dip_profile: str = DIP_PROFILE
    default_schemas: tuple[str, ...] = DEFAULT_SCHEMAS
    schema_dir: Path | None = None
    staging_dir: Path | None = None
    software_name: str = "csip-converter"
    software_version: str = __version__

    def creator_agent(self, conversion: str) -> IPAgent:
        """Software-identity agent for one conversion (e.g. "SipToAip")."""
        return IPAgent(
            name=f"{self.software_name}-{conversion}",
            role="CREATOR",
            type="OTHER",
            other_type="SOFTWARE",
            note=self.software_version,
            note_type=SOFTWARE_VERSION_NOTE,
        )

    @property
    def sip_to_aip_agent(self) -> IPAgent:
        return self.creator_agent("SipToAip")

    @property
    def aip_to_dip_agent(self) -> IPAgent:
        return self.creator_agent("AipToDip")

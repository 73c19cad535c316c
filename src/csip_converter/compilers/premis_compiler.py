"""PREMIS Compiler for provenance records.

Writes a PREMIS 3.0 document describing the software agent that performed
a conversion.
"""

import logging
from pathlib import Path

from lxml import etree

logger = logging.getLogger(__name__)

PREMIS_NS = "http://www.loc.gov/premis/v3"
PREMIS_VERSION = "3.0"
PREMIS_FILENAME = "premis.xml"


def _premis(local: str) -> str:
    return f"{{{PREMIS_NS}}}{local}"


class PREMISCompiler:
    """Compile PREMIS agent records."""

    def compile_agent(
        self,
        destination: Path,
        name: str,
        agent_type: str = "Software",
        version: str | None = None,
    ) -> Path:
        """Write a PREMIS document holding a single agent.

        Args:
            destination: File to write
            name: Agent name, also used as its local identifier
            agent_type: PREMIS agentType value
            version: Agent version, omitted when None

        Returns:
            The destination path
        """
        root = etree.Element(_premis("premis"), nsmap={"premis": PREMIS_NS})
        root.set("version", PREMIS_VERSION)

        agent = etree.SubElement(root, _premis("agent"))
        identifier = etree.SubElement(agent, _premis("agentIdentifier"))
        id_type = etree.SubElement(identifier, _premis("agentIdentifierType"))
        id_type.text = "local"
        id_value = etree.SubElement(identifier, _premis("agentIdentifierValue"))
        id_value.text = name

        agent_name = etree.SubElement(agent, _premis("agentName"))
        agent_name.text = name
        type_el = etree.SubElement(agent, _premis("agentType"))
        type_el.text = agent_type
        if version:
            version_el = etree.SubElement(agent, _premis("agentVersion"))
            version_el.text = version

        destination.write_bytes(
            etree.tostring(
                root,
                xml_declaration=True,
                encoding="UTF-8",
                pretty_print=True,
            )
        )
        logger.debug(f"Wrote PREMIS agent record for {name} to {destination}")
        return destination

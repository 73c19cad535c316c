"""Information Package schemas.

An information package is the in-memory view of an E-ARK CSIP package while
it is staged on disk. Converters parse a source package into this model,
derive a new one from it, and hand the result to a compiler that serializes it.

Directory structure of a built package:
    {package_id}/
    ├── METS.xml                  # package manifest
    ├── metadata/
    │   ├── descriptive/          # descriptive_metadata
    │   └── preservation/         # preservation_metadata
    ├── schemas/                  # schemas
    └── submission/               # submissions
"""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator


class IPType(str, Enum):
    """OAIS package type declared in the manifest."""

    SIP = "SIP"
    AIP = "AIP"
    DIP = "DIP"


class IPFile(BaseModel):
    """A file that will be placed inside a package.

    Attributes:
        path: Location of the file on disk
        name: File name inside the package (defaults to the on-disk name)
    """

    path: Path
    name: str = ""

    @model_validator(mode="after")
    def _default_name(self) -> "IPFile":
        if not self.name:
            self.name = self.path.name
        return self


class IPMetadata(BaseModel):
    """A metadata record referenced from the manifest.

    Attributes:
        file: The record's file
        metadata_type: METS MDTYPE of the record (e.g. "DC", "PREMIS", "OTHER")
    """

    file: IPFile
    metadata_type: str = "OTHER"


class IPAgent(BaseModel):
    """A provenance agent listed in the manifest header.

    Attributes:
        name: Agent name
        role: METS agent role (e.g. "CREATOR")
        type: METS agent type (e.g. "OTHER", "ORGANIZATION")
        other_type: Free-text type when type is "OTHER" (e.g. "SOFTWARE")
        note: Agent note (a version string for software agents)
        note_type: CSIP note type (e.g. "SOFTWARE VERSION")
    """

    model_config = ConfigDict(frozen=True)

    name: str
    role: str = "CREATOR"
    type: str = "OTHER"
    other_type: str | None = None
    note: str | None = None
    note_type: str | None = None


class InformationPackage(BaseModel):
    """An E-ARK information package.

    Attributes:
        id: Package identifier (METS OBJID and package directory name)
        type: OAIS package type
        profile: URI of the conformance profile the package claims
        base_path: Package directory while the package is staged
        created: Creation timestamp written to the manifest header
        descriptive_metadata: Descriptive metadata records, in order
        preservation_metadata: Preservation metadata records, in order
        schemas: Schema files, unique by name
        agents: Provenance agents, in order
        submissions: Bundled predecessor packages
        zip_entries: Archive entry names relative to the package root,
            set once the package has been packed
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str
    type: IPType
    profile: str
    base_path: Path | None = None
    created: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    descriptive_metadata: list[IPMetadata] = []
    preservation_metadata: list[IPMetadata] = []
    schemas: list[IPFile] = []
    agents: list[IPAgent] = []
    submissions: list[IPFile] = []
    zip_entries: list[str] = []

    def add_descriptive_metadata(self, metadata: IPMetadata) -> None:
        self.descriptive_metadata.append(metadata)

    def add_preservation_metadata(self, metadata: IPMetadata) -> None:
        self.preservation_metadata.append(metadata)

    def add_schema(self, schema: IPFile) -> bool:
        """Register a schema file unless one with the same name exists.

        Returns:
            True if the schema was added, False if it was a duplicate
        """
        if any(s.name == schema.name for s in self.schemas):
            return False
        self.schemas.append(schema)
        return True

    def add_agent(self, agent: IPAgent) -> None:
        self.agents.append(agent)

    def add_submission(self, submission: IPFile) -> None:
        self.submissions.append(submission)

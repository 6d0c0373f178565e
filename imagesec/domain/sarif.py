"""SARIF 2.1.0 document models.

Only the subset emitted by the normalizer is modelled; unknown keys from
tools that already speak SARIF are kept (``extra="allow"``) so pass-through
runs survive a load/dump cycle untouched.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"
SARIF_VERSION = "2.1.0"


class _SarifModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class SarifMessage(_SarifModel):
    text: str


class SarifArtifactLocation(_SarifModel):
    uri: str
    uriBaseId: str | None = None


class SarifRegion(_SarifModel):
    startLine: int


class SarifPhysicalLocation(_SarifModel):
    artifactLocation: SarifArtifactLocation
    region: SarifRegion | None = None


class SarifLocation(_SarifModel):
    physicalLocation: SarifPhysicalLocation


class SarifRule(_SarifModel):
    id: str
    shortDescription: SarifMessage | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


class SarifDriver(_SarifModel):
    name: str
    informationUri: str | None = None
    version: str | None = None
    semanticVersion: str | None = None
    rules: list[SarifRule] = Field(default_factory=list)


class SarifTool(_SarifModel):
    driver: SarifDriver


class SarifResult(_SarifModel):
    ruleId: str | None = None
    level: str = "warning"
    message: SarifMessage
    locations: list[SarifLocation] = Field(default_factory=list)
    partialFingerprints: dict[str, str] = Field(default_factory=dict)
    properties: dict[str, Any] = Field(default_factory=dict)


class SarifInvocation(_SarifModel):
    executionSuccessful: bool = True
    startTimeUtc: str | None = None


class SarifRun(_SarifModel):
    tool: SarifTool
    results: list[SarifResult] = Field(default_factory=list)
    invocations: list[SarifInvocation] = Field(default_factory=list)
    originalUriBaseIds: dict[str, Any] = Field(default_factory=dict)


class SarifReport(_SarifModel):
    schema_uri: str = Field(default=SARIF_SCHEMA, alias="$schema")
    version: str = SARIF_VERSION
    runs: list[SarifRun] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)

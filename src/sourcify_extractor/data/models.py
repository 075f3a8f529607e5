"""
Data models for registry payloads and verification requests.

Registry payloads are validated with Pydantic; every model is transient and
owned by the worker processing the contract.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

SOLIDITY = "Solidity"
METADATA_FILE = "metadata.json"


class ContractListing(BaseModel):
    """Addresses of verified contracts on one chain."""
    model_config = ConfigDict(extra="ignore")

    full: List[str] = Field(default_factory=list)
    partial: List[str] = Field(default_factory=list)

    def addresses(self) -> List[str]:
        """Full matches followed by partial matches, duplicates kept."""
        return [*self.full, *self.partial]


class CompilerInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    version: str


class SourceFile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: str


class ContractInfo(BaseModel):
    """Full-match contract payload returned by the registry."""
    model_config = ConfigDict(extra="ignore")

    compiler: CompilerInfo
    language: str
    sources: Dict[str, SourceFile] = Field(default_factory=dict)
    settings: Any = None
    files: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_solidity(self) -> bool:
        return self.language.lower() == SOLIDITY.lower()


class StandardJsonInput(BaseModel):
    """Compiler standard-json input: sources plus opaque settings."""

    language: str = SOLIDITY
    sources: Dict[str, str]
    settings: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language,
            "sources": {path: {"content": content} for path, content in self.sources.items()},
            "settings": self.settings,
        }

    def serialize(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def parse(cls, text: str) -> "StandardJsonInput":
        data = json.loads(text)
        return cls(
            language=data["language"],
            sources={path: source["content"] for path, source in data["sources"].items()},
            settings=data.get("settings"),
        )


class BytecodeType(str, Enum):
    """Wire values understood by the verification service."""
    CREATION = "CREATION_INPUT"
    RUNTIME = "DEPLOYED_BYTECODE"


class VerificationRequest(BaseModel):
    """Standard-json verification request sent downstream."""
    model_config = ConfigDict(populate_by_name=True)

    bytecode: str
    bytecode_type: BytecodeType = Field(BytecodeType.CREATION, alias="bytecodeType")
    compiler_version: str = Field(..., alias="compilerVersion")
    input: str
    metadata: str

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ContractOutcome(str, Enum):
    VERIFIED = "verified"
    SKIPPED = "skipped"


@dataclass
class ChainReport:
    """Counters collected by one chain worker."""
    chain_id: int
    verified: int = 0
    skipped: int = 0
    failed: int = 0
    listing_failed: bool = False

    @property
    def processed(self) -> int:
        return self.verified + self.skipped + self.failed

    def record(self, outcome: ContractOutcome) -> None:
        if outcome is ContractOutcome.VERIFIED:
            self.verified += 1
        else:
            self.skipped += 1


@dataclass
class RunSummary:
    """Aggregated outcome of every chain worker in a run."""
    reports: List[ChainReport] = field(default_factory=list)

    @property
    def verified(self) -> int:
        return sum(r.verified for r in self.reports)

    @property
    def skipped(self) -> int:
        return sum(r.skipped for r in self.reports)

    @property
    def failed(self) -> int:
        return sum(r.failed for r in self.reports)

    @property
    def chains_without_listing(self) -> List[int]:
        return [r.chain_id for r in self.reports if r.listing_failed]

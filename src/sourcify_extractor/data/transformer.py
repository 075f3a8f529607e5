"""
Turn registry contract payloads into standard-json verification requests.

Every step either returns the next value or raises a typed ExtractionError,
so callers can tell a malformed payload from a missing field.
"""

import json
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from ..exceptions import DecodeError, MissingFieldError
from .models import (
    METADATA_FILE,
    SOLIDITY,
    BytecodeType,
    ContractInfo,
    ContractListing,
    SourceFile,
    StandardJsonInput,
    VerificationRequest,
)


def parse_listing(payload: Any) -> ContractListing:
    try:
        return ContractListing.model_validate(payload)
    except ValidationError as e:
        raise DecodeError(f"malformed contract listing: {e}") from e


def parse_contract_info(payload: Any) -> ContractInfo:
    try:
        return ContractInfo.model_validate(payload)
    except ValidationError as e:
        raise DecodeError(f"malformed contract info: {e}") from e


def extract_bytecode(metadata_text: str) -> str:
    """Creation bytecode stored in the ``bytecode`` field of metadata.json."""
    try:
        metadata = json.loads(metadata_text)
    except ValueError as e:
        raise DecodeError(f"{METADATA_FILE} is not valid JSON: {e}") from e

    bytecode = metadata.get("bytecode") if isinstance(metadata, dict) else None
    if not isinstance(bytecode, str):
        raise MissingFieldError("bytecode", "missing bytecode")
    return bytecode


def project_sources(sources: Mapping[str, SourceFile]) -> Dict[str, str]:
    return {path: source.content for path, source in sources.items()}


def build_standard_json_input(sources: Mapping[str, str], settings: Any) -> StandardJsonInput:
    return StandardJsonInput(language=SOLIDITY, sources=dict(sources), settings=settings)


def build_verification_request(info: ContractInfo) -> Optional[VerificationRequest]:
    """
    Build the verification request for a contract.

    Args:
        info: Parsed contract payload

    Returns:
        The request, or None when the contract is not written in Solidity

    Raises:
        MissingFieldError: If metadata.json or its bytecode is absent
        DecodeError: If metadata.json is not valid JSON
    """
    if not info.is_solidity:
        return None

    metadata_text = info.files.get(METADATA_FILE)
    if metadata_text is None:
        raise MissingFieldError(METADATA_FILE, "missing metadata document")
    bytecode = extract_bytecode(metadata_text)

    standard_json = build_standard_json_input(project_sources(info.sources), info.settings)

    return VerificationRequest(
        bytecode=bytecode,
        bytecode_type=BytecodeType.CREATION,
        compiler_version=info.compiler.version,
        input=standard_json.serialize(),
        metadata=metadata_text,
    )

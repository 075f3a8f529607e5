"""
Tests for turning registry payloads into verification requests.
"""
import json

import pytest

from sourcify_extractor.data.models import BytecodeType, ContractListing, StandardJsonInput
from sourcify_extractor.data.transformer import (
    build_standard_json_input,
    build_verification_request,
    extract_bytecode,
    parse_contract_info,
    parse_listing,
)
from sourcify_extractor.exceptions import DecodeError, MissingFieldError

from conftest import BYTECODE, METADATA, SETTINGS, contract_payload


class TestBuildVerificationRequest:
    """Test cases for build_verification_request."""

    def test_solidity_contract(self):
        info = parse_contract_info(contract_payload())
        request = build_verification_request(info)

        assert request is not None
        assert request.bytecode == BYTECODE
        assert request.bytecode_type is BytecodeType.CREATION
        assert request.compiler_version == "v0.8.19+commit.7dd6d404"
        assert request.metadata == METADATA

        standard_json = json.loads(request.input)
        assert standard_json["language"] == "Solidity"
        assert standard_json["settings"] == SETTINGS
        assert standard_json["sources"] == {
            "contracts/Token.sol": {"content": "contract Token {}"},
            "contracts/Lib.sol": {"content": "library Lib {}"},
        }

    def test_language_check_is_case_insensitive(self):
        info = parse_contract_info(contract_payload(language="SOLIDITY"))
        assert build_verification_request(info) is not None

    def test_vyper_is_skipped(self):
        info = parse_contract_info(contract_payload(language="Vyper", files={}))
        assert build_verification_request(info) is None

    def test_missing_metadata_document(self):
        info = parse_contract_info(contract_payload(files={"other.json": "{}"}))
        with pytest.raises(MissingFieldError) as exc_info:
            build_verification_request(info)
        assert exc_info.value.field == "metadata.json"

    def test_missing_bytecode(self):
        info = parse_contract_info(contract_payload(files={"metadata.json": json.dumps({"compiler": {}})}))
        with pytest.raises(MissingFieldError) as exc_info:
            build_verification_request(info)
        assert exc_info.value.field == "bytecode"

    def test_settings_passed_through_untouched(self):
        payload = contract_payload()
        payload["settings"] = {"libraries": {"": {"Lib": "0x00"}}, "unknownKey": [1, None, "x"]}
        request = build_verification_request(parse_contract_info(payload))
        assert json.loads(request.input)["settings"] == payload["settings"]

    def test_payload_uses_wire_names(self):
        request = build_verification_request(parse_contract_info(contract_payload()))
        payload = request.to_payload()
        assert set(payload) == {"bytecode", "bytecodeType", "compilerVersion", "input", "metadata"}
        assert payload["bytecodeType"] == "CREATION_INPUT"


class TestExtractBytecode:
    """Test cases for extract_bytecode."""

    def test_invalid_json(self):
        with pytest.raises(DecodeError):
            extract_bytecode("{not json")

    def test_non_string_bytecode(self):
        with pytest.raises(MissingFieldError):
            extract_bytecode(json.dumps({"bytecode": 1234}))

    def test_non_object_document(self):
        with pytest.raises(MissingFieldError):
            extract_bytecode(json.dumps(["0x00"]))


class TestStandardJsonInput:
    """Test cases for StandardJsonInput serialization."""

    def test_round_trip(self):
        sources = {"a/A.sol": "contract A {}", "b/B.sol": "contract B { uint x; }"}
        settings = {"optimizer": {"enabled": False}, "evmVersion": "paris", "remappings": ["x=y"]}

        original = build_standard_json_input(sources, settings)
        restored = StandardJsonInput.parse(original.serialize())

        assert restored.language == "Solidity"
        assert restored.sources == sources
        assert restored.settings == settings


class TestParsing:
    """Test cases for payload parsing."""

    def test_listing_keeps_duplicates_and_order(self):
        listing = parse_listing({"full": ["0xb", "0xa"], "partial": ["0xa", "0xc"]})
        assert listing.addresses() == ["0xb", "0xa", "0xa", "0xc"]

    def test_listing_defaults_to_empty(self):
        assert parse_listing({}).addresses() == []
        assert ContractListing().addresses() == []

    def test_malformed_listing(self):
        with pytest.raises(DecodeError):
            parse_listing({"full": "0xa"})

    def test_malformed_contract_info(self):
        payload = contract_payload()
        del payload["compiler"]
        with pytest.raises(DecodeError):
            parse_contract_info(payload)

    def test_source_metadata_is_dropped(self):
        info = parse_contract_info(contract_payload())
        assert info.sources["contracts/Token.sol"].content == "contract Token {}"
        assert not hasattr(info.sources["contracts/Token.sol"], "keccak256")

"""
Shared fixtures: a fake Sourcify registry and verification service served by aiohttp.
"""
import json
import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple, Union

import pytest
from aiohttp import web

from sourcify_extractor.core.forwarder import VERIFY_STANDARD_JSON_PATH
from sourcify_extractor.data.models import VerificationRequest
from sourcify_extractor.exceptions import RpcError
from sourcify_extractor.utils.async_client import ResilientHttpClient

BYTECODE = "0x6080604052"
METADATA = json.dumps({"bytecode": BYTECODE, "compiler": {"version": "0.8.19"}})

SETTINGS = {
    "optimizer": {"enabled": True, "runs": 200},
    "outputSelection": {"*": {"*": ["abi", "evm.bytecode"]}},
}


def contract_payload(language: str = "Solidity", files: Optional[Dict[str, str]] = None,
                     bytecode: Optional[str] = None) -> Dict[str, Any]:
    """Contract info as returned by the full_match endpoint."""
    if files is None:
        metadata = METADATA if bytecode is None else json.dumps({"bytecode": bytecode})
        files = {"metadata.json": metadata}
    return {
        "compiler": {"version": "v0.8.19+commit.7dd6d404"},
        "language": language,
        "sources": {
            "contracts/Token.sol": {"content": "contract Token {}", "keccak256": "0x01"},
            "contracts/Lib.sol": {"content": "library Lib {}"},
        },
        "settings": SETTINGS,
        "files": files,
    }


class Scripted:
    """Responses served in order; the last one repeats."""

    def __init__(self, *entries: Any) -> None:
        self.entries = list(entries)

    def next(self) -> Any:
        if len(self.entries) > 1:
            return self.entries.pop(0)
        return self.entries[0]


class RawBody:
    """Body served verbatim as application/json; bytes are sent undecoded."""

    def __init__(self, text: Union[str, bytes]) -> None:
        self.text = text


class FakeServices:
    """Scripted responses for the registry and the verification service.

    ``listings`` maps chain id to a payload or an HTTP status; ``contracts``
    maps (chain id, address) the same way. Unknown contracts answer 404.
    """

    def __init__(self) -> None:
        self.listings: Dict[int, Any] = {}
        self.contracts: Dict[Tuple[int, str], Any] = {}
        self.verify_status = 200
        self.hits: Counter = Counter()
        self.submissions: List[Dict[str, Any]] = []
        self.submission_headers: List[Dict[str, str]] = []

    @staticmethod
    def _respond(entry: Any) -> web.Response:
        if isinstance(entry, Scripted):
            entry = entry.next()
        if isinstance(entry, RawBody):
            if isinstance(entry.text, bytes):
                return web.Response(body=entry.text, content_type="application/json")
            return web.Response(text=entry.text, content_type="application/json")
        if isinstance(entry, int):
            return web.Response(status=entry, text=f"status {entry}")
        return web.json_response(entry)

    async def listing(self, request: web.Request) -> web.Response:
        chain_id = int(request.match_info["chain_id"])
        self.hits[("list", chain_id)] += 1
        return self._respond(self.listings.get(chain_id, 404))

    async def contract(self, request: web.Request) -> web.Response:
        key = (int(request.match_info["chain_id"]), request.match_info["address"])
        self.hits[("contract",) + key] += 1
        return self._respond(self.contracts.get(key, 404))

    async def verify(self, request: web.Request) -> web.Response:
        self.hits["verify"] += 1
        self.submissions.append(await request.json())
        self.submission_headers.append({k.lower(): v for k, v in request.headers.items()})
        if self.verify_status != 200:
            return web.json_response({"message": "rejected"}, status=self.verify_status)
        return web.json_response({"status": "SUCCESS"})

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/contracts/list/{chain_id}", self.listing)
        app.router.add_get("/contracts/full_match/{chain_id}/{address}", self.contract)
        app.router.add_post(VERIFY_STANDARD_JSON_PATH, self.verify)
        return app


class RecordingForwarder:
    """Forwarder double keeping submitted requests in memory."""

    def __init__(self, fail_for: Optional[set] = None) -> None:
        self.requests: List[VerificationRequest] = []
        self.fail_for = fail_for or set()

    async def submit(self, request: VerificationRequest) -> Dict[str, Any]:
        self.requests.append(request)
        if request.bytecode in self.fail_for:
            raise RpcError("verification rejected", status=400)
        return {"status": "SUCCESS"}


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo handler/propagation changes made by setup_logger."""
    logger = logging.getLogger("sourcify_extractor")
    yield
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def services():
    return FakeServices()


@pytest.fixture
async def server(aiohttp_server, services):
    return await aiohttp_server(services.app())


@pytest.fixture
def base_url(server):
    return str(server.make_url("")).rstrip("/")


@pytest.fixture
async def client():
    async with ResilientHttpClient(max_retries=3, retry_delay=0.01, max_retry_delay=0.02) as http:
        yield http

"""Submission of verification requests to eth-bytecode-db."""

from typing import Any, Dict, Optional

from ..exceptions import ExtractionError, RpcError
from ..data.models import VerificationRequest
from ..utils.async_client import ResilientHttpClient
from ..utils.logger import get_logger

VERIFY_STANDARD_JSON_PATH = "/api/v2/verifier/solidity/sources:verify-standard-json"
API_KEY_HEADER = "x-api-key"

logger = get_logger('forwarder')


class VerificationForwarder:
    """Thin wrapper over the verification service's standard-json endpoint.

    Submissions are never retried: the service is not assumed to be
    idempotent, so a failure is reported once and left to the caller.
    """

    def __init__(self, client: ResilientHttpClient, api_key: Optional[str] = None) -> None:
        self.client = client
        self.api_key = api_key

    @classmethod
    def from_url(cls, base_url: str, api_key: Optional[str] = None,
                 timeout: Optional[float] = None) -> 'VerificationForwarder':
        """Forwarder with its own unthrottled, non-retrying client."""
        client = ResilientHttpClient(base_url=base_url, timeout=timeout, max_retries=0)
        return cls(client, api_key=api_key)

    async def __aenter__(self) -> 'VerificationForwarder':
        await self.client.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.client.close()

    async def submit(self, request: VerificationRequest) -> Dict[str, Any]:
        """Submit a verification request.

        Raises:
            RpcError: If the service could not be reached or rejected the request
        """
        headers = {API_KEY_HEADER: self.api_key} if self.api_key else None
        try:
            response = await self.client.post_json(
                VERIFY_STANDARD_JSON_PATH, request.to_payload(), headers=headers, retry=False
            )
        except ExtractionError as e:
            raise RpcError(f"verification request failed: {e}", status=getattr(e, "status", None)) from e

        if not isinstance(response, dict):
            response = {"response": response}
        logger.debug("Verification service answered: %s", response.get("status"))
        return response

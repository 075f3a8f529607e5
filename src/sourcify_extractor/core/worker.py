"""
Per-chain extraction worker.

A worker walks the registry listing of one chain and forwards each Solidity
contract to the verification service, one address at a time. Failures are
isolated: a broken contract is logged and skipped, and a chain whose listing
cannot be fetched is treated as empty.
"""

from ..exceptions import ExtractionError
from ..data.models import ChainReport, ContractListing, ContractOutcome
from ..data.transformer import build_verification_request, parse_contract_info, parse_listing
from ..utils.async_client import ResilientHttpClient
from ..utils.logger import get_logger
from .forwarder import VerificationForwarder

logger = get_logger('worker')


class ChainWorker:
    """Extracts contracts of a chain using the shared client and forwarder."""

    def __init__(self, client: ResilientHttpClient, forwarder: VerificationForwarder,
                 registry_url: str) -> None:
        self.client = client
        self.forwarder = forwarder
        self.registry_url = registry_url.rstrip('/')

    def listing_url(self, chain_id: int) -> str:
        return f"{self.registry_url}/contracts/list/{chain_id}"

    def contract_url(self, chain_id: int, address: str) -> str:
        return f"{self.registry_url}/contracts/full_match/{chain_id}/{address}"

    async def fetch_listing(self, chain_id: int) -> ContractListing:
        payload = await self.client.get_json(self.listing_url(chain_id))
        return parse_listing(payload)

    async def extract_chain(self, chain_id: int) -> ChainReport:
        """Extract every listed contract of a chain.

        Never raises for registry or verification failures; they are logged
        and counted in the returned report.
        """
        report = ChainReport(chain_id=chain_id)
        logger.info("Extracting contracts for chain %d", chain_id)

        try:
            listing = await self.fetch_listing(chain_id)
        except ExtractionError as e:
            logger.warning("Failed to get contract list for chain %d: %s", chain_id, e)
            report.listing_failed = True
            return report

        # Addresses present in both lists are processed twice.
        addresses = listing.addresses()
        logger.info("Chain %d lists %d contracts (%d full, %d partial)",
                    chain_id, len(addresses), len(listing.full), len(listing.partial))

        for address in addresses:
            try:
                outcome = await self.extract_contract(chain_id, address)
            except ExtractionError as e:
                report.failed += 1
                logger.warning("Failed to extract contract %s on chain %d: %s", address, chain_id, e)
            except Exception:
                report.failed += 1
                logger.exception("Unexpected error extracting contract %s on chain %d", address, chain_id)
            else:
                report.record(outcome)

        logger.info("Finished chain %d: %d verified, %d skipped, %d failed",
                    chain_id, report.verified, report.skipped, report.failed)
        return report

    async def extract_contract(self, chain_id: int, address: str) -> ContractOutcome:
        """Fetch, transform and forward one contract.

        Raises:
            HttpError: If the contract info cannot be fetched
            DecodeError: If the payload or its metadata.json is malformed
            MissingFieldError: If metadata.json or its bytecode is absent
            RpcError: If the verification service fails
        """
        payload = await self.client.get_json(self.contract_url(chain_id, address))
        info = parse_contract_info(payload)

        request = build_verification_request(info)
        if request is None:
            logger.debug("Skipping %s contract %s on chain %d", info.language, address, chain_id)
            return ContractOutcome.SKIPPED

        await self.forwarder.submit(request)
        logger.info("Verified contract %s on chain %d", address, chain_id)
        return ContractOutcome.VERIFIED

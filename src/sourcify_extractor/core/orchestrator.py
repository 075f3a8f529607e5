"""
Run one chain worker per configured chain id and join them.

Business-level failures are absorbed inside the workers. Anything that still
escapes a worker task means the worker could not run at all; those are
collected after every task has joined and raised as WorkerCrashedError.
"""

import asyncio
from typing import Dict, Iterable, List

from ..config import Settings
from ..data.models import ChainReport, RunSummary
from ..exceptions import WorkerCrashedError
from ..utils.async_client import ResilientHttpClient
from ..utils.logger import get_logger
from ..utils.rate_limiter import TokenBucket
from .forwarder import VerificationForwarder
from .worker import ChainWorker

logger = get_logger('orchestrator')


async def run_workers(worker: ChainWorker, chain_ids: Iterable[int]) -> RunSummary:
    """Run ``worker.extract_chain`` concurrently for every chain id.

    Raises:
        WorkerCrashedError: If any task raised instead of returning a report
    """
    chain_ids = list(chain_ids)
    tasks = [
        asyncio.create_task(worker.extract_chain(chain_id), name=f"extract-chain-{chain_id}")
        for chain_id in chain_ids
    ]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    reports: List[ChainReport] = []
    failures: Dict[int, BaseException] = {}
    for chain_id, result in zip(chain_ids, results):
        if isinstance(result, BaseException):
            logger.error("Worker for chain %d crashed: %r", chain_id, result)
            failures[chain_id] = result
        else:
            reports.append(result)

    if failures:
        raise WorkerCrashedError(failures)
    return RunSummary(reports=reports)


async def run(settings: Settings) -> RunSummary:
    """Extract every configured chain using one shared client and forwarder."""
    rate_limiter = TokenBucket.per_second(settings.limit_requests_per_second)
    client = ResilientHttpClient(
        rate_limiter=rate_limiter,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
    )
    forwarder = VerificationForwarder.from_url(
        settings.eth_bytecode_db_url,
        api_key=settings.eth_bytecode_db_api_key,
        timeout=settings.request_timeout,
    )

    async with client, forwarder:
        worker = ChainWorker(client, forwarder, settings.sourcify_url)
        summary = await run_workers(worker, settings.chains)

    log_summary(summary)
    return summary


def log_summary(summary: RunSummary) -> None:
    for report in summary.reports:
        logger.info(
            "Chain %d: %d verified, %d skipped, %d failed%s",
            report.chain_id, report.verified, report.skipped, report.failed,
            " (listing unavailable)" if report.listing_failed else "",
        )
    logger.info(
        "Run finished: %d chains, %d verified, %d skipped, %d failed",
        len(summary.reports), summary.verified, summary.skipped, summary.failed,
    )

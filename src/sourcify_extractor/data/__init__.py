"""
Data Package

Registry payload models and their transformation into verification requests.
"""

from .models import (
    BytecodeType,
    ChainReport,
    ContractInfo,
    ContractListing,
    ContractOutcome,
    RunSummary,
    StandardJsonInput,
    VerificationRequest,
)
from .transformer import build_standard_json_input, build_verification_request

__all__ = [
    'BytecodeType',
    'ChainReport',
    'ContractInfo',
    'ContractListing',
    'ContractOutcome',
    'RunSummary',
    'StandardJsonInput',
    'VerificationRequest',
    'build_standard_json_input',
    'build_verification_request',
]

"""
Core Package

Chain workers, the verification forwarder and the run orchestrator.
"""

from .forwarder import VerificationForwarder
from .worker import ChainWorker

__all__ = ['ChainWorker', 'VerificationForwarder']

"""
Sourcify extractor

Copies contracts verified on Sourcify into eth-bytecode-db, one concurrent
worker per chain.
"""

__version__ = "0.1.0"

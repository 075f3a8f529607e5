"""
sourcify-extractor CLI Package

The console script entry point is ``sourcify_extractor.cli.main:main``.
"""

"""Importable contracts, providers and scanners used by the test suite."""

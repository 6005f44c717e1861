"""Shared test fixtures package.

Provides the fake host and manifest helpers used by all test suites.
"""

"""Test suite for the project workspace core.

Unit tests cover models, the role table, attachment rules and the
reconciliation functions. Integration tests drive the state manager,
the HTTP repository and the CLI against an in-memory fake of the API.
Run with `pytest` from the project root.
"""

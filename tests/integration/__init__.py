"""Integration test package.

These tests exercise the workspace through the real HTTP client with
requests answered by ``tests.fakes.FakeWorkspaceApi``; no network is used.
"""

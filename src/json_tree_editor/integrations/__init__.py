"""Integrations subpackage for json-tree-editor.

Contains the pytest plugin (auto-discovered via the pytest11 entry point)
that gives hosts ready-made fixtures for testing their own integration.
"""

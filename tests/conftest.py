"""
Root pytest configuration for VOICEGIT tests.
"""

pytest_plugins = ["tests.fixtures.fixtures"]

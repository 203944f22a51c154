"""
VOICEGIT Test Suite

This package contains all tests for the VOICEGIT voice workflow commands.

Test Organization:
    tests/
    ├── __init__.py          # This file
    ├── conftest.py          # Loads the shared fixtures
    ├── fixtures/            # Mock collaborators and audio file helpers
    ├── integration/         # CLI flows against the local file system
    └── unit/                # Unit tests (no external services)

Running Tests:
    # Run all tests
    pytest tests/

    # Run integration tests only
    pytest tests/integration/ -m integration

    # Run with coverage
    pytest tests/ --cov=voicegit --cov=services --cov-report=html

Requirements:
    pip install -e ".[test]"
"""

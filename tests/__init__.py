"""
VaidyaPortal Test Suite
=======================

This package contains all tests for the VaidyaPortal doctor backend.

Test Structure:
- test_api/: API endpoint tests for FastAPI routes
- test_services/: Service layer tests against an in-memory database
- test_tools/: Notification and translation tool tests
- conftest.py: Shared pytest fixtures

Running Tests:
    # Run all tests
    pytest

    # Run specific test module
    pytest tests/test_services/

    # Run only marked tests
    pytest -m "unit"
    pytest -m "api"
"""

"""
Test Suite

Structure:
    tests/
    ├── __init__.py         # This file
    ├── conftest.py         # Pytest fixtures
    ├── fakes.py            # In-memory repositories, change feed and model
    ├── unit/               # Gate, notifier, summarization and service tests
    └── integration/        # API and page tests through TestClient

To run tests:
    pytest tests/
    pytest tests/unit/
    pytest tests/integration/
"""

# =============================================================================
# PR ASSIGNEE - TEST PACKAGE
# =============================================================================
"""
Test Package

Test Structure:
    tests/
    ├── __init__.py              # This file
    ├── conftest.py              # Shared fixtures
    ├── test_candidates.py       # Candidate file parsing
    ├── test_selector.py         # Assignee selector decision chain
    ├── test_client.py           # GitHub REST client
    ├── test_events.py           # Event payload loading
    ├── test_main.py             # Configuration and exit status
    └── test_logger.py           # Logging setup

Running Tests:
    pytest tests/ -v
"""

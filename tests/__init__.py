"""
Radio Hub Test Suite

Test Files:
- conftest.py: Pytest fixtures, HTTP doubles and configuration
- test_models.py: Station identity and serialization
- test_amg.py: AMG source (meta key derivation, fallback, metadata)
- test_ru101.py: 101.ru source (parsing, crawl, session, stream, metadata)
- test_service.py: StationService cache and dispatch
- test_settings.py: Settings store
- test_commands.py: Command layer error translation
- test_api.py: Flask JSON endpoints
- test_scheduler.py: Background refresh wrapper
- test_cli.py: Command-line entry point
- test_locks.py: Reader-writer lock
- test_logging_setup.py: Logging configuration

Running Tests:
    # Run all tests
    pytest

    # Run specific test file
    pytest tests/test_ru101.py

    # Run only unit tests
    pytest -m unit

    # Skip slow tests
    pytest -m "not slow"
"""

# Star Registry Test Suite
"""
Comprehensive test suite including:
- Unit tests
- Integration tests
- Security tests (tampering, invalid inputs)

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""

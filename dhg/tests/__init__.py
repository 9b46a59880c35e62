"""
Tests for the district heating network model.

Run tests with pytest:
    pytest dhg/tests/ -v

Or run individual test files:
    pytest dhg/tests/test_convection.py -v
    pytest dhg/tests/test_simple_cycle.py -v
"""

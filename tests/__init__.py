"""
Test suite for swapcore

Contains:
- tests/unit/          : Unit tests for individual modules
"""

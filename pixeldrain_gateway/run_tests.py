#!/usr/bin/env python3
"""
Test runner script for the Pixeldrain Gateway.
"""

import subprocess
import sys
import os

# Project root holds pyproject.toml with the pytest configuration
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
TESTS_DIR = os.path.join("pixeldrain_gateway", "tests")


def run_pytest(*args: str) -> int:
    os.chdir(PROJECT_ROOT)
    return subprocess.run([sys.executable, "-m", "pytest", TESTS_DIR, "-v", *args]).returncode


def run_tests():
    """Run the test suite with coverage reporting."""
    print("Running tests with coverage...")
    result = run_pytest(
        "--cov=pixeldrain_gateway",
        "--cov-report=term-missing",
        "--cov-report=html:htmlcov",
        "--cov-report=xml:coverage.xml",
    )
    
    if result == 0:
        print("\n✅ All tests passed!")
        print("📊 Coverage report generated in htmlcov/")
        print("📄 XML coverage report generated as coverage.xml")
    else:
        print("\n❌ Some tests failed!")
        sys.exit(1)


def run_unit_tests_only():
    """Run only unit tests (skip integration tests)."""
    print("Running unit tests only...")
    result = run_pytest("-m", "not integration", "--cov=pixeldrain_gateway", "--cov-report=term-missing")
    
    if result == 0:
        print("\n✅ All unit tests passed!")
    else:
        print("\n❌ Some unit tests failed!")
        sys.exit(1)


def run_integration_tests():
    """Run only integration tests (client against the fake Pixeldrain server)."""
    print("Running integration tests...")
    result = run_pytest("-m", "integration")
    
    if result == 0:
        print("\n✅ All integration tests passed!")
    else:
        print("\n❌ Some integration tests failed!")
        sys.exit(1)


if __name__ == "__main__":
    if len(sys.argv) > 1:
        if sys.argv[1] == "unit":
            run_unit_tests_only()
        elif sys.argv[1] == "integration":
            run_integration_tests()
        else:
            print("Usage: python run_tests.py [unit|integration]")
            print("  unit: Run only unit tests")
            print("  integration: Run only integration tests")
            print("  (no args): Run all tests with coverage")
    else:
        run_tests()

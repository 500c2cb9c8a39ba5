"""
doit tasks for testing tinylang.
Run with: doit
"""

# Python test files
PYTHON_TESTS = [
    'tests/test_lexer.py',
    'tests/test_parser.py',
    'tests/test_evaluator.py',
    'tests/test_interpreter.py',
]


def task_test_python():
    """Run Python tests"""
    def run_python_tests():
        import pytest
        return pytest.main(['-v'] + PYTHON_TESTS) == 0

    return {
        'actions': [run_python_tests],
        'file_dep': PYTHON_TESTS,
        'verbosity': 2,
    }


def task_test():
    """Run all tests"""
    return {
        'actions': None,
        'task_dep': ['test_python'],
    }

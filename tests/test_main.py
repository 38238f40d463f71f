"""
Tests for the __main__.py entry point module
"""
import subprocess
import sys


def test_main_module_execution():
    """Test that the module can be executed via python -m"""
    result = subprocess.run(
        [sys.executable, '-m', 'branchver', '--help'],
        capture_output=True,
        text=True,
        timeout=10
    )
    
    assert result.returncode == 0
    assert 'usage:' in result.stdout.lower()
    assert '--ignore-branch-prefix' in result.stdout


def test_main_module_import():
    """Test that __main__ can be imported"""
    import branchver.__main__ as main_module
    assert hasattr(main_module, 'main')

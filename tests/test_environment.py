"""Test Environment

Environments are immutable; deriving one never changes its parent.
"""

from pathlib import Path
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from autocheck.environment import Environment
from autocheck.errors import ConfigurationError


def test_case_insensitive_lookup():
    env = Environment({"Dir": ".autocheck"})
    assert env["dir"] == ".autocheck"
    assert env["DIR"] == ".autocheck"
    assert "dIr" in env
    assert list(env) == ["dir"]


def test_derive_leaves_parent_unchanged():
    """Each derivation is a new snapshot"""
    parent = Environment({"dir": "a"})
    child = parent.derive({"dir": "b"}, extra=1)

    assert parent["dir"] == "a"
    assert "extra" not in parent
    assert child["dir"] == "b"
    assert child["extra"] == "1"


def test_environment_is_read_only():
    env = Environment({"dir": "a"})
    with pytest.raises(TypeError):
        env["dir"] = "b"


def test_substitute():
    env = Environment({"dir": "build", "#test": "3"})
    assert env.substitute("${dir}/Test${#test}.cpp") == "build/Test3.cpp"
    with pytest.raises(ConfigurationError):
        env.substitute("${nope}")

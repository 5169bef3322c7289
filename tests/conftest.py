"""
Test configuration and fixtures for the PipeScript test suite.
"""
import io
import sys
import textwrap
import pytest
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pipescript.commands import standard_registry
from pipescript.config import Config
from pipescript.environment import Environment
from pipescript.runtime import Runtime


@pytest.fixture
def stdout() -> io.StringIO:
    """Capture buffer handed to the runtime as its output stream."""
    return io.StringIO()


@pytest.fixture
def runtime(stdout) -> Runtime:
    """Return a runtime with the standard commands writing to ``stdout``."""
    return Runtime(stdout=stdout)


@pytest.fixture
def registry():
    return standard_registry()


@pytest.fixture
def env(registry, stdout) -> Environment:
    return Environment(config=Config(), stdout=stdout, registry=registry)


@pytest.fixture
def run_source(runtime):
    """Run dedented source and return the final value."""
    def _run(src: str):
        return runtime.run(textwrap.dedent(src))
    return _run

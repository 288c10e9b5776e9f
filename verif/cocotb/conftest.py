"""
MAC chain verification - global pytest configuration and fixtures.

The cocotb test modules under tests/ run inside the simulator, not under
pytest. test_runner.py builds the generated Verilog and launches them.
"""

import os
import shutil
import sys
from pathlib import Path

import pytest

# Add project paths to Python path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))
sys.path.insert(0, str(PROJECT_ROOT / "verif" / "cocotb" / "tests" / "mac_chain"))

# Simulator-side test modules; collected by cocotb, not pytest
collect_ignore_glob = ["tests/*"]

SIMULATOR_BINARIES = {
    "icarus": "iverilog",
    "verilator": "verilator",
}


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "simulator: marks tests requiring an HDL simulator")


def pytest_collection_modifyitems(config, items):  # noqa: ARG001
    """Skip simulator tests when the selected simulator is not installed."""
    sim = os.environ.get("SIM", "icarus").lower()
    binary = SIMULATOR_BINARIES.get(sim, sim)
    if shutil.which(binary) is not None:
        return

    skip_sim = pytest.mark.skip(reason=f"Requires {sim} simulator ({binary} not on PATH)")
    for item in items:
        if "simulator" in item.keywords:
            item.add_marker(skip_sim)


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def gen_dir(project_root) -> Path:
    """Return the generated RTL directory."""
    path = project_root / "gen"
    path.mkdir(exist_ok=True)
    return path


@pytest.fixture(scope="session")
def sim_name() -> str:
    """Return the current simulator name."""
    return os.environ.get("SIM", "icarus").lower()

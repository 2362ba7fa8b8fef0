"""Configures pytest further: slow and extreme marker handling for the arithmetic suites."""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import pytest

MARKERS = {
    "slow": "multi-second tests (large moduli, exhaustive sweeps), skipped with --skip-slow",
    "extreme": "tests on very large operands, only run with --run-extreme",
}


def pytest_addoption(parser):
    group = parser.getgroup("mprsa")
    group.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests")
    group.addoption("--run-extreme", action="store_true", default=False, help="run extremely slow tests")


def pytest_configure(config):
    for name, description in MARKERS.items():
        config.addinivalue_line("markers", f"{name}: {description}")


def pytest_collection_modifyitems(config, items):
    skips = {}
    if config.getoption("--skip-slow"):
        skips["slow"] = pytest.mark.skip(reason="Slow test: drop --skip-slow to run it")
    if not config.getoption("--run-extreme"):
        skips["extreme"] = pytest.mark.skip(reason="Extreme test: needs --run-extreme option")
    for item in items:
        for name, marker in skips.items():
            if name in item.keywords:
                item.add_marker(marker)

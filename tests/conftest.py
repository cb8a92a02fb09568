"""Pytest 配置"""

import pytest

from termide.state.reducer import create_initial_state
from termide.state.store import Store
from termide.telemetry import metrics


@pytest.fixture
def anyio_backend():
    """指定 anyio 只使用 asyncio backend"""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_metrics():
    """每次测试前重置指标"""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def initial_state():
    return create_initial_state()


@pytest.fixture
def store():
    return Store()

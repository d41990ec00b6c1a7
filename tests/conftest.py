from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from crawler.config import BehaviorVariant, CrawlerConfig  # noqa: E402
from tests.fakes import FakePhysics, make_config  # noqa: E402


@pytest.fixture(scope="session")
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def fake_physics() -> FakePhysics:
    return FakePhysics()


@pytest.fixture
def static_config() -> CrawlerConfig:
    return make_config(BehaviorVariant.CRAWLER_STATIC, target_walking_speed=5.0)

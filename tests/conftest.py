import sys
import os

# 将项目根目录加入 sys.path，测试可直接导入各模块
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from hypothesis import settings

from timing.clock import ManualClock

# CI profile: more examples for thorough testing
settings.register_profile("ci", max_examples=200)
# Dev profile: fewer examples for faster iteration
settings.register_profile("dev", max_examples=100)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "dev"))


@pytest.fixture
def manual_clock():
    """从 100 秒开始的虚拟时钟"""
    return ManualClock(start=100.0)

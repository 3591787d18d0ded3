import sys
from pathlib import Path

import pytest


SRC_PATH = Path(__file__).resolve().parents[1] / "src"
SRC_STR = str(SRC_PATH)
if SRC_STR not in sys.path:
    sys.path.insert(0, SRC_STR)


from islandrun.config import RunnerConfig  # noqa: E402
from islandrun.core.executor import TutorialExecutor  # noqa: E402
from islandrun.world import ScriptedWorld, Tile  # noqa: E402


@pytest.fixture
def world():
    return ScriptedWorld(position=Tile(3100, 3100, 0))


@pytest.fixture
def make_executor():
    def factory(world, stage="GIELINOR_GUIDE", **config):
        config.setdefault("seed", 0)
        return TutorialExecutor(world, config=RunnerConfig(**config), start_stage=stage)

    return factory

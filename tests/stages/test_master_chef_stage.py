from islandrun.core.macro_state import Stage
from islandrun.stages.master_chef import CHEF_ID, RANGE_ID, ChefSubstate
from islandrun.world import Tile

FLOUR_ID = 2516
WATER_ID = 1929
DOUGH_ID = 2307


def chef(world, make_executor):
    executor = make_executor(world, stage="MASTER_CHEF")
    return executor, executor.workflow_for(Stage.MASTER_CHEF)


def test_dough_goes_straight_to_baking(world, make_executor):
    world.give(DOUGH_ID, "Bread dough")
    world.add_object(RANGE_ID, "Range", Tile(3102, 3100, 0))
    executor, workflow = chef(world, make_executor)

    executor.tick()

    assert workflow.substate is ChefSubstate.BAKE_BREAD
    assert world.commands == [("use", DOUGH_ID, RANGE_ID)]


def test_missing_dough_routes_back_to_ingredients(world, make_executor):
    world.give(FLOUR_ID, "Pot of flour")
    world.add_npc(CHEF_ID, "Master Chef", Tile(3101, 3100, 0))
    executor, workflow = chef(world, make_executor)
    workflow.substate = ChefSubstate.BAKE_BREAD

    executor.tick()

    assert workflow.substate is ChefSubstate.GET_INGREDIENTS
    assert world.commands == [("interact", CHEF_ID, "Talk-to")]


def test_flour_and_water_are_mixed(world, make_executor):
    world.give(FLOUR_ID, "Pot of flour")
    world.give(WATER_ID, "Bucket of water")
    executor, workflow = chef(world, make_executor)

    executor.tick()

    assert workflow.substate is ChefSubstate.MIX_DOUGH
    assert world.commands == [("use", FLOUR_ID, WATER_ID)]


def test_bread_advances_to_quest_guide(world, make_executor):
    world.give(2309, "Bread")
    executor, _ = chef(world, make_executor)

    executor.tick()

    assert executor.stage is Stage.QUEST_GUIDE

from islandrun.core.macro_state import Stage
from islandrun.stages.mining_instructor import (
    BRONZE_BAR_ID,
    COPPER_ORE_ID,
    FURNACE_ID,
    HAMMER_ID,
    PICKAXE_ID,
    TIN_ORE_ID,
    TIN_ROCK_ID,
    MiningSubstate,
)
from islandrun.world import ScriptedWorld, Tile

CAVE = Tile(3080, 9505, 0)


def mining(make_executor, world):
    executor = make_executor(world, stage="MINING_INSTRUCTOR")
    return executor, executor.workflow_for(Stage.MINING_INSTRUCTOR)


def test_missing_bar_routes_back_to_tin(make_executor):
    world = ScriptedWorld(position=CAVE)
    world.give(PICKAXE_ID, "Bronze pickaxe")
    world.give(HAMMER_ID, "Hammer")
    world.add_object(TIN_ROCK_ID, "Tin rocks", CAVE.offset(dx=2))
    executor, workflow = mining(make_executor, world)
    workflow.substate = MiningSubstate.SMITH_DAGGER

    executor.tick()

    assert workflow.substate is MiningSubstate.MINE_TIN
    assert world.commands == [("interact", TIN_ROCK_ID, "Mine")]


def test_both_ores_are_smelted(make_executor):
    world = ScriptedWorld(position=CAVE)
    world.give(PICKAXE_ID, "Bronze pickaxe")
    world.give(TIN_ORE_ID, "Tin ore")
    world.give(COPPER_ORE_ID, "Copper ore")
    world.add_object(FURNACE_ID, "Furnace", CAVE.offset(dy=3))
    executor, workflow = mining(make_executor, world)

    executor.tick()

    assert workflow.substate is MiningSubstate.SMELT_BAR
    assert world.commands == [("use", TIN_ORE_ID, FURNACE_ID)]


def test_bar_without_hammer_asks_instructor(make_executor):
    world = ScriptedWorld(position=CAVE)
    world.give(BRONZE_BAR_ID, "Bronze bar")
    world.add_npc(3311, "Mining Instructor", CAVE.offset(dx=1))
    executor, workflow = mining(make_executor, world)

    executor.tick()

    assert workflow.substate is MiningSubstate.TALK_INSTRUCTOR_2
    assert world.commands == [("interact", 3311, "Talk-to")]


def test_first_weapon_text_advances_to_combat(make_executor):
    world = ScriptedWorld(position=CAVE)
    world.set_text("Congratulations, you've made your first weapon.")
    executor, _ = mining(make_executor, world)

    executor.tick()

    assert executor.stage is Stage.COMBAT_INSTRUCTOR

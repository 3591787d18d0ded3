from islandrun.core.macro_state import Stage
from islandrun.stages.magic_instructor import (
    ADVENTURER_JONH_ID,
    AIR_RUNE_ID,
    CHICKEN_ID,
    INSTRUCTOR_ID,
    INSTRUCTOR_TILE,
    MIND_RUNE_ID,
    WIND_STRIKE,
    MagicSubstate,
)
from islandrun.world import ScriptedWorld, Tile


def magic(make_executor, world):
    executor = make_executor(world, stage="MAGIC_INSTRUCTOR")
    return executor, executor.workflow_for(Stage.MAGIC_INSTRUCTOR)


def test_mainland_guide_completes_the_tutorial(make_executor):
    world = ScriptedWorld(position=Tile(3233, 3230, 0))
    world.add_npc(ADVENTURER_JONH_ID, "Adventurer Jon", Tile(3232, 3232, 0))
    executor, _ = magic(make_executor, world)

    executor.tick()

    assert executor.stage is Stage.COMPLETE
    assert executor.is_complete(Stage.MAGIC_INSTRUCTOR)
    assert executor.tick() == 600


def test_runes_and_chicken_cast_wind_strike(make_executor):
    world = ScriptedWorld(position=INSTRUCTOR_TILE)
    world.give(AIR_RUNE_ID, "Air rune", 5)
    world.give(MIND_RUNE_ID, "Mind rune", 5)
    world.add_npc(CHICKEN_ID, "Chicken", INSTRUCTOR_TILE.offset(dx=2))
    executor, workflow = magic(make_executor, world)

    executor.tick()

    assert workflow.substate is MagicSubstate.CAST_WIND_STRIKE
    assert world.commands == [("cast", WIND_STRIKE, CHICKEN_ID)]


def test_cast_prompt_without_runes_asks_for_more(make_executor):
    world = ScriptedWorld(position=INSTRUCTOR_TILE)
    world.set_text("Now cast Wind Strike on one of the chickens.")
    world.add_npc(INSTRUCTOR_ID, "Magic Instructor", INSTRUCTOR_TILE.offset(dy=1))
    executor, workflow = magic(make_executor, world)

    executor.tick()

    assert workflow.substate is MagicSubstate.CAST_WIND_STRIKE
    assert world.commands == [("interact", INSTRUCTOR_ID, "Talk-to")]


def test_busy_chicken_is_left_alone(make_executor):
    world = ScriptedWorld(position=INSTRUCTOR_TILE)
    world.give(AIR_RUNE_ID, "Air rune")
    world.give(MIND_RUNE_ID, "Mind rune")
    world.add_npc(CHICKEN_ID, "Chicken", INSTRUCTOR_TILE.offset(dx=2), interacting=True)
    executor, _ = magic(make_executor, world)

    executor.tick()

    assert world.commands == []


def test_final_dialogue_declines_ironman_then_accepts_trip(make_executor):
    world = ScriptedWorld(position=INSTRUCTOR_TILE)
    dialog = world.scripted_dialog
    dialog.show_options("Yes, I'd like to be an Ironman.", "No, I'm not planning to do that.")
    executor, workflow = magic(make_executor, world)
    workflow.substate = MagicSubstate.FINAL_DIALOGUE

    executor.tick()
    dialog.show_options("Yes, send me to the mainland.", "No, not yet.")
    executor.tick()

    assert dialog.actions == [("choose", 2), ("choose", 1)]

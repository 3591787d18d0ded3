from islandrun.core.events import EventKind
from islandrun.core.macro_state import Stage
from islandrun.stages.quest_guide import LADDER_ID, QUEST_TAB, QuestSubstate
from islandrun.world import ScriptedWorld, Tile


def test_cave_position_jumps_to_mining(make_executor):
    world = ScriptedWorld(position=Tile(3080, 9520, 0))
    executor = make_executor(world, stage="QUEST_GUIDE")

    executor.tick()

    assert executor.stage is Stage.MINING_INSTRUCTOR
    event = executor.history()[-1]
    assert event.kind is EventKind.STAGE_ADVANCED
    assert event.reason == "already in mining cave"
    assert world.commands == []


def test_quest_tab_prompt_opens_journal(world, make_executor):
    world.set_text("Click on the flashing icon to open your quest list.")
    tab = world.set_widget(QUEST_TAB)
    executor = make_executor(world, stage="QUEST_GUIDE")

    executor.tick()

    assert tab.clicks == 1
    assert executor.active_substate() is QuestSubstate.TALK_GUIDE_2


def test_ladder_text_climbs_down(world, make_executor):
    world.set_text("It's time to enter some caves. Click on the ladder to go down.")
    world.add_object(LADDER_ID, "Ladder", Tile(3101, 3101, 0))
    executor = make_executor(world, stage="QUEST_GUIDE")

    executor.tick()

    assert executor.active_substate() is QuestSubstate.CLIMB_LADDER
    assert world.commands == [("interact", LADDER_ID, "Climb-down")]

    world.position = Tile(3088, 9520, 0)
    executor.tick()
    assert executor.stage is Stage.MINING_INSTRUCTOR

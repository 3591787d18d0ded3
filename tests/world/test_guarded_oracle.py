import logging

from islandrun.world import EntityKind, GuardedOracle, Item, ScriptedDialog, ScriptedWorld, Tile


class BrokenDialog(ScriptedDialog):
    def is_open(self):
        raise ConnectionError("dialog widget gone")

    def choose_option(self, index):
        raise ConnectionError("dialog widget gone")


class BrokenWorld(ScriptedWorld):
    def find_entity(self, kind, *, ids=(), names=()):
        raise RuntimeError("entity cache unavailable")

    def player_position(self):
        raise RuntimeError("no local player")

    def equipment_items(self):
        raise RuntimeError("equipment unavailable")

    def move_to(self, target):
        raise RuntimeError("walker crashed")


def test_query_failures_read_as_not_found(caplog):
    oracle = GuardedOracle(BrokenWorld())
    with caplog.at_level(logging.WARNING, logger="islandrun.world.guarded"):
        assert oracle.find_entity(EntityKind.NPC, ids=(1,)) is None
        assert oracle.player_position() is None
        assert oracle.is_near(Tile(0, 0), 5) is False
        assert oracle.equipment_contains(1205) is False
    assert "find_entity" in caplog.text
    assert "player_position" in caplog.text


def test_command_failures_return_false():
    oracle = GuardedOracle(BrokenWorld())
    assert oracle.move_to(Tile(1, 1)) is False


def test_dialog_failures_read_as_closed():
    world = ScriptedWorld()
    world.scripted_dialog = BrokenDialog()
    oracle = GuardedOracle(world)
    assert oracle.dialog.is_open() is False
    assert oracle.dialog.choose_option(1) is False
    assert oracle.dialog.can_continue() is False


def test_dialog_is_resolved_on_every_call():
    world = ScriptedWorld()
    oracle = GuardedOracle(world)
    dialog = oracle.dialog
    world.scripted_dialog = ScriptedDialog(open_=True, can_continue=True)
    assert dialog.is_open()
    assert dialog.continue_dialog()


def test_wrapping_is_idempotent():
    world = ScriptedWorld()
    once = GuardedOracle(world)
    twice = GuardedOracle(once)
    assert twice.inner is world


def test_healthy_world_passes_through():
    world = ScriptedWorld(position=Tile(5, 5))
    world.give(590, "Tinderbox")
    world.set_widget((164, 55), "Inventory")
    oracle = GuardedOracle(world)
    assert oracle.inventory_first("tinderbox") == Item(590, "Tinderbox")
    element = oracle.ui_element((164, 55))
    assert element.visible and element.text == "Inventory"
    assert element.click()
    assert world.widgets[(164, 55)].clicks == 1
    assert oracle.ui_element((1, 2)) is None

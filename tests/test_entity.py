import struct

import pytest

from kbeclient.entity import ClientContext, Entity, EntityComponent
from kbeclient.stream import MemoryStream


def _recording_context(*events):
    context = ClientContext(player_id=5, space_id=3)
    log = []
    for event in events:
        context.listeners[event] = [lambda data, e=event: log.append((e, data))]
    return context, log


class _Recorder(Entity):
    def __init__(self, context):
        super().__init__(context)
        self.calls = []

    def on_enter_world(self):
        self.calls.append("on_enter_world")

    def on_components_enterworld(self):
        self.calls.append("components_enter")

    def on_leave_world(self):
        self.calls.append("on_leave_world")

    def on_components_leaveworld(self):
        self.calls.append("components_leave")

    def detach_components(self):
        self.calls.append("detach")

    def on_destroy(self):
        self.calls.append("destroy")


def test_context_fire_delivers_to_listeners():
    context, log = _recording_context("custom")
    context.fire("custom", {"x": 1})
    context.fire("other", {"x": 2})
    assert log == [("custom", {"x": 1})]


def test_is_player_compares_with_context():
    context = ClientContext(player_id=5)
    entity = Entity(context)
    entity.id = 5
    assert entity.is_player() is True
    entity.id = 6
    assert entity.is_player() is False


def test_enter_world_runs_hooks_and_fires_event():
    context, log = _recording_context("onEnterWorld")
    entity = _Recorder(context)
    entity.id = 5
    entity.class_name = "Avatar"
    entity.position = (1.0, 2.0, 3.0)
    entity.velocity = 4.5
    entity.enter_world()
    assert entity.in_world is True
    assert entity.calls == ["on_enter_world", "components_enter"]
    (name, data), = log
    assert name == "onEnterWorld"
    assert data["entity_id"] == 5
    assert data["space_id"] == 3
    assert data["position"] == (1.0, 2.0, 3.0)
    assert data["move_speed"] == 4.5
    assert data["is_player"] is True
    assert data["entity_class_name"] == "Avatar"


def test_leave_world_clears_flag_and_fires_event():
    context, log = _recording_context("onLeaveWorld")
    entity = _Recorder(context)
    entity.id = 9
    entity.enter_world()
    entity.calls.clear()
    entity.leave_world()
    assert entity.in_world is False
    assert entity.calls == ["on_leave_world", "components_leave"]
    assert log == [("onLeaveWorld", {"entity_id": 9, "space_id": 3, "is_player": False})]


def test_enter_space_fires_space_then_position_then_direction():
    context, log = _recording_context("onEnterSpace", "set_position", "set_direction")
    entity = Entity(context)
    entity.id = 2
    entity.direction = (0.0, 0.0, 1.0)
    entity.enter_space()
    assert entity.in_world is True
    assert [name for name, _ in log] == ["onEnterSpace", "set_position", "set_direction"]
    assert log[2][1] == {"entity_id": 2, "direction": (0.0, 0.0, 1.0)}


def test_leave_space_fires_event():
    context, log = _recording_context("onLeaveSpace")
    entity = Entity(context)
    entity.enter_space()
    entity.leave_space()
    assert entity.in_world is False
    assert [name for name, _ in log] == ["onLeaveSpace"]


def test_position_change_updates_server_pos_for_player_only_when_in_world_fires():
    context, log = _recording_context("set_position")
    entity = Entity(context)
    entity.id = 5
    entity.position = (7.0, 8.0, 9.0)
    entity.on_position_changed((0.0, 0.0, 0.0))
    assert context.entity_server_pos == (7.0, 8.0, 9.0)
    assert log == []
    entity.in_world = True
    entity.on_position_changed((7.0, 8.0, 9.0))
    assert len(log) == 1
    assert log[0][1]["position"] == (7.0, 8.0, 9.0)


def test_position_change_of_other_entity_leaves_server_pos():
    context = ClientContext(player_id=1)
    entity = Entity(context)
    entity.id = 2
    entity.position = (1.0, 1.0, 1.0)
    entity.on_position_changed((0.0, 0.0, 0.0))
    assert context.entity_server_pos == (0.0, 0.0, 0.0)


def test_direction_change_fires_only_in_world():
    context, log = _recording_context("set_direction")
    entity = Entity(context)
    entity.on_direction_changed((0.0, 0.0, 0.0))
    assert log == []
    entity.in_world = True
    entity.on_direction_changed((0.0, 0.0, 0.0))
    assert len(log) == 1


def test_destroy_detaches_before_on_destroy():
    entity = _Recorder(ClientContext())
    entity.destroy()
    assert entity.calls == ["detach", "destroy"]


def test_default_get_components_is_empty():
    assert Entity().get_components("Test", True) == []


class _CountingComponent(EntityComponent):
    def __init__(self):
        super().__init__()
        self.updates = []

    def on_update_propertys(self, prop_utype, stream, max_count):
        self.updates.append((prop_utype, max_count, stream.read_uint8()))


def _component_header(component_type, owner_id, count):
    return struct.pack("<iiHH", component_type, owner_id, 0, count)


def test_component_create_from_stream_reads_header_and_properties():
    component = _CountingComponent()
    stream = MemoryStream(_component_header(7, 42, 2) + b"\x09")
    component.create_from_stream(stream)
    assert component.component_type == 7
    assert component.owner_id == 42
    assert component.updates == [(0, 2, 9)]
    assert len(stream) == 0


def test_component_with_no_properties_skips_update():
    component = _CountingComponent()
    component.create_from_stream(MemoryStream(_component_header(3, 1, 0)))
    assert component.updates == []
    assert component.owner_id == 1


def test_component_truncated_header_raises():
    with pytest.raises(EOFError):
        EntityComponent().create_from_stream(MemoryStream(b"\x01\x00\x00"))
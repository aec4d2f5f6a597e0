import pytest

from kbeclient.account import AccountBase
from kbeclient.bundle import Bundle
from kbeclient.custom_types import AvatarData, AvatarInfos, AvatarInfosList
from kbeclient.entity import ClientContext, MethodDef, PropertyDef, ScriptModule
from kbeclient.entity_call import AccountBaseCall, AccountCellCall, EntityCallType
from kbeclient.stream import MemoryStream


class Account(AccountBase):
    def __init__(self, context=None):
        super().__init__(context)
        self.calls = []

    def on_create_avatar_result(self, result, info):
        self.calls.append(("create", result, info))

    def on_remove_avatar(self, dbid):
        self.calls.append(("remove", dbid))

    def on_req_avatar_list(self, infos):
        self.calls.append(("list", infos))

    def on_last_sel_character_changed(self, old_value):
        self.calls.append(("last_sel", old_value))

    def on_position_changed(self, old_value):
        self.calls.append(("position", old_value))
        super().on_position_changed(old_value)

    def on_direction_changed(self, old_value):
        self.calls.append(("direction", old_value))


def _module(alias=False, base_props=False, owner_only=False):
    props = {
        1: PropertyDef(40000, "position", is_base=base_props, is_owner_only=owner_only),
        2: PropertyDef(40001, "direction", is_base=base_props, is_owner_only=owner_only),
        3: PropertyDef(40002, "spaceID", is_base=base_props),
        4: PropertyDef(2, "lastSelCharacter", is_base=base_props, is_owner_only=owner_only),
    }
    methods = {1: MethodDef(10005), 2: MethodDef(3), 3: MethodDef(10003)}
    return ScriptModule(
        "Account",
        use_property_descr_alias=alias,
        use_method_descr_alias=alias,
        id_propertys=props,
        id_methods=methods,
    )


def _account(**kwargs):
    context = ClientContext(module_defs={"Account": _module(**kwargs)})
    account = Account(context)
    account.id = 7
    account.class_name = "Account"
    return account


def _stream(write):
    bundle = Bundle()
    write(bundle)
    return MemoryStream(b"".join(bundle.packets()))


def test_remote_create_avatar_result():
    account = _account()
    info = AvatarInfos(42, "hero", 1, 3, AvatarData(2, b"xy"))

    def write(b):
        b.write_uint16(0)
        b.write_uint16(1)
        b.write_uint8(0)
        info.write(b)

    account.on_remote_method_call(_stream(write))
    assert account.calls == [("create", 0, info)]


def test_remote_remove_avatar_with_alias():
    account = _account(alias=True)

    def write(b):
        b.write_uint8(0)
        b.write_uint8(2)
        b.write_uint64(99)

    account.on_remote_method_call(_stream(write))
    assert account.calls == [("remove", 99)]


def test_remote_avatar_list():
    account = _account()
    infos = AvatarInfosList([AvatarInfos(1, "a"), AvatarInfos(2, "b")])

    def write(b):
        b.write_uint16(0)
        b.write_uint16(3)
        infos.write(b)

    stream = _stream(write)
    account.on_remote_method_call(stream)
    assert account.calls == [("list", infos)]
    assert len(stream) == 0


def test_remote_call_on_component_is_rejected():
    account = _account()

    def write(b):
        b.write_uint16(5)
        b.write_uint16(1)

    with pytest.raises(ValueError):
        account.on_remote_method_call(_stream(write))


def test_missing_module_raises():
    account = Account(ClientContext())
    with pytest.raises(KeyError):
        account.on_remote_method_call(MemoryStream(bytes(4)))


def test_update_propertys_base_requires_inited():
    account = _account(base_props=True)

    def write(b):
        b.write_uint16(0)
        b.write_uint16(4)
        b.write_uint64(55)

    account.on_update_propertys(_stream(write))
    assert account.last_sel_character == 55
    assert account.calls == []

    account.inited = True

    def write_again(b):
        b.write_uint16(0)
        b.write_uint16(4)
        b.write_uint64(56)

    account.on_update_propertys(_stream(write_again))
    assert account.last_sel_character == 56
    assert account.calls == [("last_sel", 55)]


def test_update_propertys_cell_requires_in_world_and_fires_event():
    account = _account()
    account.in_world = True
    events = []
    account.context.listeners["set_position"] = [events.append]

    def write(b):
        b.write_uint16(0)
        b.write_uint16(1)
        b.write_vector3((1.0, 2.0, 3.0))
        b.write_uint16(0)
        b.write_uint16(3)
        b.write_uint32(8)
        b.write_uint16(0)
        b.write_uint16(2)
        b.write_vector3((0.5, 0.0, 0.25))

    stream = _stream(write)
    account.on_update_propertys(stream)
    assert account.position == (1.0, 2.0, 3.0)
    assert account.direction == (0.5, 0.0, 0.25)
    assert account.calls == [
        ("position", (0.0, 0.0, 0.0)),
        ("direction", (0.0, 0.0, 0.0)),
    ]
    assert events[0]["position"] == (1.0, 2.0, 3.0)
    assert len(stream) == 0


def test_update_propertys_component_rejected():
    account = _account()

    def write(b):
        b.write_uint16(1)
        b.write_uint16(1)

    with pytest.raises(ValueError):
        account.on_update_propertys(_stream(write))


def test_call_propertys_set_methods_base_props():
    account = _account(base_props=True)
    account.inited = True
    account.last_sel_character = 9
    account.call_propertys_set_methods()
    assert [name for name, _ in account.calls] == ["direction", "last_sel", "position"]
    assert ("last_sel", 9) in account.calls

    account.calls.clear()
    account.in_world = True
    account.call_propertys_set_methods()
    assert account.calls == []


def test_call_propertys_set_methods_owner_only_skips_other_entities():
    account = _account(owner_only=True)
    account.in_world = True
    account.context.player_id = 1
    account.call_propertys_set_methods()
    assert account.calls == []

    account.context.player_id = account.id
    account.call_propertys_set_methods()
    assert len(account.calls) == 3


def test_entity_calls_lifecycle():
    account = _account()
    account.on_get_base()
    account.on_get_cell()
    base = account.get_base_entity_call()
    cell = account.get_cell_entity_call()
    assert isinstance(base, AccountBaseCall)
    assert isinstance(cell, AccountCellCall)
    assert base.type is EntityCallType.BASE
    assert (base.id, base.class_name) == (7, "Account")
    account.on_lose_cell()
    assert account.get_cell_entity_call() is None
    assert account.get_base_entity_call() is base


def test_abstract_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        AccountBase(ClientContext())


def test_default_last_sel_character():
    account = _account(base_props=True)
    account.inited = True
    account.call_propertys_set_methods()
    assert account.last_sel_character == 0
    assert ("last_sel", 0) in account.calls
"""Client-side base class of the Avatar entity."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Sequence

from .entity import ClientContext, Entity, EntityComponent, PropertyDef, ScriptModule
from .entity_call import AvatarBaseCall, AvatarCellCall
from .stream import MemoryStream

_Reader = Callable[[MemoryStream], Any]

# (property id, component name) for each component slot, in declaration order.
_COMPONENT_SLOTS = ((16, "Test"), (21, "Test"), (22, "TestNoBase"))

# Property utype -> (attribute, stream reader, change hook name).
_PROPERTY_FIELDS: dict[int, tuple[str, _Reader, str]] = {
    47001: ("hp", MemoryStream.read_int32, "on_hp_changed"),
    47002: ("hp_max", MemoryStream.read_int32, "on_hp_max_changed"),
    47003: ("mp", MemoryStream.read_int32, "on_mp_changed"),
    47004: ("mp_max", MemoryStream.read_int32, "on_mp_max_changed"),
    40001: ("direction", MemoryStream.read_vector3, "on_direction_changed"),
    47005: ("forbids", MemoryStream.read_int32, "on_forbids_changed"),
    41002: ("level", MemoryStream.read_uint16, "on_level_changed"),
    41006: ("model_id", MemoryStream.read_uint32, "on_model_id_changed"),
    41007: ("model_scale", MemoryStream.read_uint8, "on_model_scale_changed"),
    11: ("move_speed", MemoryStream.read_uint8, "on_move_speed_changed"),
    41003: ("name", MemoryStream.read_unicode, "on_name_changed"),
    6: ("own_val", MemoryStream.read_uint16, "on_own_val_changed"),
    40000: ("position", MemoryStream.read_vector3, "on_position_changed"),
    41001: ("space_utype", MemoryStream.read_uint32, "on_space_utype_changed"),
    47006: ("state", MemoryStream.read_int8, "on_state_changed"),
    47007: ("sub_state", MemoryStream.read_uint8, "on_sub_state_changed"),
    41004: ("uid", MemoryStream.read_uint32, "on_uid_changed"),
    41005: ("utype", MemoryStream.read_uint32, "on_utype_changed"),
}

# Order in which change hooks run on call_propertys_set_methods:
# (property id, attribute, hook name); None marks where components run.
_SET_ORDER: tuple[Optional[tuple[int, str, str]], ...] = (
    (4, "hp", "on_hp_changed"),
    (5, "hp_max", "on_hp_max_changed"),
    (6, "mp", "on_mp_changed"),
    (7, "mp_max", "on_mp_max_changed"),
    None,
    (2, "direction", "on_direction_changed"),
    (11, "forbids", "on_forbids_changed"),
    (12, "level", "on_level_changed"),
    (13, "model_id", "on_model_id_changed"),
    (14, "model_scale", "on_model_scale_changed"),
    (15, "move_speed", "on_move_speed_changed"),
    (16, "name", "on_name_changed"),
    (17, "own_val", "on_own_val_changed"),
    (1, "position", "on_position_changed"),
    (18, "space_utype", "on_space_utype_changed"),
    (19, "state", "on_state_changed"),
    (20, "sub_state", "on_sub_state_changed"),
    (21, "uid", "on_uid_changed"),
    (22, "utype", "on_utype_changed"),
)


class AvatarBase(Entity, ABC):
    """Avatar entity with three components; decodes server traffic into hooks.

    Property change hooks (``on_hp_changed``, ``on_level_changed`` and so on)
    are called when a subclass defines them.
    """

    MODULE_NAME = "Avatar"

    def __init__(
        self,
        context: Optional[ClientContext] = None,
        components: Optional[Sequence[EntityComponent]] = None,
    ) -> None:
        super().__init__(context)
        self.base_entity_call: Optional[AvatarBaseCall] = None
        self.cell_entity_call: Optional[AvatarCellCall] = None

        self.hp = 0
        self.hp_max = 0
        self.mp = 0
        self.mp_max = 0
        self.forbids = 0
        self.level = 0
        self.model_id = 0
        self.model_scale = 30
        self.move_speed = 50
        self.name = ""
        self.own_val = 0
        self.space_utype = 0
        self.state = 0
        self.sub_state = 0
        self.uid = 0
        self.utype = 0

        if components is None:
            components = [EntityComponent() for _ in _COMPONENT_SLOTS]
        components = list(components)
        if len(components) != len(_COMPONENT_SLOTS):
            raise ValueError(
                f"{self.MODULE_NAME} needs {len(_COMPONENT_SLOTS)} components, "
                f"got {len(components)}"
            )
        for component, (property_id, name) in zip(components, _COMPONENT_SLOTS):
            component.owner = self
            component.owner_id = self.id
            component.entity_component_property_id = property_id
            component.name = name
        self.components = components
        self.component1, self.component2, self.component3 = components

    def _component_for(self, property_utype: int) -> Optional[EntityComponent]:
        for component in self.components:
            if component.entity_component_property_id == property_utype:
                return component
        return None

    # lifecycle

    def on_get_base(self) -> None:
        self.base_entity_call = AvatarBaseCall(self.context, self.id, self.class_name)
        for component in self.components:
            component._notify("on_get_base")

    def on_get_cell(self) -> None:
        self.cell_entity_call = AvatarCellCall(self.context, self.id, self.class_name)
        for component in self.components:
            component._notify("on_get_cell")

    def on_lose_cell(self) -> None:
        self.cell_entity_call = None
        for component in self.components:
            component._notify("on_lose_cell")

    def attach_components(self) -> None:
        for component in self.components:
            component._notify("on_attached", self)

    def detach_components(self) -> None:
        for component in self.components:
            component._notify("on_detached", self)

    def get_components(self, name: str, all: bool) -> list[EntityComponent]:
        """Components called `name`; only the first one unless `all`."""
        found = []
        for component in self.components:
            if component.name == name:
                found.append(component)
                if not all:
                    break
        return found

    # decoding

    def _module(self) -> ScriptModule:
        try:
            return self.context.module_defs[self.MODULE_NAME]
        except KeyError:
            raise KeyError(f"entity module {self.MODULE_NAME!r} is not defined") from None

    @staticmethod
    def _read_id(stream: MemoryStream, alias: bool) -> int:
        return stream.read_uint8() if alias else stream.read_uint16()

    def on_remote_method_call(self, stream: MemoryStream) -> None:
        """Decode one remote method call and invoke the matching handler."""
        module = self._module()
        component_utype = self._read_id(stream, module.use_property_descr_alias)
        method_id = self._read_id(stream, module.use_method_descr_alias)

        if component_utype > 0:
            descr = module.id_propertys[component_utype]
            component = self._component_for(descr.utype)
            if component is not None:
                component._notify("on_remote_method_call", method_id, stream)
            return

        utype = module.id_methods[method_id].utype
        if utype == 10101:
            dialog_type = stream.read_uint8()
            dialog_key = stream.read_uint32()
            title = stream.read_unicode()
            dialog_id = stream.read_int32()
            self.dialog_add_option(dialog_type, dialog_key, title, dialog_id)
        elif utype == 10104:
            self.dialog_close()
        elif utype == 10102:
            body = stream.read_unicode()
            is_player = stream.read_uint8()
            head_id = stream.read_uint32()
            say_name = stream.read_unicode()
            self.dialog_set_text(body, is_player, head_id, say_name)
        elif utype == 12:
            self.on_add_skill(stream.read_int32())
        elif utype == 7:
            self.on_jump()
        elif utype == 13:
            self.on_remove_skill(stream.read_int32())
        elif utype == 16:
            attacker_id = stream.read_int32()
            skill_id = stream.read_int32()
            damage_type = stream.read_int32()
            damage = stream.read_int32()
            self.recv_damage(attacker_id, skill_id, damage_type, damage)

    def on_update_propertys(self, stream: MemoryStream) -> None:
        """Apply property updates in the stream, calling change hooks.

        An update addressed to a component is handed to it and ends processing.
        """
        module = self._module()
        while len(stream) > 0:
            component_utype = self._read_id(stream, module.use_property_descr_alias)
            prop_id = self._read_id(stream, module.use_property_descr_alias)

            if component_utype > 0:
                descr = module.id_propertys[component_utype]
                component = self._component_for(descr.utype)
                if component is not None:
                    component.on_update_propertys(prop_id, stream, -1)
                return

            prop = module.id_propertys[prop_id]
            if prop.utype == 40002:
                stream.read_uint32()
                continue
            component = self._component_for(prop.utype)
            if component is not None:
                component.create_from_stream(stream)
                continue
            entry = _PROPERTY_FIELDS.get(prop.utype)
            if entry is None:
                continue
            attribute, reader, hook_name = entry
            old_value = getattr(self, attribute)
            setattr(self, attribute, reader(stream))
            if prop.is_base:
                if self.inited:
                    self._notify(hook_name, old_value)
            elif self.in_world:
                self._notify(hook_name, old_value)

    def _notify_set(self, prop: PropertyDef, hook_name: str, value: Any) -> None:
        if prop.is_base:
            if self.inited and not self.in_world:
                self._notify(hook_name, value)
        elif self.in_world:
            if not (prop.is_owner_only and not self.is_player()):
                self._notify(hook_name, value)

    def call_propertys_set_methods(self) -> None:
        """Call the change hooks once with the current values."""
        pdatas = self._module().id_propertys
        for entry in _SET_ORDER:
            if entry is None:
                for component in self.components:
                    component._notify("call_propertys_set_methods")
                continue
            prop_id, attribute, hook_name = entry
            self._notify_set(pdatas[prop_id], hook_name, getattr(self, attribute))

    # remote methods

    @abstractmethod
    def dialog_add_option(self, dialog_type: int, dialog_key: int, title: str, dialog_id: int) -> None:
        """Add an option to the open dialog."""

    @abstractmethod
    def dialog_close(self) -> None:
        """Close the open dialog."""

    @abstractmethod
    def dialog_set_text(self, body: str, is_player: int, head_id: int, say_name: str) -> None:
        """Set the text of the open dialog."""

    @abstractmethod
    def on_add_skill(self, skill_id: int) -> None:
        """A skill was learned."""

    @abstractmethod
    def on_jump(self) -> None:
        """The avatar jumped."""

    @abstractmethod
    def on_remove_skill(self, skill_id: int) -> None:
        """A skill was removed."""

    @abstractmethod
    def recv_damage(self, attacker_id: int, skill_id: int, damage_type: int, damage: int) -> None:
        """The avatar took damage."""
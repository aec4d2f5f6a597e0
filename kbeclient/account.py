"""Client-side base class of the Account entity."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from .custom_types import AvatarInfos, AvatarInfosList
from .entity import ClientContext, Entity, PropertyDef, ScriptModule
from .entity_call import AccountBaseCall, AccountCellCall
from .stream import MemoryStream

_Hook = Callable[[Any], None]


class AccountBase(Entity, ABC):
    """Account entity: decodes server calls and property updates into hooks."""

    MODULE_NAME = "Account"

    def __init__(self, context: Optional[ClientContext] = None) -> None:
        super().__init__(context)
        self.base_entity_call: Optional[AccountBaseCall] = None
        self.cell_entity_call: Optional[AccountCellCall] = None
        self.last_sel_character = 0

    # entity calls

    def on_get_base(self) -> None:
        self.base_entity_call = AccountBaseCall(self.context, self.id, self.class_name)

    def on_get_cell(self) -> None:
        self.cell_entity_call = AccountCellCall(self.context, self.id, self.class_name)

    def on_lose_cell(self) -> None:
        self.cell_entity_call = None

    def get_base_entity_call(self) -> Optional[AccountBaseCall]:
        return self.base_entity_call

    def get_cell_entity_call(self) -> Optional[AccountCellCall]:
        return self.cell_entity_call

    # decoding

    def _module(self) -> ScriptModule:
        try:
            return self.context.module_defs[self.MODULE_NAME]
        except KeyError:
            raise KeyError(
                f"entity module {self.MODULE_NAME!r} is not defined"
            ) from None

    @staticmethod
    def _read_id(stream: MemoryStream, alias: bool) -> int:
        return stream.read_uint8() if alias else stream.read_uint16()

    def _reject_component(self, component_utype: int) -> None:
        if component_utype > 0:
            raise ValueError(
                f"{self.MODULE_NAME} has no components "
                f"(component property {component_utype})"
            )

    def on_remote_method_call(self, stream: MemoryStream) -> None:
        """Decode one remote method call and invoke the matching handler."""
        module = self._module()
        component_utype = self._read_id(stream, module.use_property_descr_alias)
        method_id = self._read_id(stream, module.use_method_descr_alias)
        self._reject_component(component_utype)

        method = module.id_methods[method_id]
        if method.utype == 10005:
            result = stream.read_uint8()
            info = AvatarInfos.read(stream)
            self.on_create_avatar_result(result, info)
        elif method.utype == 3:
            self.on_remove_avatar(stream.read_uint64())
        elif method.utype == 10003:
            self.on_req_avatar_list(AvatarInfosList.read(stream))

    def _property_fields(self) -> dict[int, tuple[str, Callable[[MemoryStream], Any], _Hook]]:
        return {
            40001: ("direction", MemoryStream.read_vector3, self.on_direction_changed),
            2: (
                "last_sel_character",
                MemoryStream.read_uint64,
                self.on_last_sel_character_changed,
            ),
            40000: ("position", MemoryStream.read_vector3, self.on_position_changed),
        }

    def _notify_update(self, prop: PropertyDef, hook: _Hook, old_value: Any) -> None:
        if prop.is_base:
            if self.inited:
                hook(old_value)
        elif self.in_world:
            hook(old_value)

    def on_update_propertys(self, stream: MemoryStream) -> None:
        """Apply every property update in the stream, calling change hooks."""
        module = self._module()
        fields = self._property_fields()
        while len(stream) > 0:
            component_utype = self._read_id(stream, module.use_property_descr_alias)
            prop_id = self._read_id(stream, module.use_property_descr_alias)
            self._reject_component(component_utype)

            prop = module.id_propertys[prop_id]
            if prop.utype == 40002:
                stream.read_uint32()
                continue
            entry = fields.get(prop.utype)
            if entry is None:
                continue
            attribute, reader, hook = entry
            old_value = getattr(self, attribute)
            setattr(self, attribute, reader(stream))
            self._notify_update(prop, hook, old_value)

    def _notify_set(self, prop: PropertyDef, hook: _Hook, old_value: Any) -> None:
        if prop.is_base:
            if self.inited and not self.in_world:
                hook(old_value)
        elif self.in_world:
            if not (prop.is_owner_only and not self.is_player()):
                hook(old_value)

    def call_propertys_set_methods(self) -> None:
        """Call the change hooks once with the current values."""
        pdatas = self._module().id_propertys
        self._notify_set(pdatas[2], self.on_direction_changed, self.direction)
        self._notify_set(
            pdatas[4], self.on_last_sel_character_changed, self.last_sel_character
        )
        self._notify_set(pdatas[1], self.on_position_changed, self.position)

    # hooks

    def on_last_sel_character_changed(self, old_value: int) -> None:
        pass

    @abstractmethod
    def on_create_avatar_result(self, result: int, info: AvatarInfos) -> None:
        """The server answered a request to create an avatar."""

    @abstractmethod
    def on_remove_avatar(self, dbid: int) -> None:
        """The server removed the avatar with database id `dbid`."""

    @abstractmethod
    def on_req_avatar_list(self, infos: AvatarInfosList) -> None:
        """The server sent the list of the account's avatars."""
"""Remote references to an entity's base or cell part, used to call its methods."""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Callable, Optional

from .bundle import Bundle, Message
from .entity import ClientContext

log = logging.getLogger(__name__)

CELL_CALL_MESSAGE = "Baseapp_onRemoteCallCellMethodFromClient"
BASE_CALL_MESSAGE = "Entity_onRemoteMethodCall"

# Message descriptions by name, filled in once the server has sent them.
MESSAGES: dict[str, Message] = {}

_Writer = Optional[Callable[[Bundle], None]]


class EntityCallType(IntEnum):
    CELL = 0
    BASE = 1


class EntityCall:
    """A call target on the server side of one entity."""

    def __init__(
        self,
        context: ClientContext,
        entity_id: int,
        class_name: str,
        call_type: EntityCallType = EntityCallType.CELL,
    ) -> None:
        self.context = context
        self.id = entity_id
        self.class_name = class_name
        self.type = EntityCallType(call_type)
        self.bundle: Optional[Bundle] = None

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self.id}, class_name={self.class_name!r}, "
            f"type={self.type.name})"
        )

    def is_base(self) -> bool:
        return self.type is EntityCallType.BASE

    def is_cell(self) -> bool:
        return self.type is EntityCallType.CELL

    def _start_message(self) -> Bundle:
        if self.bundle is None:
            self.bundle = Bundle()
        name = CELL_CALL_MESSAGE if self.is_cell() else BASE_CALL_MESSAGE
        try:
            message = MESSAGES[name]
        except KeyError:
            raise KeyError(f"message {name!r} is not known") from None
        self.bundle.new_message(message)
        self.bundle.write_int32(self.id)
        return self.bundle

    def new_call(
        self, method_name: Optional[str] = None, component_property_id: int = 0
    ) -> Optional[Bundle]:
        """Start a call; returns the bundle to write arguments into, or None.

        Without a method name only the message header and entity id are written.
        None is returned while connected to the login server or when the entity
        class has no definition.
        """
        if method_name is None:
            return self._start_message()

        if self.context.currserver == "loginapp":
            log.error(
                "%s.new_call(%s): currserver=%s",
                self.class_name,
                method_name,
                self.context.currserver,
            )
            return None

        module = self.context.module_defs.get(self.class_name)
        if module is None:
            log.error(
                "%s.new_call: entity module %s not found in module definitions",
                self.class_name,
                self.class_name,
            )
            return None

        methods = module.cell_methods if self.is_cell() else module.base_methods
        try:
            method = methods[method_name]
        except KeyError:
            raise KeyError(
                f"{self.class_name} has no {self.type.name.lower()} method "
                f"{method_name!r}"
            ) from None

        bundle = self._start_message()
        bundle.write_uint16(component_property_id)
        bundle.write_uint16(method.utype)
        return bundle

    def send_call(self, bundle: Optional[Bundle] = None) -> None:
        """Send `bundle`, or the call being built, to the server."""
        target = bundle if bundle is not None else self.bundle
        if target is None:
            raise RuntimeError("no call to send")
        try:
            target.send(self.context.network)
        finally:
            if target is self.bundle:
                self.bundle = None

    def _remote(
        self, method_name: str, write: _Writer = None, component_property_id: int = 0
    ) -> None:
        bundle = self.new_call(method_name, component_property_id)
        if bundle is None:
            return
        if write is not None:
            write(bundle)
        self.send_call(None)


class _ComponentCall(EntityCall):
    """A call to an entity component; every call carries the component's property id."""

    component_class = ""
    call_type = EntityCallType.CELL

    def __init__(
        self, context: ClientContext, component_property_id: int, entity_id: int
    ) -> None:
        super().__init__(context, entity_id, self.component_class, self.call_type)
        self.entity_component_property_id = component_property_id

    def _component_remote(self, method_name: str, write: _Writer = None) -> None:
        self._remote(method_name, write, self.entity_component_property_id)


class TestBaseCall(_ComponentCall):
    component_class = "Test"
    call_type = EntityCallType.BASE

    def say(self, value: int) -> None:
        self._component_remote("say", lambda b: b.write_int32(value))


class TestCellCall(_ComponentCall):
    component_class = "Test"
    call_type = EntityCallType.CELL

    def hello(self, value: int) -> None:
        self._component_remote("hello", lambda b: b.write_int32(value))


class TestNoBaseBaseCall(_ComponentCall):
    component_class = "TestNoBase"
    call_type = EntityCallType.BASE


class TestNoBaseCellCall(_ComponentCall):
    component_class = "TestNoBase"
    call_type = EntityCallType.CELL

    def hello(self, value: int) -> None:
        self._component_remote("hello", lambda b: b.write_int32(value))


class AccountBaseCall(EntityCall):
    def __init__(self, context: ClientContext, entity_id: int, class_name: str) -> None:
        super().__init__(context, entity_id, class_name, EntityCallType.BASE)

    def req_avatar_list(self) -> None:
        self._remote("reqAvatarList")

    def req_create_avatar(self, role_type: int, name: str) -> None:
        def write(bundle: Bundle) -> None:
            bundle.write_uint8(role_type)
            bundle.write_unicode(name)

        self._remote("reqCreateAvatar", write)

    def req_remove_avatar(self, name: str) -> None:
        self._remote("reqRemoveAvatar", lambda b: b.write_unicode(name))

    def req_remove_avatar_dbid(self, dbid: int) -> None:
        self._remote("reqRemoveAvatarDBID", lambda b: b.write_uint64(dbid))

    def select_avatar_game(self, dbid: int) -> None:
        self._remote("selectAvatarGame", lambda b: b.write_uint64(dbid))


class AccountCellCall(EntityCall):
    def __init__(self, context: ClientContext, entity_id: int, class_name: str) -> None:
        super().__init__(context, entity_id, class_name, EntityCallType.CELL)


class AvatarBaseCall(EntityCall):
    def __init__(self, context: ClientContext, entity_id: int, class_name: str) -> None:
        super().__init__(context, entity_id, class_name, EntityCallType.BASE)
        self.component1 = TestBaseCall(context, 16, entity_id)
        self.component2 = TestBaseCall(context, 21, entity_id)
        self.component3 = TestNoBaseBaseCall(context, 22, entity_id)


class AvatarCellCall(EntityCall):
    def __init__(self, context: ClientContext, entity_id: int, class_name: str) -> None:
        super().__init__(context, entity_id, class_name, EntityCallType.CELL)
        self.component1 = TestCellCall(context, 16, entity_id)
        self.component2 = TestCellCall(context, 21, entity_id)
        self.component3 = TestNoBaseCellCall(context, 22, entity_id)

    def dialog(self, target_id: int, dialog_id: int) -> None:
        def write(bundle: Bundle) -> None:
            bundle.write_int32(target_id)
            bundle.write_uint32(dialog_id)

        self._remote("dialog", write)

    def jump(self) -> None:
        self._remote("jump")

    def relive(self, relive_type: int) -> None:
        self._remote("relive", lambda b: b.write_uint8(relive_type))

    def request_pull(self) -> None:
        self._remote("requestPull")

    def use_target_skill(self, skill_id: int, target_id: int) -> None:
        def write(bundle: Bundle) -> None:
            bundle.write_int32(skill_id)
            bundle.write_int32(target_id)

        self._remote("useTargetSkill", write)


_CALL_CLASSES: dict[str, tuple[type[EntityCall], type[EntityCall]]] = {
    "Account": (AccountBaseCall, AccountCellCall),
    "Avatar": (AvatarBaseCall, AvatarCellCall),
}


def make_entity_calls(
    context: ClientContext, entity_id: int, class_name: str
) -> tuple[EntityCall, EntityCall]:
    """The (base, cell) calls for an entity of `class_name`.

    Classes without remote methods of their own (Gate, Monster, NPC, Space,
    SpaceDuplicate, Spaces, SpawnPoint and any other) get plain calls.
    """
    classes = _CALL_CLASSES.get(class_name)
    if classes is None:
        return (
            EntityCall(context, entity_id, class_name, EntityCallType.BASE),
            EntityCall(context, entity_id, class_name, EntityCallType.CELL),
        )
    base_cls, cell_cls = classes
    return base_cls(context, entity_id, class_name), cell_cls(context, entity_id, class_name)
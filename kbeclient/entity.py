"""Base classes for client-side entities and their components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .datatypes import DataType
from .stream import MemoryStream

Vector3 = tuple[float, float, float]
_ORIGIN: Vector3 = (0.0, 0.0, 0.0)

EVENT_ENTER_WORLD = "onEnterWorld"
EVENT_LEAVE_WORLD = "onLeaveWorld"
EVENT_ENTER_SPACE = "onEnterSpace"
EVENT_LEAVE_SPACE = "onLeaveSpace"
EVENT_SET_POSITION = "set_position"
EVENT_SET_DIRECTION = "set_direction"


@dataclass
class PropertyDef:
    """A property declared in an entity definition."""

    utype: int
    name: str = ""
    alias_id: int = -1
    is_base: bool = False
    is_owner_only: bool = False
    data_type: Optional[DataType] = None
    default: Any = None


@dataclass
class MethodDef:
    """A remote method declared in an entity definition."""

    utype: int
    name: str = ""
    alias_id: int = -1
    args: list[DataType] = field(default_factory=list)


@dataclass
class ScriptModule:
    """The definition of one entity class: its properties and methods."""

    name: str
    use_property_descr_alias: bool = False
    use_method_descr_alias: bool = False
    propertys: dict[str, PropertyDef] = field(default_factory=dict)
    id_propertys: dict[int, PropertyDef] = field(default_factory=dict)
    id_methods: dict[int, MethodDef] = field(default_factory=dict)
    base_methods: dict[str, MethodDef] = field(default_factory=dict)
    cell_methods: dict[str, MethodDef] = field(default_factory=dict)


@dataclass
class ClientContext:
    """Shared client state: the player, the space, definitions and events."""

    player_id: int = 0
    space_id: int = 0
    currserver: str = ""
    entity_server_pos: Vector3 = _ORIGIN
    module_defs: dict[str, ScriptModule] = field(default_factory=dict)
    network: Any = None
    listeners: dict[str, list[Callable[[dict], None]]] = field(default_factory=dict)

    def fire(self, event: str, data: dict) -> None:
        """Deliver `data` to every listener registered for `event`."""
        for handler in list(self.listeners.get(event, ())):
            handler(data)


class _Hooks:
    """Optional hook dispatch: subclasses define only the hooks they need."""

    def _notify(self, hook: str, *args: Any) -> None:
        method = getattr(self, hook, None)
        if method is not None:
            method(*args)


class Entity(_Hooks):
    """Base of every game entity.

    Subclasses may define hooks such as ``on_enter_world``, ``on_destroy``
    or ``on_<property>_changed``; those that are not defined are skipped.
    """

    def __init__(self, context: Optional[ClientContext] = None) -> None:
        self.context = context if context is not None else ClientContext()
        self.id = 0
        self.class_name = ""
        self.is_on_ground = False
        self.in_world = False
        self.is_controlled = False
        self.inited = False
        self.velocity = 0.0
        self.position: Vector3 = _ORIGIN
        self.direction: Vector3 = _ORIGIN
        self.space_id = 0
        self.entity_last_local_pos: Vector3 = _ORIGIN
        self.entity_last_local_dir: Vector3 = _ORIGIN
        self.base_entity_call: Any = None
        self.cell_entity_call: Any = None
        self.components: list[EntityComponent] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id}, class_name={self.class_name!r})"

    def is_player(self) -> bool:
        return self.id == self.context.player_id

    def destroy(self) -> None:
        self.detach_components()
        self._notify("on_destroy")

    def _event_base(self) -> dict:
        return {
            "entity_id": self.id,
            "space_id": self.context.space_id,
            "is_player": self.is_player(),
        }

    def _appear_event(self) -> dict:
        data = self._event_base()
        data.update(
            position=self.position,
            direction=self.direction,
            move_speed=self.velocity,
            is_on_ground=self.is_on_ground,
            entity_class_name=self.class_name,
            res="",
        )
        return data

    def _fire_position(self) -> None:
        self.context.fire(
            EVENT_SET_POSITION,
            {
                "entity_id": self.id,
                "position": self.position,
                "move_speed": self.velocity,
                "is_on_ground": self.is_on_ground,
            },
        )

    def _fire_direction(self) -> None:
        self.context.fire(
            EVENT_SET_DIRECTION, {"entity_id": self.id, "direction": self.direction}
        )

    def enter_world(self) -> None:
        self.in_world = True
        self._notify("on_enter_world")
        self.on_components_enterworld()
        self.context.fire(EVENT_ENTER_WORLD, self._appear_event())

    def leave_world(self) -> None:
        self.in_world = False
        self._notify("on_leave_world")
        self.on_components_leaveworld()
        self.context.fire(EVENT_LEAVE_WORLD, self._event_base())

    def enter_space(self) -> None:
        self.in_world = True
        self._notify("on_enter_space")
        self.context.fire(EVENT_ENTER_SPACE, self._appear_event())
        # the presentation layer must move the entity immediately
        self._fire_position()
        self._fire_direction()

    def leave_space(self) -> None:
        self.in_world = False
        self._notify("on_leave_space")
        self.context.fire(EVENT_LEAVE_SPACE, self._event_base())

    def on_position_changed(self, old_value: Vector3) -> None:
        if self.is_player():
            self.context.entity_server_pos = self.position
        if self.in_world:
            self._fire_position()

    def on_direction_changed(self, old_value: Vector3) -> None:
        if self.in_world:
            self._fire_direction()

    def get_components(self, name: str, all: bool) -> list["EntityComponent"]:
        """Components called `name`; only the first one unless `all`."""
        found = []
        for component in self.components:
            if component.name == name:
                found.append(component)
                if not all:
                    break
        return found

    def get_base_entity_call(self) -> Any:
        return self.base_entity_call

    def get_cell_entity_call(self) -> Any:
        return self.cell_entity_call

    def on_components_enterworld(self) -> None:
        for component in self.components:
            component._notify("on_enterworld")

    def on_components_leaveworld(self) -> None:
        for component in self.components:
            component._notify("on_leaveworld")

    def attach_components(self) -> None:
        for component in self.components:
            component._notify("on_attached", self)

    def detach_components(self) -> None:
        for component in self.components:
            component._notify("on_detached", self)


class EntityComponent(_Hooks):
    """A component attached to an entity property.

    Subclasses may define hooks such as ``on_enterworld``, ``on_attached``
    or ``on_<property>_changed``; those that are not defined are skipped.
    """

    def __init__(self) -> None:
        self.entity_component_property_id = 0
        self.component_type = 0
        self.owner_id = 0
        self.owner: Optional[Entity] = None
        self.name = ""

    def get_script_module(self) -> Optional[ScriptModule]:
        """The definition of this component, looked up through its owner."""
        if self.owner is None:
            return None
        return self.owner.context.module_defs.get(self.name)

    def create_from_stream(self, stream: MemoryStream) -> None:
        """Read the component header and its initial property values."""
        self.component_type = stream.read_int32() & 0xFFFF
        self.owner_id = stream.read_int32()
        stream.read_uint16()  # component description type, unused
        count = stream.read_uint16()
        if count > 0:
            self.on_update_propertys(0, stream, count)

    def on_update_propertys(
        self, prop_utype: int, stream: MemoryStream, max_count: int
    ) -> None:
        """Read up to `max_count` property values (all if negative).

        A non-zero `prop_utype` names the property; otherwise each value is
        preceded by its component and property ids.
        """
        remaining = max_count
        while len(stream) > 0 and remaining != 0:
            remaining -= 1
            module = self.get_script_module()
            if module is None:
                raise LookupError(f"component {self.name!r} has no definition")
            child_utype = prop_utype
            if child_utype == 0:
                if module.use_property_descr_alias:
                    stream.read_uint8()
                    child_utype = stream.read_uint8()
                else:
                    stream.read_uint16()
                    child_utype = stream.read_uint16()
            prop = module.id_propertys[child_utype]
            if prop.data_type is None:
                raise ValueError(f"property {prop.name!r} has no data type")
            old_value = getattr(self, prop.name, prop.default)
            setattr(self, prop.name, prop.data_type.create_from_stream(stream))
            owner = self.owner
            if owner is None:
                continue
            if (owner.inited if prop.is_base else owner.in_world):
                self._notify(f"on_{prop.name}_changed", old_value)
"""A small entity-component-system: entities, component stores and systems."""

from __future__ import annotations

from collections import deque
from typing import Any, Dict, Generic, Iterator, Set, Type, TypeVar

MAX_ENTITIES = 1000
MAX_COMPONENTS = 16

T = TypeVar("T")
S = TypeVar("S", bound="System")


class EcsError(Exception):
    """Raised when the entity-component-system is used incorrectly."""


def _check_handle(entity: int) -> None:
    if not 0 <= entity < MAX_ENTITIES:
        raise EcsError(f"invalid entity handle {entity}")


class EntityManager:
    """Hands out entity ids and keeps each entity's component signature."""

    def __init__(self) -> None:
        self._available: deque[int] = deque(range(MAX_ENTITIES))
        self._in_use: Set[int] = set()
        self._signatures = [0] * MAX_ENTITIES
        self.num_living_entities = 0

    def create_entity(self) -> int:
        if self.num_living_entities >= MAX_ENTITIES:
            raise EcsError("too many entities")
        entity = self._available.popleft()
        self._in_use.add(entity)
        self.num_living_entities += 1
        return entity

    def destroy_entity(self, entity: int) -> None:
        _check_handle(entity)
        if entity not in self._in_use:
            raise EcsError(f"entity {entity} is not in use")
        self._signatures[entity] = 0
        self._available.append(entity)
        self._in_use.remove(entity)
        self.num_living_entities -= 1

    def set_signature(self, entity: int, signature: int) -> None:
        _check_handle(entity)
        self._signatures[entity] = signature

    def get_signature(self, entity: int) -> int:
        _check_handle(entity)
        return self._signatures[entity]

    def in_use(self, entity: int) -> bool:
        return entity in self._in_use

    def clear_entities(self) -> None:
        self._in_use.clear()
        self._available = deque(range(MAX_ENTITIES))
        self._signatures = [0] * MAX_ENTITIES
        self.num_living_entities = 0


class ComponentArray(Generic[T]):
    """Storage for the components of one type, keyed by entity."""

    def __init__(self) -> None:
        self._components: Dict[int, T] = {}

    def __len__(self) -> int:
        return len(self._components)

    def __contains__(self, entity: object) -> bool:
        return entity in self._components

    def __iter__(self) -> Iterator[int]:
        return iter(self._components)

    def insert(self, entity: int, component: T) -> None:
        if entity in self._components:
            raise EcsError(f"entity {entity} already has this component")
        self._components[entity] = component

    def remove(self, entity: int) -> None:
        if entity not in self._components:
            raise EcsError(f"entity {entity} has no such component")
        del self._components[entity]

    def get(self, entity: int) -> T:
        try:
            return self._components[entity]
        except KeyError:
            raise EcsError(f"entity {entity} has no such component") from None

    def entity_destroyed(self, entity: int) -> None:
        self._components.pop(entity, None)

    def clear_entities(self) -> None:
        self._components.clear()


class ComponentManager:
    """Registers component types and routes components to their stores."""

    def __init__(self) -> None:
        self._types: Dict[type, int] = {}
        self._arrays: Dict[type, ComponentArray[Any]] = {}

    def _array(self, component_type: type) -> ComponentArray[Any]:
        try:
            return self._arrays[component_type]
        except KeyError:
            raise EcsError(f"component {component_type.__name__} is not registered") from None

    def register_component(self, component_type: type) -> None:
        if component_type in self._types:
            raise EcsError(f"component {component_type.__name__} is already registered")
        if len(self._types) >= MAX_COMPONENTS:
            raise EcsError("too many component types")
        self._types[component_type] = len(self._types)
        self._arrays[component_type] = ComponentArray()

    def get_component_type(self, component_type: type) -> int:
        try:
            return self._types[component_type]
        except KeyError:
            raise EcsError(f"component {component_type.__name__} is not registered") from None

    def add_component(self, entity: int, component: Any) -> None:
        self._array(type(component)).insert(entity, component)

    def remove_component(self, entity: int, component_type: type) -> None:
        self._array(component_type).remove(entity)

    def get_component(self, entity: int, component_type: Type[T]) -> T:
        return self._array(component_type).get(entity)

    def entity_destroyed(self, entity: int) -> None:
        for array in self._arrays.values():
            array.entity_destroyed(entity)

    def clear_entities(self) -> None:
        for array in self._arrays.values():
            array.clear_entities()


class System:
    """Base for systems: holds the entities whose signature matches."""

    def __init__(self) -> None:
        self.entities: Set[int] = set()


class SystemManager:
    """Keeps systems and their signatures, and their entity sets up to date."""

    def __init__(self) -> None:
        self._systems: Dict[type, System] = {}
        self._signatures: Dict[type, int] = {}

    def register_system(self, system: S) -> S:
        system_type = type(system)
        if system_type in self._systems:
            raise EcsError(f"system {system_type.__name__} is already registered")
        self._systems[system_type] = system
        return system

    def set_signature(self, system_type: type, signature: int) -> None:
        if system_type not in self._systems:
            raise EcsError(f"system {system_type.__name__} is not registered")
        self._signatures[system_type] = signature

    def get_system(self, system_type: Type[S]) -> S:
        try:
            return self._systems[system_type]  # type: ignore[return-value]
        except KeyError:
            raise EcsError(f"system {system_type.__name__} is not registered") from None

    def entity_destroyed(self, entity: int) -> None:
        for system in self._systems.values():
            system.entities.discard(entity)

    def clear_entities(self) -> None:
        for system in self._systems.values():
            system.entities.clear()

    def entity_signature_changed(self, entity: int, signature: int) -> None:
        for system_type, system in self._systems.items():
            wanted = self._signatures.get(system_type, 0)
            if signature & wanted == wanted:
                system.entities.add(entity)
            else:
                system.entities.discard(entity)


class Coordinator:
    """Single entry point tying entities, components and systems together."""

    def __init__(self) -> None:
        self.entity_manager = EntityManager()
        self.component_manager = ComponentManager()
        self.system_manager = SystemManager()

    def create_entity(self) -> int:
        return self.entity_manager.create_entity()

    def destroy_entity(self, entity: int) -> None:
        self.entity_manager.destroy_entity(entity)
        self.component_manager.entity_destroyed(entity)
        self.system_manager.entity_destroyed(entity)

    def clear_entities(self) -> None:
        self.entity_manager.clear_entities()
        self.component_manager.clear_entities()
        self.system_manager.clear_entities()

    def register_component(self, component_type: type) -> None:
        self.component_manager.register_component(component_type)

    def _update_signature(self, entity: int, component_type: type, present: bool) -> None:
        bit = 1 << self.component_manager.get_component_type(component_type)
        signature = self.entity_manager.get_signature(entity)
        signature = signature | bit if present else signature & ~bit
        self.entity_manager.set_signature(entity, signature)
        self.system_manager.entity_signature_changed(entity, signature)

    def add_component(self, entity: int, component: Any) -> None:
        self.component_manager.add_component(entity, component)
        self._update_signature(entity, type(component), True)

    def remove_component(self, entity: int, component_type: type) -> None:
        self.component_manager.remove_component(entity, component_type)
        self._update_signature(entity, component_type, False)

    def get_component(self, entity: int, component_type: Type[T]) -> T:
        return self.component_manager.get_component(entity, component_type)

    def get_component_type(self, component_type: type) -> int:
        return self.component_manager.get_component_type(component_type)

    def register_system(self, system: S) -> S:
        return self.system_manager.register_system(system)

    def set_system_signature(self, system_type: type, signature: int) -> None:
        self.system_manager.set_signature(system_type, signature)

    def get_system(self, system_type: Type[S]) -> S:
        return self.system_manager.get_system(system_type)
# -*- coding: utf-8 -*-
#
# ResourceTypeRegistry: resolves jsonapi types to deserializer descriptors and
# classes to serializer descriptors.
#
# Descriptors are registered explicitly when the app starts. A type (or class) that
# hasn't been registered explicitly is resolved by naming convention against the names
# of the registered descriptors:
#   "blog-posts" => "BlogPostDeserializer"
#   Person       => "PersonSerializer"
#
# Resolved descriptors are cached. Concurrent lookups of the same key write the same
# value, so the cache doesn't need a lock.
#
from typing import Any, Callable, Dict, Optional, Type, Union
import fjsonapi
from .deserializer import Deserializer
from .errors import UnknownTypeError
from .naming import classify, underscore
from .serializer import Serializer


def default_deserializer_name(type_name: str) -> str:
    return f"{classify(type_name)}Deserializer"


def default_serializer_name(klass: Type[Any]) -> str:
    return f"{klass.__name__}Serializer"


class ResourceTypeRegistry:
    """
    Registry of the (de)serializer descriptors, typically one per app:

        registry = ResourceTypeRegistry()
        registry.register_deserializer(Deserializer.from_model(Person))

        @registry.register_serializer
        class PersonSerializer(Serializer):
            type_ = "people"
            attributes = ("name",)
    """

    def __init__(
        self,
        deserializer_name: Callable[[str], str] = default_deserializer_name,
        serializer_name: Callable[[Type[Any]], str] = default_serializer_name,
    ) -> None:
        """
        :param deserializer_name: naming convention, jsonapi type => deserializer name
        :param serializer_name: naming convention, class => serializer name
        """
        self.deserializer_name = deserializer_name
        self.serializer_name = serializer_name
        self._deserializers_by_type: Dict[str, Any] = {}
        self._deserializers_by_name: Dict[str, Any] = {}
        self._serializers_by_class: Dict[Type[Any], Any] = {}
        self._serializers_by_name: Dict[str, Any] = {}
        self._deserializer_cache: Dict[str, Any] = {}
        self._serializer_cache: Dict[Type[Any], Any] = {}
        self._caches = [self._deserializer_cache, self._serializer_cache]

    @staticmethod
    def _instantiate(descriptor: Any) -> Any:
        # descriptor classes can be registered with a decorator
        if isinstance(descriptor, type):
            return descriptor()
        return descriptor

    def register_deserializer(self, descriptor: Union[Type[Deserializer], Any], type_: Optional[str] = None) -> Any:
        """
        :param descriptor: deserializer (class or instance)
        :param type_: jsonapi type, defaults to the descriptor `type_`
        :return: `descriptor`, so this can be used as a class decorator
        """
        instance = self._instantiate(descriptor)
        type_ = type_ or getattr(instance, "type_", None)
        if type_:
            self._deserializers_by_type[underscore(type_)] = instance
        name = getattr(instance, "name", None) or type(instance).__name__
        self._deserializers_by_name[name] = instance
        self.reset_caches()
        fjsonapi.log.debug(f"Registered deserializer {name} for type {type_}")
        return descriptor

    def register_serializer(self, descriptor: Union[Type[Serializer], Any], klass: Optional[Type[Any]] = None) -> Any:
        """
        :param descriptor: serializer (class or instance)
        :param klass: class of the instances that will be serialized, optional
        :return: `descriptor`, so this can be used as a class decorator
        """
        instance = self._instantiate(descriptor)
        if klass is not None:
            self._serializers_by_class[klass] = instance
        name = getattr(instance, "name", None) or type(instance).__name__
        self._serializers_by_name[name] = instance
        self.reset_caches()
        fjsonapi.log.debug(f"Registered serializer {name} for {klass}")
        return descriptor

    def register_model(self, Model: Type[Any], type_: Optional[str] = None) -> Type[Any]:
        """
        Register the default deserializer and serializer for a SQLAlchemy model
        :param Model: SQLAlchemy declarative class
        :param type_: jsonapi type, defaults to the tablename
        :return: `Model`, so this can be used as a class decorator
        """
        self.register_deserializer(Deserializer.from_model(Model, type_=type_))
        self.register_serializer(Serializer.from_model(Model, type_=type_), Model)
        return Model

    def deserializer_for(self, type_: str) -> Any:
        """
        :param type_: jsonapi type
        :return: deserializer descriptor
        :raises UnknownTypeError: when there's no deserializer for `type_`
        """
        key = underscore(type_)
        cached = self._deserializer_cache.get(key)
        if cached is not None:
            return cached
        descriptor = self._deserializers_by_type.get(key)
        if descriptor is None:
            descriptor = self._deserializers_by_name.get(self.deserializer_name(type_))
        if descriptor is None:
            raise UnknownTypeError(f"no deserializer for type {type_!r} ({self.deserializer_name(type_)})")
        self._deserializer_cache[key] = descriptor
        return descriptor

    def serializer_for(self, obj: Any) -> Any:
        """
        :param obj: instance or class
        :return: serializer descriptor of the (first registered base) class
        :raises UnknownTypeError: when there's no serializer for the class
        """
        klass = obj if isinstance(obj, type) else type(obj)
        cached = self._serializer_cache.get(klass)
        if cached is not None:
            return cached
        descriptor = None
        for base in klass.__mro__:
            descriptor = self._serializers_by_class.get(base)
            if descriptor is None:
                descriptor = self._serializers_by_name.get(self.serializer_name(base))
            if descriptor is not None:
                break
        if descriptor is None:
            raise UnknownTypeError(f"no serializer for {klass.__name__} ({self.serializer_name(klass)})")
        self._serializer_cache[klass] = descriptor
        return descriptor

    def reset_caches(self) -> None:
        for cache in self._caches:
            cache.clear()

"""
Attribute definitions and the per-task attribute registry.

An ``Attribute`` describes one task input: where its value comes from, what
type it should be coerced into, how it is transformed, and which rules it
must satisfy. ``AttributeRegistry.define_and_verify(task)`` resolves every
attribute against a task instance, binds the values as instance attributes
and collects problems into ``task.errors``.

Architecture:
    ::

        source ──▶ required? ──▶ derive (key / attribute / default)
               ──▶ coerce (types, in order) ──▶ transform
               ──▶ bind as task.<method_name> ──▶ validate
               ──▶ children (nested attributes read from this value)

Examples:
    >>> class CreateUser(Task):
    ...     def work(self):
    ...         self.context.user = {"email": self.email, "age": self.age}
    >>> CreateUser.required("email", format=r"@", transform="lower")
    >>> CreateUser.optional("age", types="integer", default=18)
    >>> CreateUser.call(email="A@B.IO", age="40").context.user
    {'email': 'a@b.io', 'age': 40}

Tags:
    attributes, parameters, coercion, validation, taskline

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from taskline.attributes.coercions import type_name
from taskline.core.errors import AttributeDefinitionError, CoercionError, ValidationError
from taskline.core.locale import translate

if TYPE_CHECKING:
    from taskline.task import Task

_MISSING = object()


class Attribute:
    """One declared task input.

    Args:
        name: Key (or attribute name) read from the source
        required: Whether the source must provide the key
        types: Type name(s) or Python type(s) to coerce into, tried in order
        source: ``"context"``, a task method/attribute name, a callable
            taking the task, or a literal object
        default: Value (or callable taking the task) used when absent or None
        as_: Name bound on the task; overrides prefix/suffix
        prefix: Prefix for the bound name; ``True`` uses ``"<source>_"``
        suffix: Suffix for the bound name; ``True`` uses ``"_<source>"``
        transform: Method name on the value or callable applied after coercion
        children: Nested attributes read from this attribute's value
        description: Free-form documentation
        **options: Validator options (``presence=True``, ``length={...}``)
    """

    def __init__(
        self,
        name: str,
        *,
        required: bool = False,
        types: Any = (),
        source: Any = "context",
        default: Any = None,
        as_: str | None = None,
        prefix: str | bool | None = None,
        suffix: str | bool | None = None,
        transform: Any = None,
        children: Iterable[Attribute] = (),
        description: str | None = None,
        **options: Any,
    ):
        self.name = name
        self.required = required
        self.types: tuple[Any, ...] = tuple(types) if isinstance(types, (list, tuple)) else (types,) if types else ()
        self.source = source
        self.default = default
        self.as_ = as_
        self.prefix = prefix
        self.suffix = suffix
        self.transform = transform
        self.description = description
        self.options = options
        self.parent: Attribute | None = None
        self.children: list[Attribute] = []
        for child in children:
            self.add_child(child)

    # =========================================================================
    # Construction helpers
    # =========================================================================

    @classmethod
    def define(cls, *names: str, **options: Any) -> list[Attribute]:
        if not names:
            raise ValueError("no attributes given")
        if len(names) > 1 and options.get("as_"):
            raise ValueError("as_ only supports one attribute per definition")
        return [cls(name, **options) for name in names]

    def add_child(self, child: Attribute) -> None:
        child.parent = self
        self.children.append(child)

    # =========================================================================
    # Naming
    # =========================================================================

    @property
    def source_name(self) -> str:
        if self.parent is not None:
            return self.parent.method_name
        if isinstance(self.source, str):
            return self.source
        return getattr(self.source, "__name__", "source")

    @property
    def method_name(self) -> str:
        if self.as_:
            return self.as_

        prefix = f"{self.source_name}_" if self.prefix is True else (self.prefix or "")
        suffix = f"_{self.source_name}" if self.suffix is True else (self.suffix or "")
        return f"{prefix}{self.name}{suffix}"

    @property
    def is_required(self) -> bool:
        return self.required and (self.parent is None or self.parent.is_required)

    # =========================================================================
    # Resolution
    # =========================================================================

    def define_and_verify(self, task: Task) -> None:
        """Resolve, bind and validate this attribute and its children."""
        method_name = self.method_name
        if method_name in task.attributes or hasattr(task, method_name):
            raise AttributeDefinitionError(f"{type(task).__name__}.{method_name} already defined")

        value = self._generate(task)
        task.attributes[method_name] = value
        setattr(task, method_name, value)

        if not task.errors.has(method_name):
            self._validate(task, value)

        for child in self.children:
            child.define_and_verify(task)

    def _generate(self, task: Task) -> Any:
        errors = task.errors
        method_name = self.method_name

        source = self._source_value(task)
        if source is _MISSING:
            return None

        if self.is_required and not _provides(source, self.name):
            errors.add(method_name, translate("taskline.attributes.required", method=self.source_name))
            return None

        value = self._derive(task, source)
        if value is None and not self.is_required:
            return None

        value = self._coerce(task, value)
        if errors.has(method_name):
            return None

        return self._transform(value)

    def _source_value(self, task: Task) -> Any:
        if self.parent is not None:
            return task.attributes.get(self.parent.method_name)
        if self.source == "context":
            return task.context
        if isinstance(self.source, str):
            try:
                member = getattr(task, self.source)
            except AttributeError:
                task.errors.add(
                    self.method_name,
                    translate("taskline.attributes.undefined", method=self.source),
                )
                return _MISSING
            return member() if callable(member) else member
        if callable(self.source):
            return self.source(task)
        return self.source

    def _derive(self, task: Task, source: Any) -> Any:
        if source is None:
            value = None
        elif isinstance(source, Mapping):
            value = source.get(self.name)
        else:
            value = getattr(source, self.name, None)

        if value is None:
            return self.default(task) if callable(self.default) else self.default
        return value

    def _coerce(self, task: Task, value: Any) -> Any:
        if not self.types:
            return value

        registry = type(task).task_settings()["coercions"]
        error: CoercionError | None = None
        for type_ in self.types:
            try:
                return registry.coerce(type_, task, value, self.options)
            except CoercionError as exc:
                error = exc

        if len(self.types) == 1 and error is not None:
            message = error.message
        else:
            labels = ", ".join(
                translate(f"taskline.types.{type_name(t)}", default=type_name(t)) for t in self.types
            )
            message = translate("taskline.coercions.into_any", types=labels)

        task.errors.add(self.method_name, message)
        return None

    def _transform(self, value: Any) -> Any:
        transform = self.transform
        if isinstance(transform, str):
            member = getattr(value, transform, None)
            return member() if callable(member) else value
        if callable(transform):
            return transform(value)
        return value

    def _validate(self, task: Task, value: Any) -> None:
        if value is None and not self.is_required:
            return

        registry = type(task).task_settings()["validators"]
        for name, options in self.options.items():
            if name not in registry:
                continue
            try:
                registry.validate(name, task, value, options)
            except ValidationError as exc:
                task.errors.add(self.method_name, exc.message)

    def __repr__(self) -> str:
        flag = "required" if self.required else "optional"
        return f"<Attribute {self.method_name} {flag}>"


def required(*names: str, **options: Any) -> list[Attribute]:
    """Build required attributes, e.g. for ``children=``."""
    return Attribute.define(*names, **{**options, "required": True})


def optional(*names: str, **options: Any) -> list[Attribute]:
    return Attribute.define(*names, **{**options, "required": False})


def _provides(source: Any, name: str) -> bool:
    if isinstance(source, Mapping):
        return name in source
    if callable(source):
        return True
    return hasattr(source, name)


class AttributeRegistry:
    """Ordered attribute definitions for one task class."""

    def __init__(self, registry: list[Attribute] | None = None):
        self.registry: list[Attribute] = list(registry or [])

    def dup(self) -> AttributeRegistry:
        return self.__class__(self.registry)

    def register(self, *attributes: Attribute | Iterable[Attribute]) -> AttributeRegistry:
        for attribute in attributes:
            if isinstance(attribute, Attribute):
                self.registry.append(attribute)
            else:
                self.registry.extend(attribute)
        return self

    def deregister(self, *names: str) -> AttributeRegistry:
        self.registry = [a for a in self.registry if a.name not in names and a.method_name not in names]
        return self

    def define_and_verify(self, task: Task) -> None:
        for attribute in self.registry:
            attribute.define_and_verify(task)

    def __iter__(self):
        return iter(self.registry)

    def __len__(self) -> int:
        return len(self.registry)


__all__ = ["Attribute", "AttributeRegistry", "optional", "required"]

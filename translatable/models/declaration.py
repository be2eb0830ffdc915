"""
Translatable attribute declarations.

A record type lists its translatable fields in ``__translatable__``::

    __translatable__ = [("name", {"index": True}), "states"]

Entries may be bare names, ``(name, options)`` pairs, mappings with a
``name`` key, or ``TranslatableAttributeSpec`` instances. The declaration is
resolved once, when the class is defined, into a ``ResolvedTranslatableSpec``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Tuple

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from translatable.core.exceptions import TranslatableConfigurationError


class TranslatableAttributeSpec(BaseModel):
    name: str = Field(..., min_length=1, description="Attribute name")
    indexed: bool = Field(
        False,
        validation_alias=AliasChoices("indexed", "index"),
        description="Keep a scalar copy in the index table for filtering/sorting",
    )
    fallback_to_default: bool = Field(
        True,
        validation_alias=AliasChoices("fallback_to_default", "fallback"),
        description="Read the default-locale value when no translation exists",
    )
    jsonable: bool = Field(
        False, description="Stored as JSON text; decoded on translated reads"
    )

    model_config = {"frozen": True, "extra": "forbid", "populate_by_name": True}


@dataclass(frozen=True)
class ResolvedTranslatableSpec:
    names: Tuple[str, ...] = ()
    options: Dict[str, TranslatableAttributeSpec] = field(default_factory=dict)

    def __contains__(self, name: str) -> bool:
        return name in self.options

    def __bool__(self) -> bool:
        return bool(self.names)

    def get(self, name: str):
        return self.options.get(name)

    def indexed(self) -> Tuple[str, ...]:
        return tuple(name for name in self.names if self.options[name].indexed)

    def without_fallback(self) -> Tuple[str, ...]:
        return tuple(
            name for name in self.names if not self.options[name].fallback_to_default
        )

    def uses_fallback(self, name: str) -> bool:
        options = self.options.get(name)
        return options is None or options.fallback_to_default

    def is_jsonable(self, name: str) -> bool:
        options = self.options.get(name)
        return options is not None and options.jsonable


def _entry_to_spec(entry: Any) -> TranslatableAttributeSpec:
    if isinstance(entry, TranslatableAttributeSpec):
        return entry
    if isinstance(entry, str):
        return TranslatableAttributeSpec(name=entry)
    if isinstance(entry, Mapping):
        return TranslatableAttributeSpec.model_validate(dict(entry))
    if isinstance(entry, (tuple, list)) and entry and isinstance(entry[0], str):
        name, *rest = entry
        if len(rest) > 1 or (rest and not isinstance(rest[0], Mapping)):
            raise TranslatableConfigurationError(
                f"Translatable entry {entry!r} must be (name, {{options}})",
                details={"entry": repr(entry)},
            )
        options = dict(rest[0]) if rest else {}
        return TranslatableAttributeSpec.model_validate({**options, "name": name})

    raise TranslatableConfigurationError(
        f"Cannot resolve an attribute name from translatable entry {entry!r}",
        details={"entry": repr(entry)},
    )


def resolve_translatable_spec(declaration: Iterable[Any], owner: str = "") -> ResolvedTranslatableSpec:
    """Validate a ``__translatable__`` declaration.

    Raises:
        TranslatableConfigurationError: if the declaration is not a list/tuple,
            an entry cannot be resolved to a name, an option is unknown, or a
            name repeats.
    """
    if declaration is None:
        return ResolvedTranslatableSpec()
    if not isinstance(declaration, (list, tuple)):
        raise TranslatableConfigurationError(
            f"{owner or 'Model'}.__translatable__ must be a list, got {type(declaration).__name__}",
            details={"owner": owner},
        )

    names = []
    options: Dict[str, TranslatableAttributeSpec] = {}
    for entry in declaration:
        try:
            spec = _entry_to_spec(entry)
        except ValidationError as e:
            raise TranslatableConfigurationError(
                f"Invalid translatable entry {entry!r} on {owner or 'model'}: {e}",
                details={"owner": owner, "entry": repr(entry)},
            ) from e
        if spec.name in options:
            raise TranslatableConfigurationError(
                f"Attribute '{spec.name}' is declared translatable twice on {owner or 'model'}",
                details={"owner": owner, "attribute": spec.name},
            )
        names.append(spec.name)
        options[spec.name] = spec

    return ResolvedTranslatableSpec(names=tuple(names), options=options)

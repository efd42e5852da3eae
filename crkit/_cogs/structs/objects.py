"""
The base structures of the typed resource objects.

A typed resource object is a dataclass which inherits from :class:`TypedObject`
and declares its fields with type hints. The field names are pythonic
(``display_name``), while their names in the documents are the API's ones
(``displayName``): lowerCamelCase by default, or as explicitly declared
in the field's metadata::

    @dataclasses.dataclass
    class MySpec:
        display_name: str
        image_ref: Optional[str] = dataclasses.field(default=None, metadata={'json': 'image'})

    @dataclasses.dataclass
    class MyResource(crkit.TypedObject):
        spec: MySpec = dataclasses.field(default_factory=MySpec)

The resource type (API group, version, kind) of a typed object is not stored
in the object itself; it is known from the scheme where the class is registered.
"""
import dataclasses
import datetime
from typing import Dict, Optional


def wire_name(field: 'dataclasses.Field[object]') -> str:
    """
    The field's name as used in the documents: explicit or lowerCamelCase.
    """
    explicit: Optional[str] = field.metadata.get('json')
    if explicit:
        return explicit
    head, *tail = field.name.rstrip('_').split('_')
    return head + ''.join(word[:1].upper() + word[1:] for word in tail)


@dataclasses.dataclass
class ObjectMeta:
    name: Optional[str] = None
    namespace: Optional[str] = None
    labels: Dict[str, str] = dataclasses.field(default_factory=dict)
    annotations: Dict[str, str] = dataclasses.field(default_factory=dict)
    uid: Optional[str] = None
    resource_version: Optional[str] = None
    generation: Optional[int] = None
    creation_timestamp: Optional[datetime.datetime] = None


@dataclasses.dataclass
class TypedObject:
    # Keyword-only, so that the subclasses can declare their own fields without defaults.
    metadata: ObjectMeta = dataclasses.field(default_factory=ObjectMeta, kw_only=True)

    @property
    def name(self) -> Optional[str]:
        return self.metadata.name

    @property
    def namespace(self) -> Optional[str]:
        return self.metadata.namespace

"""
Reconciliation of the objects' own identities with the requested keys.

All client variants address the objects by an explicit key (namespace & name),
and the objects carry their own names & namespaces in the metadata. The key
fills the absent fields of the object; the conflicting fields are an error.
The caller's objects are never modified: modified copies are returned.
"""
import dataclasses
from typing import Optional, TypeVar

from crkit._cogs.clients import transports
from crkit._cogs.structs import bodies, objects, references

_ObjectT = TypeVar('_ObjectT', bound=objects.TypedObject)


def get_namespace(
        key: references.ObjectKey,
        resource: references.Resource,
        transport: transports.Transport,
) -> Optional[str]:
    """
    The namespace to use in the URLs: explicit, or the default one, or none.
    """
    if not resource.namespaced:
        if key.namespace is not None:
            raise ValueError(f"{resource!r} is cluster-scoped, but the namespace is given: {key}")
        return None
    namespace = key.namespace if key.namespace is not None else transport.default_namespace
    if namespace is None:
        raise ValueError(f"{resource!r} is namespaced, but no namespace is given: {key}")
    return namespace


def _check(field: str, existing: Optional[str], requested: Optional[str]) -> None:
    if existing is not None and requested is not None and existing != requested:
        raise ValueError(f"The object's {field} {existing!r} mismatches the requested {requested!r}.")


def identify_document(
        document: bodies.Document,
        *,
        name: str,
        namespace: Optional[str],
) -> bodies.Document:
    _check('name', document.name, name)
    _check('namespace', document.namespace, namespace)
    result = bodies.Document(document.to_dict())
    result.ensure('metadata.name', name)
    if namespace is not None:
        result.ensure('metadata.namespace', namespace)
    return result


def identify_object(
        obj: _ObjectT,
        *,
        name: str,
        namespace: Optional[str],
) -> _ObjectT:
    _check('name', obj.metadata.name, name)
    _check('namespace', obj.metadata.namespace, namespace)
    metadata = dataclasses.replace(
        obj.metadata,
        name=name,
        namespace=namespace if namespace is not None else obj.metadata.namespace,
    )
    return dataclasses.replace(obj, metadata=metadata)

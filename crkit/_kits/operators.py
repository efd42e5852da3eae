"""
The typed shapes of the Operator Lifecycle Manager's resources.

Only the catalog sources are declared, and only with their commonly used
fields. See: https://olm.operatorframework.io/docs/concepts/crds/catalogsource/
"""
import dataclasses
import datetime
import enum
from typing import Any, Dict, List, Optional

from crkit._cogs.structs import objects, references
from crkit._core.schemes import registries

GROUP_VERSION = references.GroupVersion(group='operators.coreos.com', version='v1alpha1')


class SourceType(str, enum.Enum):
    GRPC = 'grpc'
    CONFIGMAP = 'configmap'
    INTERNAL = 'internal'


@dataclasses.dataclass
class UpdateStrategy:
    registry_poll: Optional[Dict[str, Any]] = None


@dataclasses.dataclass
class CatalogSourceSpec:
    source_type: SourceType
    image: Optional[str] = None
    address: Optional[str] = None
    config_map: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    publisher: Optional[str] = None
    priority: Optional[int] = None
    secrets: List[str] = dataclasses.field(default_factory=list)
    update_strategy: Optional[UpdateStrategy] = None


@dataclasses.dataclass
class ConnectionState:
    last_observed_state: str
    address: Optional[str] = None
    last_connect: Optional[datetime.datetime] = None


@dataclasses.dataclass
class CatalogSourceStatus:
    message: Optional[str] = None
    reason: Optional[str] = None
    connection_state: Optional[ConnectionState] = None


@dataclasses.dataclass
class CatalogSource(objects.TypedObject):
    spec: CatalogSourceSpec
    status: Optional[CatalogSourceStatus] = None


def add_known_types(scheme: registries.Scheme) -> None:
    scheme.add_known_types(GROUP_VERSION, CatalogSource)


builder = registries.SchemeBuilder(add_known_types)
add_to_scheme = builder.add_to_scheme

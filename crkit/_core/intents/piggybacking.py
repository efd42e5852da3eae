"""
Discovery of the connection info from the usual places: kubeconfigs & pods.

Only the static credentials are interpreted: tokens, certificates, passwords,
and the access tokens already cached by the auth-providers. The providers
themselves (exec plugins, OIDC refreshes, cloud CLIs) are never invoked.

.. seealso::
    :mod:`credentials` and :mod:`building`.
"""
import os
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import yaml

from crkit._cogs.helpers import typedefs
from crkit._cogs.structs import credentials

# When several sources are available, the higher priority wins. Patchable.
PRIORITY_OF_KUBECONFIG: int = 10
PRIORITY_OF_SERVICE_ACCOUNT: int = 20

# https://kubernetes.io/docs/tasks/run-application/access-api-from-pod/
SERVICE_ACCOUNT_TOKEN_PATH = '/var/run/secrets/kubernetes.io/serviceaccount/token'
SERVICE_ACCOUNT_NAMESPACE_PATH = '/var/run/secrets/kubernetes.io/serviceaccount/namespace'
SERVICE_ACCOUNT_CA_PATH = '/var/run/secrets/kubernetes.io/serviceaccount/ca.crt'
IN_CLUSTER_SERVER = 'https://kubernetes.default.svc'

DEFAULT_KUBECONFIG = '~/.kube/config'

LoginFn = Callable[..., Optional[credentials.ConnectionInfo]]


def _read_stripped(path: str) -> str:
    with open(path, encoding='utf-8') as f:
        return f.read().strip()


def has_service_account() -> bool:
    return os.path.exists(SERVICE_ACCOUNT_TOKEN_PATH)


def login_with_service_account(**_: Any) -> Optional[credentials.ConnectionInfo]:
    """
    Use the service account mounted into the current pod, if any.
    """
    if not os.path.exists(SERVICE_ACCOUNT_TOKEN_PATH):
        return None

    token = _read_stripped(SERVICE_ACCOUNT_TOKEN_PATH)
    namespace = (_read_stripped(SERVICE_ACCOUNT_NAMESPACE_PATH)
                 if os.path.exists(SERVICE_ACCOUNT_NAMESPACE_PATH) else '')
    ca_path = SERVICE_ACCOUNT_CA_PATH if os.path.exists(SERVICE_ACCOUNT_CA_PATH) else None
    return credentials.ConnectionInfo(
        server=IN_CLUSTER_SERVER,
        ca_path=ca_path,
        token=token or None,
        default_namespace=namespace or None,
        priority=PRIORITY_OF_SERVICE_ACCOUNT,
    )


def has_kubeconfig() -> bool:
    home_config_exists = os.path.exists(os.path.expanduser(DEFAULT_KUBECONFIG))
    return bool(os.environ.get('KUBECONFIG')) or home_config_exists


def _kubeconfig_paths() -> List[str]:
    value = os.environ.get('KUBECONFIG')
    if not value:
        home_config = os.path.expanduser(DEFAULT_KUBECONFIG)
        return [home_config] if os.path.exists(home_config) else []
    return [os.path.expanduser(path.strip()) for path in value.split(os.pathsep) if path.strip()]


class _MergedKubeconfig:
    """
    Several kubeconfig files merged: the first occurrence of every entry wins.

    https://kubernetes.io/docs/concepts/configuration/organize-cluster-access-kubeconfig/
    """

    def __init__(self) -> None:
        super().__init__()
        self.current_context: Optional[str] = None
        self.sections: Dict[str, Dict[str, Mapping[str, Any]]] = {
            'contexts': {}, 'clusters': {}, 'users': {},
        }

    def merge(self, config: Mapping[str, Any]) -> None:
        if self.current_context is None:
            self.current_context = config.get('current-context')
        for section, entries in self.sections.items():
            field = section[:-1]  # "contexts" -> "context", etc.
            for item in config.get(section) or []:
                entries.setdefault(item['name'], item.get(field) or {})

    def entry(self, section: str, name: Optional[str]) -> Mapping[str, Any]:
        try:
            return self.sections[section][name]  # type: ignore
        except KeyError:
            raise credentials.LoginError(f"Kubeconfig refers to an undefined entry: "
                                         f"{section[:-1]} {name!r}") from None


def _load_kubeconfigs(paths: Iterable[str]) -> _MergedKubeconfig:
    merged = _MergedKubeconfig()
    for path in paths:
        with open(path, encoding='utf-8') as f:
            merged.merge(yaml.safe_load(f.read()) or {})
    return merged


def login_with_kubeconfig(**_: Any) -> Optional[credentials.ConnectionInfo]:
    """
    Use the current context of the kubeconfig files, if any.

    The files are taken from ``$KUBECONFIG`` (several paths are separated
    by ``os.pathsep``), or from ``~/.kube/config`` if the variable is unset.
    The absent or unparseable files fail the login instead of being skipped.
    """
    paths = _kubeconfig_paths()
    if not paths:
        return None

    merged = _load_kubeconfigs(paths)
    if merged.current_context is None:
        raise credentials.LoginError("The current context is not set in kubeconfigs.")

    context = merged.entry('contexts', merged.current_context)
    cluster = merged.entry('clusters', context.get('cluster'))
    user = merged.entry('users', context['user']) if context.get('user') else {}

    # Only the token already cached by an auth-provider, no refreshing.
    provider_config = (user.get('auth-provider') or {}).get('config') or {}
    return credentials.ConnectionInfo(
        server=cluster.get('server'),  # type: ignore
        ca_path=cluster.get('certificate-authority'),
        ca_data=cluster.get('certificate-authority-data'),
        insecure=cluster.get('insecure-skip-tls-verify'),
        certificate_path=user.get('client-certificate'),
        certificate_data=user.get('client-certificate-data'),
        private_key_path=user.get('client-key'),
        private_key_data=user.get('client-key-data'),
        username=user.get('username'),
        password=user.get('password'),
        token=user.get('token') or provider_config.get('access-token'),
        default_namespace=context.get('namespace'),
        priority=PRIORITY_OF_KUBECONFIG,
    )


LOGIN_FNS: List[LoginFn] = [
    login_with_kubeconfig,
    login_with_service_account,
]


def login(
        *,
        logger: typedefs.Logger,
        login_fns: Optional[List[LoginFn]] = None,
) -> credentials.ConnectionInfo:
    """
    Pick the most preferred connection info of all the available sources.

    The malformed sources are not skipped: they fail the whole login with
    `LoginError`, as it is unclear what is intended by the caller.
    """
    infos: List[credentials.ConnectionInfo] = []
    for fn in (login_fns if login_fns is not None else LOGIN_FNS):
        try:
            info = fn(logger=logger)
        except credentials.LoginError:
            raise
        except (OSError, yaml.YAMLError, TypeError, AttributeError, KeyError) as e:
            raise credentials.LoginError(f"Cannot read the credentials via {fn.__name__}: {e}") from e
        if info is not None:
            logger.debug(f"Credentials are found via {fn.__name__}: {info.server}")
            infos.append(info)

    if not infos:
        raise credentials.LoginError("No credentials are found: neither in kubeconfigs, "
                                     "nor in the service account.")
    return max(infos, key=lambda info: info.priority)

"""Backend demo service used as the sample workload of the k8s hands-on.

Exposes ``__version__`` from the installed distribution metadata.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("k8s-hands-on-backend")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

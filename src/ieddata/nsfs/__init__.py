"""Namespace-scoped file access: name sanitization and path resolution."""

from ieddata.nsfs.procfsroot import eval_symlinks, open_beneath
from ieddata.nsfs.resolver import NamespaceFileRef, proc_root, resolve
from ieddata.nsfs.sanitize import sanitize

__all__ = [
    "NamespaceFileRef",
    "eval_symlinks",
    "open_beneath",
    "proc_root",
    "resolve",
    "sanitize",
]

from __future__ import annotations
import importlib
from typing import Dict, Any

from kernel_sources.registry import lookup_kernel


KERNEL_ROOT = "kernel_sources"


def _module_name(backend: str, fractal: str, operation: str) -> str:
    return f"{KERNEL_ROOT}.{backend.lower()}.{fractal.lower()}.{operation.lower()}"


def load_kernel(backend: str, fractal: str, operation: str, precision: str) -> Dict[str, Any]:
    """
    Import the kernel module by convention (which registers it) and return its
    validated metadata.
    """
    try:
        meta = lookup_kernel(backend, fractal, operation, precision)
    except KeyError:
        try:
            importlib.import_module(_module_name(backend, fractal, operation))
        except ModuleNotFoundError as e:
            raise KeyError(f"No kernel module for {fractal}.{operation} on {backend}") from e
        meta = lookup_kernel(backend, fractal, operation, precision)
    _validate_meta(backend, meta, f"registry[{fractal}.{operation}:{backend}/{precision}]")
    return meta


def _validate_meta(backend: str, meta: Dict[str, Any], where: str) -> None:
    if "arg_order" not in meta or not isinstance(meta["arg_order"], (list, tuple)):
        raise KeyError(f"{where} must provide an 'arg_order' list")
    if backend.upper() == "OPENCL":
        if "src" not in meta["func"] or "kernel_name" not in meta["func"]:
            raise KeyError(f"{where} must provide 'src' and 'kernel_name' for OpenCL")
    elif not callable(meta.get("func")):
        raise KeyError(f"{where} must provide a callable 'func' for {backend}")

    for key in ("scalars", "produces"):
        if key not in meta or not isinstance(meta[key], (list, tuple)):
            meta.setdefault(key, [])

from __future__ import annotations
from typing import Any, Dict, List, NamedTuple


class KernelKey(NamedTuple):
    fractal: str
    op_name: str
    backend: str      # upper-case backend name, e.g. "CPU", "OPENCL"
    precision: str    # "f32" | "f64"


# (fractal, op, backend, precision) -> kernel meta (func, arg_order, scalars, produces, block)
_KERNELS: Dict[KernelKey, Dict[str, Any]] = {}

# Backend-agnostic operation descriptors: [fractal][op_name] -> {"depends_on", "default_params"}
_OP_DESCRIPTORS: Dict[str, Dict[str, Dict[str, Any]]] = {}


def _key(fractal: str, op_name: str, backend: str, precision: str) -> KernelKey:
    return KernelKey(fractal.lower(), op_name.lower(), backend.upper(), precision.lower())


def register_kernel(fractal: str, op_name: str, backend: str, precision: str, **meta: Any) -> None:
    """
    Register one compiled-or-compilable kernel variant.
    Example:
        register_kernel("mandelbrot", "iter", "CPU", "f32", func=njit_func, arg_order=[...])
    """
    _KERNELS[_key(fractal, op_name, backend, precision)] = meta


def register_op_descriptor(fractal: str, op_name: str, **descriptor: Any) -> None:
    """
    Example:
        register_op_descriptor("mandelbrot", "iter", depends_on=[], default_params={"bailout": 4.0})
    """
    _OP_DESCRIPTORS.setdefault(fractal.lower(), {})[op_name.lower()] = descriptor


def lookup_kernel(backend: str, fractal: str, op_name: str, precision: str) -> Dict[str, Any]:
    """
    Raw registry lookup. Raises KeyError if not found.
    """
    key = _key(fractal, op_name, backend, precision)
    try:
        return _KERNELS[key]
    except KeyError as e:
        have = registered_precisions(fractal, op_name, backend)
        raise KeyError(f"Kernel not found for fractal='{key.fractal}', op='{key.op_name}', "
                       f"backend='{key.backend}', precision='{key.precision}' "
                       f"(registered: {have or 'none'})") from e


def registered_precisions(fractal: str, op_name: str, backend: str) -> List[str]:
    probe = _key(fractal, op_name, backend, "")
    return sorted(k.precision for k in _KERNELS
                  if k[:3] == probe[:3])


def list_kernels(fractal: str, backend: str, precision: str) -> List[str]:
    """
    Operation names registered for the fractal on this backend and precision.
    """
    fr, be, pr = fractal.lower(), backend.upper(), precision.lower()
    return sorted(k.op_name for k in _KERNELS
                  if k.fractal == fr and k.backend == be and k.precision == pr)


def get_op_descriptor(fractal: str, op_name: str) -> Dict[str, Any]:
    try:
        return _OP_DESCRIPTORS[fractal.lower()][op_name.lower()]
    except KeyError as e:
        raise KeyError(f"Operation descriptor not found for fractal='{fractal}', op='{op_name}'") from e

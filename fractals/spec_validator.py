from __future__ import annotations
from typing import List, Optional

import numpy as np

from fractals.base import ProgramSpec, KernelStep

SUPPORTED_PRECISIONS = (np.float32, np.float64)


class SpecError(Exception):
    """Aggregated ProgramSpec validation error(s)."""


def _check_output(spec: ProgramSpec, errors: List[str]) -> None:
    out = spec.args.get(spec.output_arg) if spec.output_arg else None
    if out is None:
        errors.append(f"output_arg '{spec.output_arg}' is not present in spec.args.")
        return
    if out.role != "buffer_out":
        errors.append(f"output_arg '{spec.output_arg}' must have role='buffer_out'.")
    if not np.issubdtype(np.dtype(out.dtype), np.integer):
        errors.append(f"output_arg '{spec.output_arg}' must hold integer iteration counts, got {out.dtype}.")
    elif np.dtype(out.dtype) != np.dtype(spec.output_dtype):
        errors.append(f"output_arg dtype {out.dtype} differs from output_dtype {spec.output_dtype}.")


def _check_args(spec: ProgramSpec, errors: List[str]) -> None:
    if np.dtype(spec.precision).type not in SUPPORTED_PRECISIONS:
        errors.append(f"Unsupported precision {spec.precision}; use float32 or float64.")
    for name, a in spec.args.items():
        if a.role not in {"scalar", "buffer_out"}:
            errors.append(f"Arg '{name}': invalid role='{a.role}'.")
        if a.dtype is None:
            errors.append(f"Arg '{name}': dtype is None.")
        elif (a.role == "scalar" and np.issubdtype(np.dtype(a.dtype), np.floating)
              and np.dtype(a.dtype) != np.dtype(spec.precision)):
            # mixed widths would silently promote f32 kernels to f64
            errors.append(f"Arg '{name}': real scalar is {a.dtype}, program precision is {spec.precision}.")


def _check_step(idx: int, step: KernelStep, spec: ProgramSpec, backend: str, errors: List[str]) -> None:
    where = f"Step[{idx}] '{step.name}'"
    if not step.args or not isinstance(step.args, (list, tuple)):
        errors.append(f"{where}: args must be a non-empty list.")
        return

    missing = [a for a in step.args if a not in spec.args]
    if missing:
        errors.append(f"{where}: args {missing} not found in spec.args.")
    if len(set(step.args)) != len(step.args):
        errors.append(f"{where}: args contain duplicates.")
    if spec.output_arg not in step.args:
        errors.append(f"{where}: never receives output buffer '{spec.output_arg}'.")

    fn = step.func
    if backend == "OPENCL":
        if not isinstance(fn, dict) or "src" not in fn or "kernel_name" not in fn:
            errors.append(f"{where}: OpenCL meta must include 'src' and 'kernel_name'.")
        elif "build_options" in fn and not isinstance(fn["build_options"], (list, tuple)):
            errors.append(f"{where}: 'build_options' must be a list[str] if provided.")
        block = (step.meta or {}).get("block")
        if block is not None and (len(block) != 2 or min(block) < 1):
            errors.append(f"{where}: work-group block must be two positive ints, got {block}.")
    elif not callable(fn):
        errors.append(f"{where}: 'func' must be callable for backend '{backend}'.")


def validate_program_spec(spec: ProgramSpec, *, backend_hint: Optional[str] = None) -> None:
    """
    Validates structural correctness of a ProgramSpec. Raises SpecError
    listing every problem found.
    """
    errors: List[str] = []
    spec_args = spec.args or {}
    steps = spec.steps or []
    backend = (backend_hint or spec.backend or "").upper()

    if not spec_args:
        errors.append("ProgramSpec has no args.")
    else:
        _check_output(spec, errors)
        _check_args(spec, errors)

    if not steps:
        errors.append("ProgramSpec has no steps.")
    for idx, step in enumerate(steps):
        if not isinstance(step, KernelStep):
            errors.append(f"Step[{idx}] is not a KernelStep.")
            continue
        _check_step(idx, step, spec, backend, errors)

    if errors:
        raise SpecError("ProgramSpec validation failed:\n- " + "\n- ".join(errors))

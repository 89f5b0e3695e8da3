from __future__ import annotations

import numpy as np
import pytest

from fractals.base import ArgSpec, KernelStep, ProgramSpec, RenderSettings, Viewport
from fractals.mandelbrot import MandelbrotFractal
from fractals.spec_validator import SpecError, validate_program_spec
from kernel_sources import get_op_descriptor, list_kernels, load_kernel


def test_load_cpu_kernel_imports_and_registers() -> None:
    meta = load_kernel("cpu", "mandelbrot", "iter", "f32")
    assert callable(meta["func"])
    assert list(meta["arg_order"])[-1] == "iterations"
    assert "iter" in list_kernels("mandelbrot", "CPU", "f64")


def test_load_opencl_kernel_source() -> None:
    meta = load_kernel("OPENCL", "mandelbrot", "iter", "f64")
    assert meta["func"]["kernel_name"] == "mandelbrot_iter"
    assert "USE_DOUBLE=1" in meta["func"]["build_options"]
    assert meta["block"] == (8, 8)


def test_unknown_kernel_raises_key_error() -> None:
    with pytest.raises(KeyError):
        load_kernel("CPU", "mandelbrot", "does_not_exist", "f32")


def test_op_descriptor_default_bailout() -> None:
    assert get_op_descriptor("mandelbrot", "iter")["default_params"]["bailout"] == 4.0


@pytest.mark.parametrize("precision,tag", [(np.float32, "f32"), (np.float64, "f64")])
def test_program_spec_dtypes(precision, tag: str) -> None:
    st = RenderSettings(max_iter=100, precision=precision)
    assert st.precision_tag == tag
    spec = MandelbrotFractal().get_program_spec(st, "CPU")
    validate_program_spec(spec)
    assert spec.output_arg == "iterations"
    assert spec.args["offset_x"].dtype is precision
    assert spec.args["max_iter"].dtype is np.int32
    assert spec.args["iterations"].role == "buffer_out"


def test_build_arg_values_uses_default_bailout() -> None:
    vals = MandelbrotFractal().build_arg_values(
        Viewport(0.0, 0.0, 1.0, 4, 3), RenderSettings(max_iter=10))
    assert vals["bailout"] == 4.0
    assert (vals["width"], vals["height"], vals["max_iter"]) == (4, 3, 10)


def _spec(**overrides) -> ProgramSpec:
    args = {
        "n": ArgSpec("n", "scalar", np.int32),
        "out": ArgSpec("out", "buffer_out", np.int32),
    }
    base = dict(backend="CPU", precision=np.float32, args=args,
                steps=[KernelStep("k", lambda n, out: None, ["n", "out"])],
                output_arg="out")
    base.update(overrides)
    return ProgramSpec(**base)


def test_validator_accepts_minimal_spec() -> None:
    validate_program_spec(_spec())


def test_validator_rejects_missing_output() -> None:
    with pytest.raises(SpecError, match="output_arg"):
        validate_program_spec(_spec(output_arg="nope"))


def test_validator_rejects_empty_steps() -> None:
    with pytest.raises(SpecError, match="no steps"):
        validate_program_spec(_spec(steps=[]))


def test_validator_rejects_unknown_step_arg() -> None:
    step = KernelStep("k", lambda *a: None, ["n", "missing"])
    with pytest.raises(SpecError, match="missing"):
        validate_program_spec(_spec(steps=[step]))


def test_validator_requires_source_for_opencl() -> None:
    with pytest.raises(SpecError, match="src"):
        validate_program_spec(_spec(backend="OPENCL"))


def test_validator_rejects_mixed_real_widths() -> None:
    args = {
        "zoom": ArgSpec("zoom", "scalar", np.float64),
        "out": ArgSpec("out", "buffer_out", np.int32),
    }
    step = KernelStep("k", lambda zoom, out: None, ["zoom", "out"])
    with pytest.raises(SpecError, match="real scalar"):
        validate_program_spec(_spec(args=args, steps=[step]))


def test_validator_rejects_float_output() -> None:
    args = {"out": ArgSpec("out", "buffer_out", np.float32)}
    step = KernelStep("k", lambda out: None, ["out"])
    with pytest.raises(SpecError, match="integer"):
        validate_program_spec(_spec(args=args, steps=[step]))

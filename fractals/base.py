from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List, Literal
import numpy as np
from abc import ABC, abstractmethod


@dataclass(frozen=True)
class Viewport:
    """
    Immutable snapshot of the view handed to a render job.
    Offset X and Y are the complex-plane coordinates of the image center,
    zoom scales the base 3.5 x 2.0 window.
    Width and Height determine the size of the resulting image in pixels.
    """
    offset_x: float
    offset_y: float
    zoom: float
    width: int
    height: int

    @property
    def scale_x(self) -> float:
        return 3.5 / self.width / self.zoom

    @property
    def scale_y(self) -> float:
        return 2.0 / self.height / self.zoom

    def pixel_to_complex(self, x: int, y: int) -> complex:
        """Complex-plane coordinate sampled by pixel (x, y)."""
        cx = (x - self.width // 2) * self.scale_x + self.offset_x
        cy = (y - self.height // 2) * self.scale_y + self.offset_y
        return complex(cx, cy)


@dataclass
class RenderSettings:
    """
    Holds the rendering settings for a fractal.
    Max_iter determines the maximum number of iterations for the fractal calculation.
    Precision specifies the floating-point precision for calculations.
    """
    max_iter: int
    precision: np.dtype = np.float32
    bailout: Optional[float] = None

    @property
    def precision_tag(self) -> str:
        return "f64" if np.dtype(self.precision) == np.float64 else "f32"


# --------------- Program-spec primitives ----------------------

ArgRole = Literal["scalar", "buffer_out"]
ArgSource = Literal["viewport", "settings", "constant", "runtime"]


@dataclass(frozen=True)
class ArgSpec:
    """
    One kernel parameter. Scalars are cast to dtype before every launch;
    buffer_out args are allocated per frame as (height, width) arrays of dtype.
    """
    name: str
    role: ArgRole
    dtype: Any
    source: ArgSource = "runtime"


@dataclass(frozen=True)
class KernelStep:
    """
    A single kernel launch. func is an njit callable on the CPU and a
    {"src", "kernel_name", "build_options"} dict on OpenCL; args lists
    ArgSpec names in positional order; meta carries the work-group block.
    """
    name: str
    func: Any
    args: List[str]
    meta: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class ProgramSpec:
    """
    Everything a backend needs to produce one iteration-count buffer:
    the argument table, the launches in order, and which buffer_out
    holds the (height, width) result.
    """
    backend: str
    precision: Any
    args: Dict[str, ArgSpec]
    steps: List[KernelStep]
    output_arg: str
    output_dtype: Any = field(default=np.int32)

    def scalars(self) -> Dict[str, ArgSpec]:
        return {n: a for n, a in self.args.items() if a.role == "scalar"}

    def buffers_out(self) -> Dict[str, ArgSpec]:
        return {n: a for n, a in self.args.items() if a.role == "buffer_out"}


class Fractal(ABC):
    """
    An abstract base class for fractal types.
    """
    name: str

    @abstractmethod
    def build_arg_values(self, vp: Viewport, st: RenderSettings) -> Dict[
        str, Any]:
        ...

    @abstractmethod
    def get_program_spec(self, st: RenderSettings,
                         backend_name: str) -> ProgramSpec:
        ...

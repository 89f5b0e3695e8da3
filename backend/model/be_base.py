from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple

import numpy as np

from fractals.base import Fractal, Viewport, RenderSettings, ProgramSpec, ArgSpec


class Backend(ABC):
    """
    A base class for fractal rendering backend.

    render_async() is the dispatch half of the compute boundary and returns
    (host_array, event); render() additionally blocks on the event so the
    host array is safe to read.
    """
    name: str

    @abstractmethod
    def compile(self,
                fractal: Fractal,
                settings: RenderSettings
                ) -> None:
        ...

    @abstractmethod
    def render_async(self, fractal: Fractal,
                     vp: Viewport,
                     settings: RenderSettings
                     ) -> Tuple[np.ndarray, Any]:
        ...

    def render(self,
               fractal: Fractal,
               vp: Viewport,
               settings: RenderSettings
               ) -> np.ndarray:
        view, evt = self.render_async(fractal, vp, settings)
        evt.wait()
        return view

    @abstractmethod
    def close(self) -> None:
        ...

    @staticmethod
    def _cast_scalar(spec: ArgSpec, val: Any) -> Any:
        np_dt = np.dtype(spec.dtype)
        if np.issubdtype(np_dt, np.integer):
            return np_dt.type(int(val))
        return np_dt.type(float(val))

    @staticmethod
    def _scalar_values(spec: ProgramSpec, scalars: Dict[str, Any]) -> Dict[str, Any]:
        """
        Cast every scalar arg of the ProgramSpec to its declared dtype.
        """
        out: Dict[str, Any] = {}
        for name, arg in spec.scalars().items():
            if name not in scalars:
                raise KeyError(
                    f"Missing scalar value for '{name}' - "
                    f"ensure fractal.build_arg_values() provides it."
                )
            out[name] = Backend._cast_scalar(arg, scalars[name])
        return out

    @staticmethod
    def _ordered(names: List[str], arg_map: Dict[str, Any]) -> List[Any]:
        missing = [n for n in names if n not in arg_map]
        if missing:
            raise KeyError(f"Kernel args {missing} not found in arg_map")
        return [arg_map[n] for n in names]

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

import numpy as np

from utils.enums import BackendType, PrecisionMode


def precision_to_dtype(tag: str):
    """
    Map CLI precision tag -> numpy dtype.
    """
    tag = tag.lower()
    if tag in ("f32", "float32", "single"):
        return np.float32
    if tag in ("f64", "float64", "double"):
        return np.float64
    raise ValueError(f"Unsupported precision: {tag}")


def precision_mode_to_dtype(mode: PrecisionMode):
    return np.float64 if mode == PrecisionMode.Double else np.float32


def backend_from_name(name: str) -> BackendType:
    try:
        return BackendType[name.strip().upper()]
    except KeyError as e:
        raise ValueError(f"Unknown backend '{name}'; choose from "
                         f"{', '.join(b.name.lower() for b in BackendType)}") from e

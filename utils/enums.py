from enum import Enum, auto

class BackendType(Enum):
    AUTO = auto()
    OPENCL = auto()
    CPU = auto()

class PrecisionMode(Enum):
    Single = auto()
    Double = auto()

class RedrawPolicy(Enum):
    DROP = auto()       # requests arriving mid-generation are lost
    LATEST = auto()     # one follow-up generation with the newest view

class GenState(Enum):
    IDLE = auto()
    GENERATING = auto()

class NavAction(Enum):
    PAN_UP = auto()
    PAN_DOWN = auto()
    PAN_LEFT = auto()
    PAN_RIGHT = auto()
    ZOOM_IN = auto()
    ZOOM_OUT = auto()

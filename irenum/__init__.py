"""Exhaustive enumeration of small well-formed IR programs."""

from .driver import (  # noqa: F401
    EnumerationConfig,
    enumerate_programs,
    run_enumeration,
    replay_program,
)
from .generator import ParameterPlacement, create_program  # noqa: F401
from .guide import BFSGuide, RandomGuide, ReplayChooser, make_guide  # noqa: F401
from .errors import ConfigurationError  # noqa: F401

"""Named constants — eliminates magic strings across the codebase."""

from __future__ import annotations

ENTRY_FUNCTION_NAME = "foo"

DEFAULT_MAX_OPERATIONS = 2
DEFAULT_SEED = 42

ARG_PREFIX = "%arg"
RESULT_PREFIX = "%"
UNKNOWN_VALUE = "<<UNKNOWN SSA VALUE>>"

ADDI_OP = "arith.addi"
MULI_OP = "arith.muli"
RETURN_OP = "func.return"

I32_TYPE = "i32"
INTEGER_TYPE_TEMPLATE = "i{width}"
NONE_TYPE = "none"

GUIDE_BFS = "bfs"
GUIDE_RANDOM = "random"

SUPPORTED_GUIDES: tuple[str, ...] = (
    GUIDE_BFS,
    GUIDE_RANDOM,
)

FORMAT_TEXT = "text"
FORMAT_JSON = "json"

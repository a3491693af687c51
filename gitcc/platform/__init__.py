"""Platform layer: subprocess execution and state files."""

from .files import StateFileError, read_json, write_json
from .process import MAX_OUTPUT_BYTES, ProcessError, ProcessFailure, run

__all__ = ["MAX_OUTPUT_BYTES", "ProcessError", "ProcessFailure", "StateFileError", "read_json", "run", "write_json"]

"""StageResult dataclass returned by CLI-facing command functions."""

from dataclasses import dataclass, field


@dataclass
class StageResult:
    """Result from a command function.

    `announce` and `result` are human-readable lines, `output` is the
    machine-readable payload printed as JSON.
    """

    announce: str
    result: str = ""
    output: dict = field(default_factory=dict)
    success: bool = False

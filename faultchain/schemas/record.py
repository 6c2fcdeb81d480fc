"""Chain Record — one rendered node of an error chain.

Invariants:
    - ordinal counts from the root (#0) to the nearest node (#n-1)
    - caller is the "#k" marker, followed by "file:line (function)" when the
      node owns a stack snapshot
    - to_map(detailed=False) exposes only the user-safe text

Design Decisions:
    - Pydantic model over dict: validated shape, model_dump for JSON
    - Map keys follow the log-line vocabulary: message = external text,
      error = internal text
"""

from pydantic import BaseModel, ConfigDict


class ChainRecord(BaseModel):
    """Rendered form of one chain node."""

    model_config = ConfigDict(frozen=True)

    ordinal: int
    code: int
    external_message: str
    internal_message: str
    file: str | None = None
    line: int | None = None
    function: str | None = None

    @property
    def has_location(self) -> bool:
        return self.file is not None

    @property
    def caller(self) -> str:
        marker = f"#{self.ordinal}"
        if not self.has_location:
            return marker
        return f"{marker} {self.file}:{self.line} ({self.function})"

    def to_map(self, detailed: bool) -> dict:
        if not detailed:
            return {"error": self.external_message}
        return {
            "message": self.external_message,
            "code": self.code,
            "error": self.internal_message,
            "caller": self.caller,
        }

    def to_line(self, detailed: bool) -> str:
        if not detailed:
            return self.external_message
        if not self.has_location:
            return (
                f"{self.internal_message} - #{self.ordinal} "
                f"{self.external_message}"
            )
        return (
            f"{self.internal_message} - #{self.ordinal} "
            f"[{self.file}:{self.line} ({self.function})]"
            f"({self.code}) {self.external_message}"
        )

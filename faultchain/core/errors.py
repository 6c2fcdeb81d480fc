"""Registry Errors — programming-error exceptions raised on code registry misuse.

Invariants:
    - Raised only by the code registry, only for misuse (zero code, duplicate code)
    - Never caught inside faultchain: misuse must fail loudly at start-up

Design Decisions:
    - Single hierarchy with RegistryError base: callers that bootstrap many
      modules can catch one type and abort
    - Stable string `code` on each class, mirroring the coded-error shape
"""


class RegistryError(Exception):
    """Base exception for code registry misuse."""

    def __init__(self, message: str, code: str, value: int):
        super().__init__(message)
        self.message = message
        self.code = code
        self.value = value

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "value": self.value}


class ZeroCodeError(RegistryError):
    """A descriptor was registered under code 0."""
    def __init__(self):
        super().__init__(
            "diagnostic code must be non-zero", "ZERO_CODE", 0,
        )


class DuplicateCodeError(RegistryError):
    """register_once found the code already registered."""
    def __init__(self, value: int):
        super().__init__(
            f"code: {value} is already registered", "DUPLICATE_CODE", value,
        )

"""Code Registry — process-wide mapping from diagnostic code to descriptor.

Invariants:
    - Code 0 is never a key (ZeroCodeError)
    - UNKNOWN (code 1, HTTP 500) is pre-seeded and returned for unregistered codes
    - Descriptors are immutable; lookup() never raises
    - Every read and write of the mapping holds the registry lock

Design Decisions:
    - Coder is a Protocol: applications may register their own types (e.g. an
      Enum) as long as they expose code / http_status / external_text / reference
    - CodeRegistry is instantiable so tests build isolated registries; the
      module-level functions act on `default_registry`
    - Plain threading.Lock: registration happens at start-up, lookups are rare
"""

import logging
import threading
from dataclasses import dataclass
from http import HTTPStatus
from typing import Protocol, runtime_checkable

from faultchain.core.errors import DuplicateCodeError, ZeroCodeError

logger = logging.getLogger(__name__)


@runtime_checkable
class Coder(Protocol):
    """Metadata of one diagnostic code."""

    @property
    def code(self) -> int: ...

    @property
    def http_status(self) -> int: ...

    @property
    def external_text(self) -> str: ...

    @property
    def reference(self) -> str: ...


@dataclass(frozen=True)
class Descriptor:
    """Default Coder. http_status 0 is stored as 500."""
    code: int
    http_status: int = 0
    external_text: str = ""
    reference: str = ""

    def __post_init__(self) -> None:
        if not self.http_status:
            object.__setattr__(
                self, "http_status", int(HTTPStatus.INTERNAL_SERVER_ERROR),
            )


def _normalized(coder: Coder) -> Coder:
    """Coders reporting http_status 0 are stored as a Descriptor with 500."""
    if coder.http_status:
        return coder
    return Descriptor(coder.code, 0, coder.external_text, coder.reference)


UNKNOWN = Descriptor(
    code=1,
    http_status=int(HTTPStatus.INTERNAL_SERVER_ERROR),
    external_text="An internal server error occurred",
    reference="none",
)


class CodeRegistry:
    """Lock-guarded code → Coder mapping."""

    def __init__(self, unknown: Coder = UNKNOWN):
        self._lock = threading.Lock()
        unknown = _normalized(unknown)
        self._unknown = unknown
        self._codes: dict[int, Coder] = {unknown.code: unknown}

    @property
    def unknown(self) -> Coder:
        return self._unknown

    def register(self, coder: Coder) -> None:
        """Insert or overwrite."""
        if coder.code == 0:
            raise ZeroCodeError()
        coder = _normalized(coder)
        with self._lock:
            self._codes[coder.code] = coder
        logger.debug(
            "Registered diagnostic code %d", coder.code,
            extra={"error_code": coder.code},
        )

    def register_once(self, coder: Coder) -> None:
        """Insert; a code that already exists is a DuplicateCodeError."""
        if coder.code == 0:
            raise ZeroCodeError()
        coder = _normalized(coder)
        with self._lock:
            if coder.code in self._codes:
                raise DuplicateCodeError(coder.code)
            self._codes[coder.code] = coder
        logger.debug(
            "Registered diagnostic code %d", coder.code,
            extra={"error_code": coder.code},
        )

    def lookup(self, code: int) -> Coder:
        with self._lock:
            return self._codes.get(code, self._unknown)

    def is_registered(self, code: int) -> bool:
        with self._lock:
            return code in self._codes

    def registered_codes(self) -> list[int]:
        with self._lock:
            return sorted(self._codes)

    def __len__(self) -> int:
        with self._lock:
            return len(self._codes)


default_registry = CodeRegistry()


def register(coder: Coder) -> None:
    default_registry.register(coder)


def register_once(coder: Coder) -> None:
    default_registry.register_once(coder)


def lookup(code: int) -> Coder:
    return default_registry.lookup(code)


def is_registered(code: int) -> bool:
    return default_registry.is_registered(code)


def registered_codes() -> list[int]:
    return default_registry.registered_codes()

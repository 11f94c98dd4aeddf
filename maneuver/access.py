"""Access-code login boundary.

Players unlock the levels with a one-time code sent to their email. The
simulation never depends on this module; it only defines the contract and an
in-memory implementation used for local play and tests.

Example:
    >>> from maneuver.access import InMemoryAccessService
    >>>
    >>> outbox = []
    >>> service = InMemoryAccessService(sender=lambda email, code: outbox.append(code), seed=7)
    >>> receipt = service.request_code("pilot@example.com")
    >>> token = service.verify_code("pilot@example.com", outbox[-1])
    >>> token.uid
    'pilot_example_com'
"""

import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import NamedTuple, Protocol

import numpy as np
from beartype import beartype

logger = logging.getLogger(__name__)

CODE_DIGITS = 6
CODE_LIFETIME = 300.0  # [s]

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# =============================================================================
# Errors
# =============================================================================


class AccessError(Exception):
    """Base class for access-code errors."""


class InvalidEmail(AccessError):
    """The email address is malformed."""


class SendFailure(AccessError):
    """The code could not be delivered."""


class CodeNotFound(AccessError):
    """No code was requested for this email."""


class CodeAlreadyUsed(AccessError):
    """The code has already been redeemed."""


class CodeExpired(AccessError):
    """The code is past its lifetime."""


class CodeMismatch(AccessError):
    """The submitted code does not match."""


# =============================================================================
# Contract
# =============================================================================


class CodeReceipt(NamedTuple):
    """Acknowledgement that a code was sent."""
    email: str
    expires_at: float  # Clock time after which the code is rejected [s]


class AccessToken(NamedTuple):
    """Identity granted after a successful verification."""
    uid: str
    email: str


class AccessCodeService(Protocol):
    """Request and verify one-time access codes."""

    def request_code(self, email: str) -> CodeReceipt: ...

    def verify_code(self, email: str, code: str) -> AccessToken: ...


def email_to_uid(email: str) -> str:
    """Stable user id derived from an email address."""
    return re.sub(r"[^A-Za-z0-9]", "_", email)


# =============================================================================
# In-memory implementation
# =============================================================================


@dataclass
class _CodeRecord:
    code: str
    expires_at: float
    used: bool = False


@beartype
@dataclass
class InMemoryAccessService:
    """Access-code service that keeps codes in a dict.

    Attributes:
        sender: Delivers `(email, code)`; any exception it raises becomes SendFailure
        clock: Returns the current time [s]
        seed: Seed for code generation
        lifetime: Code lifetime [s]
    """
    sender: Callable[[str, str], None]
    clock: Callable[[], float] = time.time
    seed: int | None = None
    lifetime: float = CODE_LIFETIME

    # Internal
    _records: dict[str, _CodeRecord] = field(default_factory=dict, init=False, repr=False)
    _rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.lifetime <= 0.0:
            raise ValueError(f"lifetime must be positive, got {self.lifetime}")
        self._rng = np.random.default_rng(self.seed)

    def _generate_code(self) -> str:
        return f"{int(self._rng.integers(0, 10**CODE_DIGITS)):0{CODE_DIGITS}d}"

    def request_code(self, email: str) -> CodeReceipt:
        """Send a fresh code to `email`, replacing any earlier one."""
        email = email.strip().lower()
        if not _EMAIL_PATTERN.match(email):
            raise InvalidEmail(f"Invalid email address: {email!r}")

        code = self._generate_code()
        expires_at = self.clock() + self.lifetime
        try:
            self.sender(email, code)
        except Exception as err:
            logger.warning("Failed to send access code to %s: %s", email, err)
            raise SendFailure(f"Could not send access code to {email}") from err

        self._records[email] = _CodeRecord(code=code, expires_at=expires_at)
        logger.info("Access code sent to %s", email)
        return CodeReceipt(email=email, expires_at=expires_at)

    def verify_code(self, email: str, code: str) -> AccessToken:
        """Redeem `code` for `email`."""
        email = email.strip().lower()
        record = self._records.get(email)
        if record is None:
            raise CodeNotFound(f"No access code requested for {email}")
        if record.used:
            raise CodeAlreadyUsed("Access code has already been used")
        if self.clock() > record.expires_at:
            raise CodeExpired("Access code has expired")
        if code.strip() != record.code:
            raise CodeMismatch("Access code does not match")

        record.used = True
        logger.info("Access granted to %s", email)
        return AccessToken(uid=email_to_uid(email), email=email)

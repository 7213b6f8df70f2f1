"""
Public paste identifiers.

Ids are short base-62 strings. They are public, so the random source only
needs to be uniform, not secret. When the namespace gets crowded the
allocator grows the id by one character every two collisions.
"""

import logging
import random
from typing import Callable, Optional

from .errors import AllocationError

BASE62 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
DEFAULT_ID_LENGTH = 5
# well under NAME_MAX on every filesystem we store pastes on
MAX_ID_LENGTH = 64

logger = logging.getLogger("pastel.ids")

_BASE62_SET = frozenset(BASE62)


def generate_id(length: int, rng: Optional[random.Random] = None) -> str:
    """Draw a random id of the given length from the base-62 alphabet"""
    rng = rng or random
    return "".join(rng.choice(BASE62) for _ in range(length))


def is_valid_id(paste_id: str) -> bool:
    """Check that paste_id is a base-62 string of 1 to MAX_ID_LENGTH characters"""
    return 0 < len(paste_id) <= MAX_ID_LENGTH and all(c in _BASE62_SET for c in paste_id)


class IdAllocator:
    """Generates ids that do not collide with an existing paste"""

    def __init__(self, exists: Callable[[str], bool], length: int = DEFAULT_ID_LENGTH,
                 max_attempts: int = 64, rng: Optional[random.Random] = None):
        if not 1 <= length <= MAX_ID_LENGTH:
            raise ValueError(f"id length must be between 1 and {MAX_ID_LENGTH}")
        self.exists = exists
        self.length = length
        self.max_attempts = max_attempts
        self.rng = rng or random.Random()

    def length_for_attempt(self, attempt: int) -> int:
        """Id length used on the given zero-based attempt"""
        return self.length + attempt // 2

    def allocate(self) -> str:
        """
        Return an id that is free at the moment of the check.

        Raises:
            AllocationError: if every attempt collided
        """
        for attempt in range(self.max_attempts):
            length = self.length_for_attempt(attempt)
            if length > MAX_ID_LENGTH:
                break
            candidate = generate_id(length, self.rng)
            if not self.exists(candidate):
                if attempt:
                    logger.info(f"Allocated id after {attempt} collisions (length {len(candidate)})")
                return candidate
        raise AllocationError("Could not allocate a free paste id")

    is_valid = staticmethod(is_valid_id)

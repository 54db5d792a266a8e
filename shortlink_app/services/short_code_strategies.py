"""
Short code generation strategies for the shortlink service.
Uses Strategy Pattern to allow different generation algorithms.

Strategies only propose candidates. Uniqueness is decided by the store at
insert time; the collision resolver asks for a new candidate when the
store reports a duplicate.
"""

import random
import string
from abc import ABC, abstractmethod

from nanoid import generate as nanoid_generate

ALPHANUMERIC = string.ascii_letters + string.digits


class ShortCodeStrategy(ABC):
    """Abstract base class for short code generation strategies"""

    @abstractmethod
    def generate(self) -> str:
        """Return a fresh short code candidate"""
        pass


class RandomShortCodeStrategy(ShortCodeStrategy):
    """
    Fixed-length random alphanumeric codes from the OS random source.

    With 62 symbols and length 6 there are ~5.7e10 codes, so a collision
    needs billions of live links before retries become common.
    """

    def __init__(self, length: int = 6):
        if length < 1:
            raise ValueError("Short code length must be positive")
        self.length = length
        self.characters = ALPHANUMERIC
        self._random = random.SystemRandom()

    def generate(self) -> str:
        return ''.join(self._random.choice(self.characters) for _ in range(self.length))


class NanoidShortCodeStrategy(ShortCodeStrategy):
    """Nanoid-generated codes restricted to the alphanumeric alphabet"""

    def __init__(self, length: int = 6):
        if length < 1:
            raise ValueError("Short code length must be positive")
        self.length = length

    def generate(self) -> str:
        return nanoid_generate(ALPHANUMERIC, self.length)

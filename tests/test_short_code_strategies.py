"""
Tests for short code generation strategies.
"""
import pytest

from shortlink_app.config import settings
from shortlink_app.services.short_code_strategies import (
    NanoidShortCodeStrategy,
    RandomShortCodeStrategy,
)
from shortlink_app.services.short_code_factory import (
    ShortCodeFactory,
    ShortCodeStrategyType
)


class TestRandomStrategy:
    """Test random alphanumeric strategy"""

    def test_generates_correct_length(self):
        strategy = RandomShortCodeStrategy(length=6)

        code = strategy.generate()

        assert len(code) == 6
        assert code.isalnum()
        assert code.isascii()

    def test_codes_vary_between_calls(self):
        strategy = RandomShortCodeStrategy(length=6)

        codes = {strategy.generate() for _ in range(50)}

        assert len(codes) > 1

    def test_rejects_non_positive_length(self):
        with pytest.raises(ValueError):
            RandomShortCodeStrategy(length=0)


class TestNanoidStrategy:
    """Test nanoid strategy"""

    def test_generates_alphanumeric_codes(self):
        strategy = NanoidShortCodeStrategy(length=8)

        for _ in range(20):
            code = strategy.generate()
            assert len(code) == 8
            assert code.isalnum()
            assert code.isascii()


class TestShortCodeFactory:
    """Test strategy factory"""

    def test_creates_random_strategy(self):
        strategy = ShortCodeFactory.create_strategy(ShortCodeStrategyType.RANDOM)
        assert isinstance(strategy, RandomShortCodeStrategy)
        assert strategy.length == settings.short_code_length

    def test_creates_nanoid_strategy(self):
        strategy = ShortCodeFactory.create_strategy(ShortCodeStrategyType.NANOID)
        assert isinstance(strategy, NanoidShortCodeStrategy)

    def test_reuses_cached_instance(self):
        first = ShortCodeFactory.create_strategy(ShortCodeStrategyType.RANDOM)
        second = ShortCodeFactory.create_strategy(ShortCodeStrategyType.RANDOM)
        assert first is second

    def test_creates_default_from_settings(self):
        strategy = ShortCodeFactory.create_strategy()
        assert strategy is ShortCodeFactory.create_strategy(
            ShortCodeStrategyType(settings.short_code_strategy)
        )

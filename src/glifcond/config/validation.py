"""
Configuration validation for glifcond.

This module provides declarative validation rules so that configuration
errors surface when a config object is built, before any neuron state is
touched.

Validation Features:
- Declarative validation rules via ValidatedConfig mixin
- Predefined validators (positive, finite, range, probability, ...)
- Element-wise variants for the per-port and per-current arrays
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, List, Tuple

from glifcond.errors import ConfigurationError

# =============================================================================
# DECLARATIVE VALIDATION FRAMEWORK
# =============================================================================


class ValidatorRegistry:
    """Registry of predefined validation rules.

    Usage:
        validator = ValidatorRegistry.get_validator('positive')
        validator(0.5, 'C_m')  # Passes
        validator(-0.1, 'C_m')  # Raises ConfigurationError
    """

    _validators: Dict[str, Callable[[Any, str], None]] = {}

    @classmethod
    def register(cls, name: str, validator: Callable[[Any, str], None]) -> None:
        """Register a validation function."""
        cls._validators[name] = validator

    @classmethod
    def get_validator(cls, rule: str) -> Callable[[Any, str], None]:
        """Get validator by name or parse compound rule."""
        # Handle range rules: range(min, max)
        if rule.startswith('range('):
            return cls._parse_range_rule(rule)

        if rule in cls._validators:
            return cls._validators[rule]

        raise ValueError(f"Unknown validation rule: {rule}")

    @classmethod
    def _parse_range_rule(cls, rule: str) -> Callable[[Any, str], None]:
        """Parse range(min, max) rules."""
        inner = rule[6:-1]  # Remove "range(" and ")"
        parts = [p.strip() for p in inner.split(',')]

        if len(parts) != 2:
            raise ValueError(f"Invalid range rule format: {rule}")

        min_val = float(parts[0])
        max_val = float(parts[1])

        def range_validator(value: Any, name: str) -> None:
            _require_numeric(value, name)
            if not (min_val <= value <= max_val):
                raise ConfigurationError(
                    f"{name}={value} outside valid range [{min_val}, {max_val}]"
                )

        return range_validator


def _require_numeric(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be numeric, got {type(value).__name__}")


def _register_builtin_validators() -> None:
    """Register standard validation rules."""

    def positive(value: Any, name: str) -> None:
        """Value must be > 0."""
        _require_numeric(value, name)
        if value <= 0:
            raise ConfigurationError(f"{name}={value} must be strictly positive")

    def non_negative(value: Any, name: str) -> None:
        """Value must be >= 0."""
        _require_numeric(value, name)
        if value < 0:
            raise ConfigurationError(f"{name}={value} must be non-negative")

    def finite(value: Any, name: str) -> None:
        """Value must be finite (not inf or nan)."""
        _require_numeric(value, name)
        if not math.isfinite(value):
            raise ConfigurationError(f"{name}={value} must be finite (not inf/nan)")

    def positive_integer(value: Any, name: str) -> None:
        """Value must be a positive integer."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"{name} must be integer, got {type(value).__name__}")
        if value <= 0:
            raise ConfigurationError(f"{name}={value} must be positive integer")

    def probability(value: Any, name: str) -> None:
        """Value must be in [0, 1]."""
        _require_numeric(value, name)
        if not (0.0 <= value <= 1.0):
            raise ConfigurationError(f"{name}={value} must be within [0.0, 1.0]")

    def elementwise(check: Callable[[Any, str], None]) -> Callable[[Any, str], None]:
        def validator(values: Any, name: str) -> None:
            for i, value in enumerate(values):
                check(value, f"{name}[{i}]")
        return validator

    ValidatorRegistry.register('positive', positive)
    ValidatorRegistry.register('non_negative', non_negative)
    ValidatorRegistry.register('finite', finite)
    ValidatorRegistry.register('positive_integer', positive_integer)
    ValidatorRegistry.register('probability', probability)
    ValidatorRegistry.register('positive_elements', elementwise(positive))
    ValidatorRegistry.register('finite_elements', elementwise(finite))
    ValidatorRegistry.register('probability_elements', elementwise(probability))


_register_builtin_validators()


class ValidatedConfig:
    """Mixin for declarative config validation.

    Usage:
        @dataclass
        class MyConfig(ValidatedConfig):
            C_m: float = 58.72
            tau_syn: tuple = (0.2, 2.0)

            _validation_rules = {
                'C_m': ('positive', 'finite'),
                'tau_syn': ('positive_elements',),
            }

    Fields whose value is None are skipped, so optional mechanism
    parameters only get checked when they are set.
    """

    _validation_rules: Dict[str, Tuple[str, ...]] = {}

    def validate_config(self) -> None:
        """Validate configuration based on _validation_rules.

        Raises:
            ConfigurationError: If any validation fails
        """
        errors: List[str] = []

        for field_name, rules in self._validation_rules.items():
            if not hasattr(self, field_name):
                errors.append(f"Validation rule for non-existent field: {field_name}")
                continue

            value = getattr(self, field_name)
            if value is None:
                continue

            for rule in rules:
                try:
                    ValidatorRegistry.get_validator(rule)(value, field_name)
                except ConfigurationError as e:
                    errors.append(str(e))
                    break

        if errors:
            error_msg = (
                f"{self.__class__.__name__} validation failed:\n" +
                "\n".join(f"  • {e}" for e in errors)
            )
            raise ConfigurationError(error_msg)

"""
Error taxonomy and validation results for the tournament core.

Validators collect problems into a ValidationResult instead of raising.
Errors block a state transition, warnings are advisory. Code that applies
transitions (the hand flow engine) turns blocking results into exceptions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


class PokerError(Exception):
    """Base exception for the poker tournament core"""
    pass


class StructuralError(PokerError):
    """Raised when a state, player or card record is missing required structure"""
    pass


class DeckError(StructuralError):
    """Raised when dealing or burning from a deck that has run out of cards"""
    pass


class InvariantViolation(PokerError):
    """Raised when blocking validation errors must stop a transition"""

    def __init__(self, message: str, result: Optional['ValidationResult'] = None):
        super().__init__(message)
        self.result = result


class ActionRejected(InvariantViolation):
    """Raised when a proposed player action is not legal"""

    def __init__(self, action: str, amount: Any, result: 'ValidationResult'):
        message = f"Action '{action}' ({amount}) rejected: {'; '.join(result.errors)}"
        super().__init__(message, result)
        self.action = action
        self.amount = amount


@dataclass
class ValidationResult:
    """Outcome of a validation check: blocking errors and advisory warnings."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error(self, message: str) -> None:
        self.errors.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        """Append another result's findings to this one and return self."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    @classmethod
    def combine(cls, results: Iterable['ValidationResult']) -> 'ValidationResult':
        combined = cls()
        for result in results:
            combined.merge(result)
        return combined

    def raise_for_errors(self, context: str = "Validation failed") -> None:
        if self.errors:
            raise InvariantViolation(f"{context}: {'; '.join(self.errors)}", self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
        }

"""Validated input structs, one per write operation.

Each payload is checked here before anything reaches the record store:
unknown fields are rejected, amounts must be positive with at most two
fractional digits, percentages must lie in ``[0, 100]`` and a salary
allocation must add up to exactly 100.  Nothing is rounded after
validation.
Field names are accepted in camelCase (``targetAmount``) or snake_case
(``target_amount``).

- TransactionCreate / TransactionUpdate -> "transactions"
- SavingsGoalCreate / SavingsGoalUpdate -> "savings goals"
- RecurringTransactionCreate / RecurringTransactionUpdate -> "recurring transactions"
- SalaryAllocationInput -> "salary allocation"
- DailyBudgetInput -> "daily budget"
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, ClassVar, Dict, FrozenSet, Literal, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .errors import ValidationError
from .money import format_amount, format_exact

TransactionType = Literal['income', 'expense', 'transfer']
Frequency = Literal['weekly', 'monthly', 'yearly']

Model = TypeVar('Model', bound='InputModel')


def parse_timestamp(value: Any) -> Any:
    """Accept ISO-8601 text or a date and return a naive local datetime."""
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            value = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"Invalid ISO-8601 date: {value!r}") from exc
    if isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


class InputModel(BaseModel):
    model_config = ConfigDict(
        extra='forbid',
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    amount_fields: ClassVar[FrozenSet[str]] = frozenset()
    percent_fields: ClassVar[FrozenSet[str]] = frozenset()
    partial: ClassVar[bool] = False

    def to_fields(self) -> Dict[str, Any]:
        """Store-ready values: amounts become two-decimal text, percentages exact text."""
        values = self.model_dump(exclude_unset=self.partial)
        for name in self.amount_fields:
            if values.get(name) is not None:
                values[name] = format_amount(values[name])
        for name in self.percent_fields:
            if values.get(name) is not None:
                values[name] = format_exact(values[name])
        return values


class PartialInputModel(InputModel):
    """Every field optional; fields outside ``nullable_fields`` may not be null."""

    partial: ClassVar[bool] = True
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode='after')
    def _reject_nulls(self):
        nulls = sorted(
            name for name in self.model_fields_set
            if getattr(self, name) is None and name not in self.nullable_fields
        )
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class TransactionCreate(InputModel):
    """Income, expense or transfer entry."""

    amount_fields: ClassVar[FrozenSet[str]] = frozenset({'amount'})

    type: TransactionType
    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Transaction amount (absolute value)")
    category: str = Field(..., min_length=1)
    description: str = Field('', description="Free-text note")
    date: datetime

    @field_validator('date', mode='before')
    @classmethod
    def _parse_date(cls, value):
        return parse_timestamp(value)


class TransactionUpdate(PartialInputModel):
    amount_fields: ClassVar[FrozenSet[str]] = frozenset({'amount'})

    type: Optional[TransactionType] = None
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    category: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    date: Optional[datetime] = None

    @field_validator('date', mode='before')
    @classmethod
    def _parse_date(cls, value):
        return parse_timestamp(value)


class SavingsGoalCreate(InputModel):
    amount_fields: ClassVar[FrozenSet[str]] = frozenset({'target_amount', 'current_amount', 'monthly_target'})

    name: str = Field(..., min_length=1)
    target_amount: Decimal = Field(..., gt=0, decimal_places=2)
    current_amount: Decimal = Field(Decimal('0'), ge=0, decimal_places=2)
    monthly_target: Optional[Decimal] = Field(None, gt=0, decimal_places=2)


class SavingsGoalUpdate(PartialInputModel):
    amount_fields: ClassVar[FrozenSet[str]] = frozenset({'target_amount', 'current_amount', 'monthly_target'})
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({'monthly_target'})

    name: Optional[str] = Field(None, min_length=1)
    target_amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    current_amount: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    monthly_target: Optional[Decimal] = Field(None, gt=0, decimal_places=2)


class RecurringTransactionCreate(InputModel):
    amount_fields: ClassVar[FrozenSet[str]] = frozenset({'amount'})

    type: TransactionType
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    category: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    frequency: Frequency
    next_due_date: datetime
    is_active: bool = True

    @field_validator('next_due_date', mode='before')
    @classmethod
    def _parse_due(cls, value):
        return parse_timestamp(value)


class RecurringTransactionUpdate(PartialInputModel):
    amount_fields: ClassVar[FrozenSet[str]] = frozenset({'amount'})

    type: Optional[TransactionType] = None
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    category: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    frequency: Optional[Frequency] = None
    next_due_date: Optional[datetime] = None
    is_active: Optional[bool] = None

    @field_validator('next_due_date', mode='before')
    @classmethod
    def _parse_due(cls, value):
        return parse_timestamp(value)


class SalaryAllocationInput(InputModel):
    """Monthly salary split; the three percentages must total exactly 100."""

    amount_fields: ClassVar[FrozenSet[str]] = frozenset({'monthly_salary'})
    percent_fields: ClassVar[FrozenSet[str]] = frozenset({'essentials', 'savings', 'lifestyle'})

    monthly_salary: Decimal = Field(..., gt=0, decimal_places=2)
    essentials: Decimal = Field(..., ge=0, le=100)
    savings: Decimal = Field(..., ge=0, le=100)
    lifestyle: Decimal = Field(..., ge=0, le=100)

    @model_validator(mode='after')
    def _percentages_total_100(self):
        total = self.essentials + self.savings + self.lifestyle
        if total != 100:
            raise ValueError(f"Allocation percentages must sum to 100 (got {total})")
        return self


class DailyBudgetInput(InputModel):
    amount_fields: ClassVar[FrozenSet[str]] = frozenset({'budget_amount'})

    budget_amount: Decimal = Field(..., gt=0, decimal_places=2)


def _error_entries(exc: PydanticValidationError) -> list:
    entries = []
    for error in exc.errors():
        entries.append({
            'field': '.'.join(str(part) for part in error.get('loc', ())),
            'message': error.get('msg', ''),
            'type': error.get('type', ''),
        })
    return entries


def validate_payload(schema: Type[Model], payload: Mapping[str, Any], message: str) -> Model:
    """Parse ``payload`` into ``schema`` or raise :class:`ValidationError`."""
    if not isinstance(payload, Mapping):
        raise ValidationError(message, [{'field': '', 'message': 'Payload must be an object', 'type': 'dict_type'}])
    try:
        return schema.model_validate(dict(payload))
    except PydanticValidationError as exc:
        raise ValidationError(message, _error_entries(exc)) from exc

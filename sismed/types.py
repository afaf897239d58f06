from __future__ import annotations

import re
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidDate


_BR_DATE_PATTERN = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})$')


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_date(value: Any) -> date:
    """Normalize ISO strings, pt-BR ``dd/mm/yyyy`` strings and datetimes to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDate(value, 'unsupported date value')

    token = value.strip()
    if not token:
        raise InvalidDate(value, 'date is required')

    match = _BR_DATE_PATTERN.match(token)
    try:
        if match:
            day, month, year = (int(part) for part in match.groups())
            return date(year, month, day)
        if 'T' in token or ' ' in token:
            return datetime.fromisoformat(token.replace('Z', '+00:00')).date()
        return date.fromisoformat(token)
    except ValueError as exc:
        raise InvalidDate(value) from exc


def format_date(value: date) -> str:
    return value.strftime('%d/%m/%Y')


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Patient(_Frozen):
    name: str = Field(validation_alias=AliasChoices('name', 'nome'))
    identifier: str = Field(default='', validation_alias=AliasChoices('identifier', 'cpf'))
    birth_date: date = Field(validation_alias=AliasChoices('birth_date', 'data_nascimento'))

    @field_validator('birth_date', mode='before')
    @classmethod
    def _coerce_birth_date(cls, value: Any) -> date:
        return parse_date(value)


class MedicineLine(_Frozen):
    name: str = Field(validation_alias=AliasChoices('name', 'nome'))
    dosage: str = Field(default='', validation_alias=AliasChoices('dosage', 'dosagem'))
    presentation: str = Field(default='', validation_alias=AliasChoices('presentation', 'apresentacao'))
    instructions: str = Field(default='', validation_alias=AliasChoices('instructions', 'posologia'))
    controlled: bool = Field(default=False, validation_alias=AliasChoices('controlled', 'controlado'))


class PrescriptionDocument(_Frozen):
    patient: Patient
    medicines: tuple[MedicineLine, ...] = Field(
        default=(),
        validation_alias=AliasChoices('medicines', 'medicamentos'),
    )
    observations: str | None = Field(
        default=None,
        validation_alias=AliasChoices('observations', 'observacoes'),
    )
    issue_date: date = Field(validation_alias=AliasChoices('issue_date', 'data'))
    replication_count: int = Field(
        default=1,
        ge=1,
        validation_alias=AliasChoices('replication_count', 'months'),
    )

    @field_validator('issue_date', mode='before')
    @classmethod
    def _coerce_issue_date(cls, value: Any) -> date:
        return parse_date(value)

    @field_validator('observations', mode='before')
    @classmethod
    def _blank_observations(cls, value: Any) -> Any:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator('replication_count', mode='before')
    @classmethod
    def _default_months(cls, value: Any) -> Any:
        return 1 if value is None else value


def load_document(payload: dict[str, Any], *, max_replication_months: int | None = None) -> PrescriptionDocument:
    try:
        document = PrescriptionDocument.model_validate(payload)
    except ValidationError as exc:
        for error in exc.errors():
            cause = (error.get('ctx') or {}).get('error')
            if isinstance(cause, InvalidDate):
                raise cause from exc
        raise

    if max_replication_months is not None and document.replication_count > max_replication_months:
        raise ValueError(
            f'replication count {document.replication_count} exceeds the maximum of {max_replication_months} months'
        )
    return document


class RegionKind(str, Enum):
    header = 'header'
    patient = 'patient'
    medicines = 'medicines'
    medicine = 'medicine'
    observations = 'observations'
    signature = 'signature'


class Region(_Frozen):
    kind: RegionKind
    top: float
    bottom: float
    medicine: MedicineLine | None = None
    number: int | None = None


class Page(_Frozen):
    index: int
    total: int
    regions: tuple[Region, ...] = ()

    @property
    def medicines(self) -> tuple[MedicineLine, ...]:
        return tuple(
            region.medicine
            for region in self.regions
            if region.kind == RegionKind.medicine and region.medicine is not None
        )

    def has_region(self, kind: RegionKind) -> bool:
        return any(region.kind == kind for region in self.regions)


class Copy(_Frozen):
    month_offset: int
    issue_date: date
    pages: tuple[Page, ...] = ()

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def medicines(self) -> tuple[MedicineLine, ...]:
        lines: list[MedicineLine] = []
        for page in self.pages:
            lines.extend(page.medicines)
        return tuple(lines)


class RenderedPrescription(_Frozen):
    copies: tuple[Copy, ...]
    content: bytes
    filename: str

    @property
    def page_count(self) -> int:
        return sum(copy.page_count for copy in self.copies)

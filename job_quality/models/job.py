"""Job record input model for the job data quality engine."""

import math
from typing import Any, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.exceptions import DataValidationError
from ..utils.text_utils import is_blank


STRING_FIELDS = (
    'title', 'description', 'duty_station', 'duty_country', 'duty_continent',
    'up_grade', 'languages', 'job_labels', 'job_labels_vectorized',
    'sectoral_category', 'posting_date', 'apply_until', 'short_agency',
    'long_agency', 'uniquecode', 'status', 'ideal_candidate',
)

NUMERIC_FIELDS = (
    'hs_min_exp', 'bachelor_min_exp', 'master_min_exp', 'classification_confidence',
)


def _coerce_number(value: Any) -> Optional[float]:
    """Best-effort numeric coercion; anything unparsable becomes None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        if not value.strip():
            return None
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


class JobRecord(BaseModel):
    """
    Flat job record produced by the upstream ingestion pipeline.

    Owned by the pipeline; the engine only reads it. Unusable field values
    are coerced to None and surface later as quality issues.
    """
    model_config = ConfigDict(extra='ignore', frozen=True)

    id: str = Field(..., description="Job identifier")
    title: Optional[str] = None
    description: Optional[str] = None
    duty_station: Optional[str] = None
    duty_country: Optional[str] = None
    duty_continent: Optional[str] = None
    up_grade: Optional[str] = None
    languages: Optional[str] = Field(None, description="Comma-separated language list")
    job_labels: Optional[str] = None
    job_labels_vectorized: Optional[str] = None
    sectoral_category: Optional[str] = None
    hs_min_exp: Optional[float] = None
    bachelor_min_exp: Optional[float] = None
    master_min_exp: Optional[float] = None
    posting_date: Optional[str] = None
    apply_until: Optional[str] = None
    classification_confidence: Optional[float] = Field(None, description="0-100 classifier confidence")
    short_agency: Optional[str] = None
    long_agency: Optional[str] = None
    uniquecode: Optional[str] = None
    status: Optional[str] = None
    ideal_candidate: Optional[str] = None

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        if v is None:
            return v
        return str(v)

    @field_validator(*STRING_FIELDS, mode='before')
    @classmethod
    def coerce_string(cls, v):
        """Keep None, stringify scalars, drop containers."""
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (list, tuple, set, dict)):
            return None
        return str(v)

    @field_validator(*NUMERIC_FIELDS, mode='before')
    @classmethod
    def coerce_numeric(cls, v):
        return _coerce_number(v)

    @property
    def agency(self) -> str:
        """Agency label used for grouping."""
        for name in (self.short_agency, self.long_agency):
            if not is_blank(name):
                return name
        return 'Unknown'

    @classmethod
    def from_raw(cls, raw: Any, index: int = 0) -> "JobRecord":
        """
        Build a record from a mapping or an attribute-bearing object.

        Args:
            raw: Raw record as delivered by the pipeline
            index: Position in the batch, used for placeholder ids

        Returns:
            Coerced JobRecord

        Raises:
            DataValidationError: If raw is neither a mapping nor an object with fields
        """
        if isinstance(raw, JobRecord):
            return raw

        if isinstance(raw, Mapping):
            data = dict(raw)
        elif hasattr(raw, '__dict__'):
            data = {k: v for k, v in vars(raw).items() if not k.startswith('_')}
        else:
            raise DataValidationError(
                f"Unsupported record type: {type(raw).__name__}",
                field_name='record',
                field_value=raw
            )

        if data.get('id') is None or str(data.get('id')).strip() == '':
            data['id'] = placeholder_id(index)

        try:
            return cls(**{k: v for k, v in data.items() if isinstance(k, str)})
        except ValidationError as e:
            raise DataValidationError(str(e), field_name='record', field_value=data.get('id')) from e


def placeholder_id(index: int) -> str:
    """Identifier used for records that arrive without one."""
    return f"unknown-{index}"

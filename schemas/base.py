# Shared schema configuration
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def format_timestamp(value: datetime) -> str:
    """Fixed-width UTC timestamp so stored values sort chronologically as strings"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ')

class CamelModel(BaseModel):
    """Documents are stored with snake_case keys and served with camelCase keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        extra='ignore'
    )

    @field_validator('*', mode='after')
    @classmethod
    def assume_utc(cls, value):
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_document(self) -> dict:
        doc = self.model_dump(mode='json')
        for name, value in self:
            if isinstance(value, datetime):
                doc[name] = format_timestamp(value)
        return doc

"""Closed, versioned structures carried between construction stages.

preprocess --options--> metadata --metadata--> payloads

Both travel as JSON objects through the client. validate() returns the
names of missing or invalid fields (unknown keys count as invalid) and
from_dict() builds the value from an object that validated clean.
"""

from collections.abc import Mapping
from typing import Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.rk_codec.domain.codec import message_from_json, message_to_json
from src.rk_codec.domain.models import GenericMsg, MsgMultiSend, MsgSend
from src.rk_common.coins import Coins

VERSION = 1

_NON_NEGATIVE_FLOAT = dict(ge=0, strict=True, allow_inf_nan=False)
_NON_NEGATIVE_INT = dict(ge=0, strict=True)


class InvalidStructureError(ValueError):
    def __init__(self, fields: list[str]) -> None:
        self.fields = fields
        super().__init__(f"invalid fields: {', '.join(fields)}")


def _error_fields(exc: ValidationError) -> list[str]:
    """Top-level field names named by a ValidationError, first-seen order."""
    fields: list[str] = []
    for error in exc.errors():
        name = str(error["loc"][0]) if error["loc"] else ""
        if name and name not in fields:
            fields.append(name)
    return fields


class _Structure(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    version: Literal[1] = VERSION

    @classmethod
    def _required(cls) -> list[str]:
        return [name for name, info in cls.model_fields.items() if info.is_required()]

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> Self:
        if not isinstance(raw, Mapping):
            raise InvalidStructureError(cls._required())
        try:
            return cls.model_validate(dict(raw))
        except ValidationError as exc:
            raise InvalidStructureError(_error_fields(exc)) from exc

    @classmethod
    def validate(cls, raw: Mapping[str, Any] | None) -> list[str]:  # type: ignore[override]
        try:
            cls.from_dict(raw)
        except InvalidStructureError as exc:
            return exc.fields
        return []


# ---------------------------------------------------------------------------
# Options (preprocess output, metadata input)
# ---------------------------------------------------------------------------


class ConstructionOptions(_Structure):
    # MsgSend | MsgMultiSend | GenericMsg, parsed from their JSON form
    msgs: tuple[Any, ...]
    memo: str = Field("", strict=True)
    gas_adjustment: float = Field(**_NON_NEGATIVE_FLOAT)
    suggested_fee_multiplier: float = Field(**_NON_NEGATIVE_FLOAT)
    max_fee: Coins | None = None

    @field_validator("msgs", mode="before")
    @classmethod
    def parse_msgs(cls, value: Any) -> tuple:
        if not isinstance(value, (list, tuple)) or not value:
            raise ValueError("msgs must be a non-empty list")
        return tuple(
            m if isinstance(m, (MsgSend, MsgMultiSend, GenericMsg)) else message_from_json(m)
            for m in value
        )

    @field_validator("max_fee", mode="before")
    @classmethod
    def parse_max_fee(cls, value: Any) -> Coins | None:
        if value is None or isinstance(value, Coins):
            return value
        if not isinstance(value, list):
            raise ValueError("expected a list of coins")
        return Coins.from_dicts(value)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "version": self.version,
            "msgs": [message_to_json(m) for m in self.msgs],
            "memo": self.memo,
            "gas_adjustment": self.gas_adjustment,
            "suggested_fee_multiplier": self.suggested_fee_multiplier,
        }
        if self.max_fee is not None:
            data["max_fee"] = self.max_fee.to_dicts()
        return data


# ---------------------------------------------------------------------------
# Metadata (metadata output, payloads input)
# ---------------------------------------------------------------------------


class SignerMetadata(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    account_number: int = Field(**_NON_NEGATIVE_INT)
    sequence: int = Field(**_NON_NEGATIVE_INT)


class ConstructionMetadata(_Structure):
    signers: tuple[SignerMetadata, ...]
    gas_wanted: int = Field(**_NON_NEGATIVE_INT)
    gas_price: float = Field(**_NON_NEGATIVE_FLOAT)
    memo: str = Field(strict=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "signers": [s.model_dump() for s in self.signers],
            "gas_wanted": self.gas_wanted,
            "gas_price": self.gas_price,
            "memo": self.memo,
        }

"""Pydantic models for remote records and merged snapshots."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt


class UserRecord(BaseModel):
    """Represents a user fetched from the primary source."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: int | str = Field(default=..., description="Unique user identifier")
    name: str = Field(default=..., description="Display name")


class TransactionRecord(BaseModel):
    """Represents a transaction fetched from the secondary source."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    id: int | str = Field(default=..., description="Unique transaction identifier")
    user_id: int | str = Field(
        default=..., alias="userId", description="Identifier of the owning user"
    )
    # Numeric strings and booleans are rejected, never coerced
    amount: StrictInt | StrictFloat = Field(default=..., description="Transaction amount")


class Snapshot(BaseModel):
    """Merged, immutable result of one successful synchronization run."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "timestamp": 1717243200000,
                "users": [{"id": 1, "name": "Ana", "role": "admin"}],
                "transactions": [{"id": 101, "userId": 1, "amount": 50}],
            }
        },
    )

    timestamp: int = Field(default=..., ge=0, description="Milliseconds since the epoch")
    users: tuple[UserRecord, ...] = Field(default=(), description="Users in source order")
    transactions: tuple[TransactionRecord, ...] = Field(
        default=(), description="Transactions in source order"
    )

    def to_document(self) -> dict[str, Any]:
        """Return the persisted document layout (aliases applied, extras kept)."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Snapshot":
        """Build a snapshot from a persisted document."""
        return cls.model_validate(document)

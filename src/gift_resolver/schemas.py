from typing import Any

from pydantic import BaseModel, Field


# --- Resolved NFT ---

class ResolvedItem(BaseModel):
    """Normalized metadata for one gift NFT instance.

    Empty strings and zero counts mean "unknown"; they are omitted from the
    wire/cache payload (see ``to_payload``).
    """

    slug: str
    gift_title: str = Field(alias="gift")
    serial_number: int = Field(alias="number", gt=0)

    model: str = ""
    backdrop: str = ""
    pattern: str = ""  # Telegram page calls it "Symbol"
    owner: str = ""

    issued_count: int = Field(0, alias="availability_issued", ge=0)
    total_supply: int = Field(0, alias="availability_total", ge=0)

    model_config = {"populate_by_name": True, "protected_namespaces": ()}

    @property
    def is_present(self) -> bool:
        """True if the record carries at least one informative field."""
        return bool(
            self.model or self.backdrop or self.pattern
            or self.issued_count > 0 or self.total_supply > 0
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_defaults=True)


# --- Collection supply ---

class SupplyRecord(BaseModel):
    slug_base: str
    display_name: str
    issued_count: int = Field(ge=0)
    total_supply: int = Field(ge=0)

    @property
    def is_valid(self) -> bool:
        return self.issued_count > 0 and self.total_supply > 0

    def to_payload(self) -> dict[str, Any]:
        return {
            "slug": self.slug_base,
            "gift": self.display_name,
            "issued": self.issued_count,
            "total": self.total_supply,
            "availability_issued": self.issued_count,
            "availability_total": self.total_supply,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "SupplyRecord":
        return cls(
            slug_base=payload["slug"],
            display_name=payload["gift"],
            issued_count=payload["issued"],
            total_supply=payload["total"],
        )


class SupplyResponse(BaseModel):
    slug: str
    gift: str
    issued: int
    total: int
    availability_issued: int
    availability_total: int


# --- Health ---

class HealthResponse(BaseModel):
    ok: bool
    time: str
    cache: str = "ok"  # ok / disabled / degraded

"""
Phone system record schemas.

Two fixed document shapes are supported:
- Twilio (schema A): "users" and "phone_numbers" arrays
- RingCentral (schema B): "accounts" and "numbers" arrays

Missing or null fields load as empty values, matching how the exported files are
produced by the respective admin consoles.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SchemaFormat(Enum):
    """Supported phone system schemas."""
    TWILIO = "twilio"
    RINGCENTRAL = "ringcentral"

    @property
    def label(self) -> str:
        """Display name used in menus and output metadata."""
        return _FORMAT_LABELS[self]

    @classmethod
    def from_label(cls, value: str) -> "SchemaFormat":
        """Look up a format by value or display name (case-insensitive)."""
        needle = value.strip().lower()
        for fmt in cls:
            if needle in (fmt.value, fmt.label.lower()):
                return fmt
        raise ValueError(f"Unknown schema format: {value}")


_FORMAT_LABELS = {
    SchemaFormat.TWILIO: "Twilio",
    SchemaFormat.RINGCENTRAL: "RingCentral",
}


def _require_mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def text_field(data: dict[str, Any], key: str) -> str:
    """String field of a JSON object; missing or null loads as empty."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def _require_list(data: Any, key: str) -> list[Any]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a JSON array")
    return value


@dataclass
class TwilioUser:
    """A Twilio user account."""
    account_sid: str = ""
    friendly_name: str = ""
    email: str = ""
    phone_number: str = ""
    status: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "account_sid": self.account_sid,
            "friendly_name": self.friendly_name,
            "email": self.email,
            "phone_number": self.phone_number,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TwilioUser":
        """Create from dictionary."""
        data = _require_mapping(data, "user")
        return cls(
            account_sid=text_field(data, "account_sid"),
            friendly_name=text_field(data, "friendly_name"),
            email=text_field(data, "email"),
            phone_number=text_field(data, "phone_number"),
            status=text_field(data, "status"),
        )


@dataclass
class TwilioLine:
    """A Twilio phone number with its capability flags."""
    sid: str = ""
    phone_number: str = ""
    capabilities: dict[str, bool] = field(default_factory=dict)
    address_sid: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "sid": self.sid,
            "phone_number": self.phone_number,
            "capabilities": dict(self.capabilities),
            "address_sid": self.address_sid,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TwilioLine":
        """Create from dictionary."""
        data = _require_mapping(data, "phone number")
        capabilities = data.get("capabilities") or {}
        if not isinstance(capabilities, dict):
            raise ValueError("'capabilities' must be a JSON object")
        return cls(
            sid=text_field(data, "sid"),
            phone_number=text_field(data, "phone_number"),
            capabilities={str(k): bool(v) for k, v in capabilities.items()},
            address_sid=text_field(data, "address_sid"),
        )


@dataclass
class TwilioPhoneSystem:
    """Schema A document."""
    users: list[TwilioUser] = field(default_factory=list)
    phone_numbers: list[TwilioLine] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "users": [u.to_dict() for u in self.users],
            "phone_numbers": [line.to_dict() for line in self.phone_numbers],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TwilioPhoneSystem":
        """Create from dictionary."""
        data = _require_mapping(data, "Twilio document")
        return cls(
            users=[TwilioUser.from_dict(u) for u in _require_list(data, "users")],
            phone_numbers=[
                TwilioLine.from_dict(n) for n in _require_list(data, "phone_numbers")
            ],
        )


@dataclass
class RingCentralAccount:
    """A RingCentral account."""
    id: str = ""
    name: str = ""
    contact: str = ""
    main_number: str = ""
    active: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "contact": self.contact,
            "main_number": self.main_number,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RingCentralAccount":
        """Create from dictionary."""
        data = _require_mapping(data, "account")
        return cls(
            id=text_field(data, "id"),
            name=text_field(data, "name"),
            contact=text_field(data, "contact"),
            main_number=text_field(data, "main_number"),
            active=bool(data.get("active")),
        )


@dataclass
class RingCentralNumber:
    """A RingCentral phone number with its enabled features."""
    id: str = ""
    phone_number: str = ""
    features: list[str] = field(default_factory=list)
    region: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "phone_number": self.phone_number,
            "features": list(self.features),
            "region": self.region,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RingCentralNumber":
        """Create from dictionary."""
        data = _require_mapping(data, "number")
        return cls(
            id=text_field(data, "id"),
            phone_number=text_field(data, "phone_number"),
            features=[str(f) for f in _require_list(data, "features")],
            region=text_field(data, "region"),
        )


@dataclass
class RingCentralPhoneSystem:
    """Schema B document."""
    accounts: list[RingCentralAccount] = field(default_factory=list)
    numbers: list[RingCentralNumber] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "accounts": [a.to_dict() for a in self.accounts],
            "numbers": [n.to_dict() for n in self.numbers],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RingCentralPhoneSystem":
        """Create from dictionary."""
        data = _require_mapping(data, "RingCentral document")
        return cls(
            accounts=[
                RingCentralAccount.from_dict(a) for a in _require_list(data, "accounts")
            ],
            numbers=[
                RingCentralNumber.from_dict(n) for n in _require_list(data, "numbers")
            ],
        )

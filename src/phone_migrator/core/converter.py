"""
Schema conversion for phone system documents.

Pure mapping functions between the Twilio and RingCentral record shapes,
plus the file-level helpers used by the direct (non plan-assisted)
migration path and by the final execution step.
"""

import json
import logging
from pathlib import Path
from typing import Any

from .errors import (
    OutputWriteError,
    SourceParseError,
    SourceReadError,
    UnsupportedPathError,
)
from .plan_models import MigrationConfig
from .records import (
    RingCentralAccount,
    RingCentralNumber,
    RingCentralPhoneSystem,
    SchemaFormat,
    TwilioLine,
    TwilioPhoneSystem,
    TwilioUser,
)

logger = logging.getLogger(__name__)


def twilio_to_ringcentral(system: TwilioPhoneSystem) -> RingCentralPhoneSystem:
    """
    Convert a Twilio document to RingCentral.

    Users become accounts (active when status is "active"); lines become
    numbers whose features are the enabled capabilities, sorted by name.
    """
    accounts = [
        RingCentralAccount(
            id=user.account_sid,
            name=user.friendly_name,
            contact=user.email,
            main_number=user.phone_number,
            active=user.status == "active",
        )
        for user in system.users
    ]
    numbers = [
        RingCentralNumber(
            id=line.sid,
            phone_number=line.phone_number,
            features=sorted(name for name, enabled in line.capabilities.items() if enabled),
            region=line.address_sid,
        )
        for line in system.phone_numbers
    ]
    return RingCentralPhoneSystem(accounts=accounts, numbers=numbers)


def ringcentral_to_twilio(system: RingCentralPhoneSystem) -> TwilioPhoneSystem:
    """Convert a RingCentral document to Twilio."""
    users = [
        TwilioUser(
            account_sid=account.id,
            friendly_name=account.name,
            email=account.contact,
            phone_number=account.main_number,
            status="active" if account.active else "inactive",
        )
        for account in system.accounts
    ]
    lines = [
        TwilioLine(
            sid=number.id,
            phone_number=number.phone_number,
            capabilities={feature: True for feature in number.features},
            address_sid=number.region,
        )
        for number in system.numbers
    ]
    return TwilioPhoneSystem(users=users, phone_numbers=lines)


def read_source(path: str | Path) -> str:
    """
    Read a source document as UTF-8 text.

    Raises:
        SourceReadError: If the file cannot be read
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(f"failed to read source file: {e}", path=str(path)) from e


def parse_document(
    text: str, fmt: SchemaFormat
) -> TwilioPhoneSystem | RingCentralPhoneSystem:
    """
    Parse JSON text into the record model for the given schema.

    Raises:
        SourceParseError: If the text is not JSON or not shaped like the schema
    """
    try:
        data = json.loads(text)
        if fmt == SchemaFormat.TWILIO:
            return TwilioPhoneSystem.from_dict(data)
        return RingCentralPhoneSystem.from_dict(data)
    except (json.JSONDecodeError, ValueError, TypeError, AttributeError) as e:
        raise SourceParseError(f"failed to parse source data: {e}") from e


def load_twilio_system(path: str | Path) -> TwilioPhoneSystem:
    """Read and parse a Twilio source document."""
    return parse_document(read_source(path), SchemaFormat.TWILIO)  # type: ignore[return-value]


def dump_document(document: Any) -> str:
    """
    Serialize a document as indented JSON.

    Raises:
        OutputWriteError: If the document is not serializable
    """
    try:
        return json.dumps(document, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise OutputWriteError(f"failed to marshal output: {e}") from e


def write_target(path: str | Path, content: str) -> None:
    """
    Write the target document.

    Raises:
        OutputWriteError: If the file cannot be written
    """
    try:
        Path(path).write_text(content, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(f"failed to write target file: {e}", path=str(path)) from e
    logger.info(f"Wrote {len(content)} bytes to {path}")


def convert_text(text: str, source: SchemaFormat, target: SchemaFormat) -> str:
    """
    Convert a source document between schemas.

    Same-format conversion returns the text unchanged.

    Raises:
        SourceParseError: If the source text does not parse
        UnsupportedPathError: If the schema pair is not implemented
    """
    if source == target:
        return text

    if source == SchemaFormat.TWILIO and target == SchemaFormat.RINGCENTRAL:
        system = parse_document(text, source)
        return dump_document(twilio_to_ringcentral(system).to_dict())

    if source == SchemaFormat.RINGCENTRAL and target == SchemaFormat.TWILIO:
        system = parse_document(text, source)
        return dump_document(ringcentral_to_twilio(system).to_dict())

    raise UnsupportedPathError(
        f"unsupported migration path: {source.label} to {target.label}"
    )


def migrate(config: MigrationConfig) -> None:
    """
    Run a direct migration: read, convert, write in one step.

    Raises:
        MigrationError: On any read, parse, conversion or write failure
    """
    if config.source_format is None or config.target_format is None:
        raise UnsupportedPathError("source and target formats must be selected")

    text = read_source(config.source_file)
    logger.debug(
        f"Converting {config.source_file} ({config.source_format.label}) "
        f"to {config.target_file} ({config.target_format.label})"
    )
    converted = convert_text(text, config.source_format, config.target_format)
    write_target(config.target_file, converted)

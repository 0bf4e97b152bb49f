"""
archiclaw.core.ids - Structured entity identifiers and ID sequence counters.

Identifiers have the form ``{DOMAIN}-{TYPE}-{NNN}``:

- DOMAIN: 2-10 uppercase letters (e.g. ``FIN``, ``CORE``)
- TYPE: one of APP, ACR, ENT, CAP
- NNN: sequence, zero-padded to at least 3 digits (``FIN-APP-001``,
  ``FIN-APP-1234``)

Counters live in ``.archiclaw/id-sequences.yaml`` as
``{DOMAIN: {TYPE: highest_allocated}}``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated, Dict, Optional, Union

from pydantic import Field, TypeAdapter

from archiclaw.utilities.yaml_io import read_yaml, write_yaml

logger = logging.getLogger(__name__)


class EntityType(str, Enum):
    """Entity type codes used in identifiers."""

    APP = "APP"
    ACR = "ACR"
    ENT = "ENT"
    CAP = "CAP"


DOMAIN_PATTERN = r"[A-Z]{2,10}"
SEQUENCE_PATTERN = r"[0-9]{3,}"  # ASCII digits only

_TYPE_ALTERNATIVES = "|".join(t.value for t in EntityType)
_ID_REGEX = re.compile(
    f"^(?P<domain>{DOMAIN_PATTERN})-(?P<type>{_TYPE_ALTERNATIVES})-(?P<sequence>{SEQUENCE_PATTERN})$"
)
_DOMAIN_REGEX = re.compile(f"^{DOMAIN_PATTERN}$")


def id_pattern(entity_type: Optional[EntityType] = None) -> str:
    """Anchored regex source for identifiers, optionally for a single type."""
    type_pattern = entity_type.value if entity_type else f"(?:{_TYPE_ALTERNATIVES})"
    return f"^{DOMAIN_PATTERN}-{type_pattern}-{SEQUENCE_PATTERN}$"


# Annotated string types shared with the entity schemas.
DomainId = Annotated[str, Field(pattern=f"^{DOMAIN_PATTERN}$")]
EntityId = Annotated[str, Field(pattern=id_pattern())]
ApplicationId = Annotated[str, Field(pattern=id_pattern(EntityType.APP))]
ChangeRequestId = Annotated[str, Field(pattern=id_pattern(EntityType.ACR))]
DataEntityId = Annotated[str, Field(pattern=id_pattern(EntityType.ENT))]
CapabilityId = Annotated[str, Field(pattern=id_pattern(EntityType.CAP))]

IdSequences = Dict[str, Dict[str, int]]
SequenceMap = Dict[DomainId, Dict[str, Annotated[int, Field(strict=True, ge=0)]]]

_SEQUENCES_ADAPTER: TypeAdapter[IdSequences] = TypeAdapter(SequenceMap)


class MalformedIdentifier(ValueError):
    """Raised when a string is not a structured entity identifier."""


class ConcurrentModification(RuntimeError):
    """Raised when the counter file changed between read and write."""


@dataclass(frozen=True)
class ParsedId:
    """
    A structured identifier broken into components.

    Attributes:
        domain: Domain code (e.g. "FIN")
        type: Entity type
        sequence: Numeric sequence (e.g. 1 for "FIN-APP-001")
    """

    domain: str
    type: EntityType
    sequence: int

    @property
    def full_id(self) -> str:
        return format_id(self.domain, self.type, self.sequence)


def parse_id(id_string: str) -> ParsedId:
    """
    Parse a structured identifier into its components.

    Args:
        id_string: Identifier such as "FIN-APP-001"

    Returns:
        ParsedId with domain, type and integer sequence

    Raises:
        MalformedIdentifier: If the string does not match DOMAIN-TYPE-NNN
    """
    match = _ID_REGEX.match(id_string) if isinstance(id_string, str) else None
    if not match:
        raise MalformedIdentifier(f"Invalid ID format: {id_string}")
    return ParsedId(
        domain=match.group("domain"),
        type=EntityType(match.group("type")),
        sequence=int(match.group("sequence")),
    )


def is_valid_id(id_string: str) -> bool:
    """Check whether a string is a structured identifier."""
    try:
        parse_id(id_string)
    except MalformedIdentifier:
        return False
    return True


def is_domain_id(value: str) -> bool:
    """Check whether a string is a valid domain code."""
    return isinstance(value, str) and bool(_DOMAIN_REGEX.match(value))


def format_id(domain: str, entity_type: Union[EntityType, str], sequence: int) -> str:
    """
    Format an identifier from components.

    The sequence is zero-padded to three digits and never truncated. The
    domain is not validated.

    Args:
        domain: Domain code
        entity_type: Entity type (enum or its string value)
        sequence: Non-negative sequence number

    Returns:
        Formatted identifier, e.g. "FIN-APP-001"
    """
    if sequence < 0:
        raise ValueError(f"Sequence must be non-negative: {sequence}")
    type_code = entity_type.value if isinstance(entity_type, EntityType) else str(entity_type)
    return f"{domain}-{type_code}-{sequence:03d}"


def validate_sequences(data: object) -> IdSequences:
    """
    Validate raw counter data.

    An empty document is treated as an empty counter map.

    Raises:
        pydantic.ValidationError: If the structure is not
            ``{DOMAIN: {TYPE: non-negative int}}``
    """
    if data is None:
        return {}
    return _SEQUENCES_ADAPTER.validate_python(data)


class IdSequenceStore:
    """
    File-backed ID sequence counters.

    The store assumes a single writer: ``allocate_next_id`` performs an
    unprotected read-modify-write. Callers that may run concurrently must
    serialize access themselves (one CLI invocation at a time).
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> IdSequences:
        """Load and validate the counter map."""
        return validate_sequences(read_yaml(self.path))

    def write(self, sequences: IdSequences) -> None:
        """Persist the full counter map."""
        write_yaml(self.path, {domain: dict(types) for domain, types in sequences.items()})

    def current(self, domain: str, entity_type: Union[EntityType, str]) -> int:
        """Return the counter for (domain, type), 0 when absent."""
        type_code = entity_type.value if isinstance(entity_type, EntityType) else entity_type
        return self.read().get(domain, {}).get(type_code, 0)


def allocate_next_id(
    store: IdSequenceStore,
    domain: str,
    entity_type: Union[EntityType, str],
    check_concurrent: bool = False,
) -> str:
    """
    Allocate the next sequential identifier for a domain and type.

    Reads the counters, increments the (domain, type) entry (missing entries
    start at 0), writes the whole map back and returns the new identifier.

    Args:
        store: Counter store
        domain: Domain code
        entity_type: Entity type
        check_concurrent: Re-read the store before writing and fail if the
            counter moved since the first read

    Returns:
        The newly allocated identifier

    Raises:
        ConcurrentModification: With ``check_concurrent`` when another writer
            updated the same counter in between
    """
    type_code = EntityType(entity_type).value
    sequences = store.read()
    current = sequences.get(domain, {}).get(type_code, 0)
    next_value = current + 1
    sequences.setdefault(domain, {})[type_code] = next_value

    if check_concurrent:
        latest = store.read().get(domain, {}).get(type_code, 0)
        if latest != current:
            raise ConcurrentModification(
                f"Counter {domain}/{type_code} changed from {current} to {latest} during allocation"
            )

    store.write(sequences)
    new_id = format_id(domain, type_code, next_value)
    logger.info("Allocated %s", new_id)
    return new_id


__all__ = [
    "ApplicationId",
    "CapabilityId",
    "ChangeRequestId",
    "ConcurrentModification",
    "DataEntityId",
    "DomainId",
    "EntityId",
    "EntityType",
    "IdSequenceStore",
    "IdSequences",
    "MalformedIdentifier",
    "ParsedId",
    "SequenceMap",
    "allocate_next_id",
    "format_id",
    "id_pattern",
    "is_domain_id",
    "is_valid_id",
    "parse_id",
    "validate_sequences",
]

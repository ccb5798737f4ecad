"""Typed, read-only view of a ChatGPT ``conversations.json`` export.

The export format drifts between versions and individual records are often
incomplete, so every model here is lenient: a field holding a value of the
wrong shape falls back to its default, non-object entries inside ``mapping``
and typed lists are dropped, and keys the models do not know about are kept
as pydantic "extra" fields.  Validating a conversation object never fails.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    StrictFloat,
    StrictInt,
    ValidatorFunctionWrapHandler,
    field_validator,
)

logger = logging.getLogger(__name__)

CUSTOM_AGENT_PREFIX = "g-"

# Numbers only: booleans and numeric strings are not timestamps
Timestamp = StrictFloat | StrictInt | None


def _mappings_only(value: Any) -> Any:
    """Drop entries that are not JSON objects from a list or dict value."""
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    if isinstance(value, dict):
        return {key: item for key, item in value.items() if isinstance(item, dict)}
    return value


def to_local_datetime(timestamp: Any) -> datetime | None:
    """Convert a Unix timestamp to a local datetime.

    Args:
        timestamp: Seconds since the epoch.  Booleans, non-numeric values,
            NaN and out-of-range values are rejected.

    Returns:
        A naive local ``datetime``, or None if *timestamp* is not usable.
    """
    if timestamp is None or isinstance(timestamp, bool):
        return None
    try:
        return datetime.fromtimestamp(float(timestamp))
    except (TypeError, ValueError, OSError, OverflowError):
        return None


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, protected_namespaces=())

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_on_error(
        cls,
        value: Any,
        handler: ValidatorFunctionWrapHandler,
        info: ValidationInfo,
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)


class Author(_Lenient):
    role: str | None = None
    name: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class MessageContent(_Lenient):
    content_type: str | None = None
    parts: list[Any] = Field(default_factory=list)


class Attachment(_Lenient):
    mime_type: str | None = None
    name: str | None = None


class FinishDetails(_Lenient):
    type: str | None = None


class Citation(_Lenient):
    """One web reference, in either citation schema generation."""

    type: str | None = None


class CiteMetadata(_Lenient):
    metadata_list: Annotated[list[Citation], BeforeValidator(_mappings_only)] = Field(
        default_factory=list
    )


class Accelerator(_Lenient):
    id: str | None = None
    prompt: str | None = None


class CanvasMetadata(_Lenient):
    textdoc_type: str | None = None
    accelerator_metadata: Accelerator | None = None
    comment_ids: list[Any] | None = None

    @property
    def accelerator_id(self) -> str | None:
        return self.accelerator_metadata.id if self.accelerator_metadata else None

    @property
    def accelerator_prompt(self) -> str | None:
        return self.accelerator_metadata.prompt if self.accelerator_metadata else None

    @property
    def is_code(self) -> bool:
        return bool(self.textdoc_type) and self.textdoc_type.startswith("code/")

    @property
    def code_language(self) -> str | None:
        """Language of a ``code/<language>`` canvas, else None."""
        if not self.is_code:
            return None
        return self.textdoc_type.split("/")[-1] or None


class MessageMetadata(_Lenient):
    model_slug: str | None = None
    requested_model_slug: str | None = None
    default_model_slug: str | None = None
    gizmo_id: str | None = None
    request_id: str | None = None
    attachments: Annotated[list[Attachment], BeforeValidator(_mappings_only)] = Field(
        default_factory=list
    )
    model_adjustments: list[Any] = Field(default_factory=list)
    system_hints: list[Any] = Field(default_factory=list)
    finish_details: FinishDetails | None = None
    voice_mode_message: bool = False
    is_user_system_message: bool = False
    targeted_reply: Any = None
    canvas: CanvasMetadata | None = None
    cite_metadata: CiteMetadata | None = Field(default=None, alias="_cite_metadata")
    content_references: Annotated[
        list[Citation], BeforeValidator(_mappings_only)
    ] = Field(default_factory=list)


class Message(_Lenient):
    id: str | None = None
    author: Author = Field(default_factory=Author)
    create_time: Timestamp = None
    update_time: Timestamp = None
    content: MessageContent = Field(default_factory=MessageContent)
    metadata: MessageMetadata = Field(default_factory=MessageMetadata)
    status: str | None = None
    end_turn: bool | None = None
    weight: float | None = None
    recipient: Any = None
    channel: Any = None

    @property
    def role(self) -> str | None:
        return self.author.role

    @property
    def parts(self) -> list[Any]:
        return self.content.parts

    @property
    def text(self) -> str:
        """String content parts joined with single spaces."""
        return " ".join(part for part in self.content.parts if isinstance(part, str))


class ConversationNode(_Lenient):
    id: str | None = None
    message: Message | None = None
    parent: str | None = None
    children: list[str] = Field(default_factory=list)


class ConversationRecord(_Lenient):
    id: str | None = None
    title: str | None = None
    create_time: Timestamp = None
    update_time: Timestamp = None
    mapping: Annotated[
        dict[str, ConversationNode], BeforeValidator(_mappings_only)
    ] = Field(default_factory=dict)
    conversation_template_id: str | None = None
    gizmo_id: str | None = None
    is_archived: bool = False
    default_model_slug: str | None = None
    voice: str | None = None

    @property
    def is_custom_agent(self) -> bool:
        """True for conversations bound to a custom GPT (``g-`` ids)."""
        return any(
            ident is not None and ident.startswith(CUSTOM_AGENT_PREFIX)
            for ident in (self.conversation_template_id, self.gizmo_id)
        )

    def iter_messages(self) -> Iterator[tuple[ConversationNode, Message]]:
        """Yield ``(node, message)`` for every node that carries a message.

        Order follows the mapping's insertion order; the export format does
        not define a canonical order.
        """
        for node in self.mapping.values():
            if node.message is not None:
                yield node, node.message

    def first_child_message(self, node: ConversationNode) -> Message | None:
        if not node.children:
            return None
        child = self.mapping.get(node.children[0])
        return child.message if child is not None else None


def parse_conversations(raw: list[Any]) -> list[ConversationRecord]:
    """Validate raw export records into ``ConversationRecord`` objects.

    Args:
        raw: List of conversation dicts as loaded from ``conversations.json``.
            Already-built ``ConversationRecord`` instances are passed through.

    Returns:
        One record per JSON object in *raw*.  Entries that are not objects
        are dropped and reported with a warning.
    """
    records: list[ConversationRecord] = []
    skipped = 0
    for item in raw:
        if isinstance(item, ConversationRecord):
            records.append(item)
        elif isinstance(item, dict):
            records.append(ConversationRecord.model_validate(item))
        else:
            skipped += 1
    if skipped:
        logger.warning("Skipped %d archive entries that are not conversation objects", skipped)
    return records

"""
Common functionality shared by the fluent configuration modules.

This module contains shared infrastructure including:
- Exception classes
- Annotation metadata for display names, column order and value formats
- Member analysis for pydantic models and dataclasses
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

logger = logging.getLogger(__name__)


# Exception classes
class InvalidSelectorError(ValueError):
    """Raised when a member selector is not a simple member access."""

    def __init__(self, selector: Any, reason: str):
        self.selector = selector
        self.reason = reason
        super().__init__(f"Invalid member selector {selector!r}: {reason}")


class MissingDeclaringTypeError(RuntimeError):
    """Raised when a selected member is not declared on the configured model."""

    def __init__(self, model: type, member_name: str):
        self.model = model
        self.member_name = member_name
        super().__init__(
            f"Member '{member_name}' is not declared on model '{model.__name__}'"
        )


# Annotation metadata
@dataclass(frozen=True)
class XLSXDisplay:
    """Display metadata for a model member.

    Used inside ``typing.Annotated``. ``name`` becomes the column title and
    ``order`` the explicit zero-based column index.
    """

    name: str | None = None
    order: int | None = None


@dataclass(frozen=True)
class XLSXDisplayFormat:
    """Format-string metadata for a model member, e.g. ``"{0:yyyy-MM-dd}"``."""

    data_format_string: str


def strip_format_string(data_format_string: str) -> str:
    """Reduce a format string to its bare pattern.

    >>> strip_format_string("{0:#,##0.00}")
    '#,##0.00'
    """
    return (
        data_format_string.replace("{0:", "").replace("{:", "").replace("}", "")
    )


@dataclass(frozen=True)
class MemberDescriptor:
    """A named member of a model together with its lightweight metadata."""

    name: str
    field_type: Any
    display: XLSXDisplay | None = None
    display_format: XLSXDisplayFormat | None = None


class XLSXMemberAnalyzer:
    """Enumerates the members of pydantic models and dataclasses."""

    @staticmethod
    def analyze_model(model: type) -> list[MemberDescriptor]:
        """Return the members of a model in declaration order."""
        if isinstance(model, type) and issubclass(model, BaseModel):
            members = [
                XLSXMemberAnalyzer._describe(name, field_info.annotation, field_info.metadata)
                for name, field_info in model.model_fields.items()
            ]
        elif isinstance(model, type) and dataclasses.is_dataclass(model):
            type_hints = get_type_hints(model, include_extras=True)
            members = []
            for dc_field in dataclasses.fields(model):
                field_type = type_hints.get(dc_field.name, dc_field.type)
                metadata: list[Any] = []
                if get_origin(field_type) is Annotated:
                    field_type, *metadata = get_args(field_type)
                members.append(
                    XLSXMemberAnalyzer._describe(dc_field.name, field_type, metadata)
                )
        else:
            msg = f"Expected pydantic BaseModel or dataclass, got {model!r}"
            raise TypeError(msg)

        logger.debug(
            "Analyzed %d members of %s: %s",
            len(members),
            model.__name__,
            ", ".join(m.name for m in members),
        )
        return members

    @staticmethod
    def _describe(name: str, field_type: Any, metadata: list[Any]) -> MemberDescriptor:
        display = None
        display_format = None
        for metadata_item in metadata:
            if isinstance(metadata_item, XLSXDisplay):
                display = metadata_item
            elif isinstance(metadata_item, XLSXDisplayFormat):
                display_format = metadata_item
        return MemberDescriptor(
            name=name,
            field_type=field_type,
            display=display,
            display_format=display_format,
        )

    @staticmethod
    def unwrap_optional(field_type: Any) -> Any:
        """Return ``X`` for ``X | None`` and ``Optional[X]``, else the type itself."""
        origin = get_origin(field_type)
        # Handle both typing.Union and Python 3.10+ union syntax (X | None)
        if origin is Union or hasattr(field_type, "__args__"):
            args = get_args(field_type)
            non_none_args = [arg for arg in args if arg is not type(None)]
            if len(args) == 2 and len(non_none_args) == 1:  # noqa: PLR2004
                return non_none_args[0]
        return field_type

"""
Public API: registry of model configurations and model enhancement helpers.

This module provides:
- A per-model registry of ``ModelConfiguration`` objects
- A helper to attach display/format annotations to existing pydantic models

The registry is a plain dict without locking. Register and build all
configurations during application startup, before they are shared between
threads.
"""

import logging
from copy import deepcopy
from typing import Annotated

from pydantic import BaseModel, create_model

from fluentxlsx import config

from .xlsx_common import XLSXDisplay, XLSXDisplayFormat
from .xlsx_fluent import ModelConfiguration

logger = logging.getLogger(__name__)

_REGISTRY: dict[type, ModelConfiguration] = {}


def for_model(model: type) -> ModelConfiguration:
    """Get the registered configuration of a model, creating it on first access.

    New configurations import annotation defaults when the
    ``from_annotations`` setting is enabled.
    """
    fc = _REGISTRY.get(model)
    if fc is None:
        fc = ModelConfiguration(model)
        if config.SETTINGS.from_annotations:
            fc.from_annotations()
        _REGISTRY[model] = fc
        logger.debug("Registered configuration for %s", model.__name__)
    return fc


def build(model: type) -> ModelConfiguration:
    """Finish the registered configuration of a model and return it.

    Runs the auto-index pass when the ``auto_index`` setting is enabled.
    """
    fc = for_model(model)
    if config.SETTINGS.auto_index:
        fc.auto_index()
    return fc


def reset_registry() -> None:
    _REGISTRY.clear()


def create_xlsx_wrapper(
    original_model: type[BaseModel],
    metadata_map: dict[str, list[XLSXDisplay | XLSXDisplayFormat]],
) -> type[BaseModel]:
    """Create a subclass of a pydantic model with display/format annotations.

    Args:
        original_model: The pydantic model to enhance; it is not modified.
        metadata_map: Annotation objects per field name.

    Returns:
        New model class named ``XLSX<original name>``.

    Example:
        ```python
        XLSXEmployee = create_xlsx_wrapper(Employee, {
            "email": [XLSXDisplay(name="E-Mail", order=0)],
            "hired": [XLSXDisplayFormat("{0:yyyy-MM-dd}")],
        })
        ```
    """
    unknown = set(metadata_map) - set(original_model.model_fields)
    if unknown:
        msg = (
            f"Fields {sorted(unknown)} are not declared on model "
            f"'{original_model.__name__}'"
        )
        raise ValueError(msg)

    # Pydantic does not support modifying annotations after class creation,
    # so annotated fields are redeclared on a subclass. A copy of the original
    # FieldInfo keeps defaults and constraints without touching the original.
    field_definitions = {
        field_name: (
            Annotated[(field_info.annotation, *metadata_map[field_name])],
            deepcopy(field_info),
        )
        for field_name, field_info in original_model.model_fields.items()
        if field_name in metadata_map
    }
    return create_model(
        f"XLSX{original_model.__name__}",
        __base__=original_model,
        __module__=original_model.__module__,
        **field_definitions,
    )

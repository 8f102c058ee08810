"""
Type Conversion Utilities

Converts raw rows returned by the data collaborator into typed pydantic
models. Validation failures surface as ``TypeCoercionError`` so callers
handle one error hierarchy.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any, TypeVar, cast

from pydantic import BaseModel, TypeAdapter, ValidationError

from tenderdesk.shared.errors import create_type_coercion_error

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

T = TypeVar("T", bound=BaseModel)


@functools.lru_cache(maxsize=128)
def _get_type_adapter(model_cls: type[BaseModel]) -> TypeAdapter[BaseModel]:
    """Get or create a cached TypeAdapter for the given model class."""
    return TypeAdapter(model_cls)


class ModelConverter:
    """Static utility class for converting between dicts and pydantic models.

    Usage:
        >>> from tenderdesk.shared.models import TenderCategory
        >>> category = ModelConverter.to_model({"id": "c1", "name": "IT"}, TenderCategory)
        >>> category.name
        'IT'
    """

    @staticmethod
    def to_model(data: Mapping[str, Any], model_cls: type[T]) -> T:
        """Convert a dictionary to a model with validation.

        Raises:
            TypeCoercionError: If validation fails (wraps pydantic ValidationError)
        """
        try:
            adapter = _get_type_adapter(model_cls)
            return cast("T", adapter.validate_python(data))
        except ValidationError as e:
            model_name = model_cls.__name__
            validation_errors = cast("list[dict[str, Any]]", [dict(err) for err in e.errors()])
            raise create_type_coercion_error(
                message=f"Failed to convert row to {model_name}: {len(validation_errors)} validation error(s)",
                model_name=model_name,
                validation_errors=validation_errors,
                operation="row_to_model",
                original_error=e,
            ) from e

    @staticmethod
    def to_models(rows: Iterable[Mapping[str, Any]] | None, model_cls: type[T]) -> list[T]:
        """Convert a list of rows; None is treated as no rows."""
        return [ModelConverter.to_model(row, model_cls) for row in rows or ()]

    @staticmethod
    def to_optional_model(data: Mapping[str, Any] | None, model_cls: type[T]) -> T | None:
        if data is None:
            return None
        return ModelConverter.to_model(data, model_cls)

    @staticmethod
    def to_dict(
        model: BaseModel,
        *,
        mode: str = "json",
        exclude_none: bool = True,
        exclude_unset: bool = False,
    ) -> dict[str, Any]:
        """Convert a model to a JSON-safe dictionary for writes."""
        return model.model_dump(mode=mode, exclude_none=exclude_none, exclude_unset=exclude_unset)

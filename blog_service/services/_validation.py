from collections.abc import Mapping
from typing import Any

import pydantic

from blog_service.errors import ValidationError


def parse[M: pydantic.BaseModel](model_class: type[M], value: M | Mapping[str, Any] | None) -> M:
    """Validate `value` as `model_class`, raising this package's ValidationError"""
    if isinstance(value, model_class):
        return value
    try:
        return model_class.model_validate(dict(value or {}))
    except pydantic.ValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc

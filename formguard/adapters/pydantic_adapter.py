"""Adapter to use pydantic models for form validation."""

from typing import Any, Awaitable, Callable, Dict, Mapping, Type

from pydantic import BaseModel, ValidationError


def validation_errors(error: ValidationError) -> Dict[str, str]:
    """
    Flatten a pydantic ValidationError into field -> message.

    Nested locations are joined with "."; the first message per location wins.
    """
    errors: Dict[str, str] = {}
    for issue in error.errors():
        path = ".".join(str(part) for part in issue["loc"])
        errors.setdefault(path, issue["msg"])
    return errors


def pydantic_adapter(model: Type[BaseModel]) -> Callable[[Mapping[str, Any]], Awaitable[Dict[str, str]]]:
    """
    Wrap a pydantic model as a form validator.

    Args:
        model: Pydantic model describing the form values

    Returns:
        Async validate(values) returning field -> error message (empty when valid)
    """

    async def validate(values: Mapping[str, Any]) -> Dict[str, str]:
        try:
            model.model_validate(dict(values))
        except ValidationError as e:
            return validation_errors(e)
        return {}

    return validate

from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from restapi.core.logger import setup_logger

logger = setup_logger(__name__, include_location=True)


class AppBaseModel(BaseModel):
    """
    Base Pydantic model with common configuration.

    - ORM-style construction from objects (from_attributes=True)
    - Field names and aliases are both accepted on input
    """
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


T = TypeVar("T", bound=BaseModel)


def transform(class_constructor: Type[T], arg: Any) -> T:
    """
    Build a model from a mapping or an instance of the same model.

    Args:
        class_constructor: Target pydantic model class
        arg: Mapping, model instance, or attribute-bearing object

    Returns:
        The validated model instance

    Raises:
        ValidationError: If the data does not satisfy the model
    """
    if isinstance(arg, class_constructor):
        return arg
    try:
        if isinstance(arg, BaseModel):
            return class_constructor.model_validate(arg.model_dump(by_alias=True))
        return class_constructor.model_validate(arg)
    except ValidationError as e:
        logger.error(f"Failed to build {class_constructor.__name__}: {e}")
        raise


def drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}

"""Task inputs: declaration, coercion, validation and error collection."""

from taskline.attributes.attribute import Attribute, AttributeRegistry, optional, required
from taskline.attributes.coercions import CoercionRegistry
from taskline.attributes.errors import Errors
from taskline.attributes.validators import ValidatorRegistry

__all__ = [
    "Attribute",
    "AttributeRegistry",
    "CoercionRegistry",
    "Errors",
    "ValidatorRegistry",
    "optional",
    "required",
]

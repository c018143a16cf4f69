"""Pipeline steps for page conversion."""

from .convert import ConvertStep
from .read import ReadStep
from .save import SaveStep
from .select import SelectStep
from .strip import StripStep

__all__ = [
    "ConvertStep",
    "ReadStep",
    "SaveStep",
    "SelectStep",
    "StripStep",
]

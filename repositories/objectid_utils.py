"""
Utilities for MongoDB ObjectId conversion.
Stores expose ids as 24-character hex strings; MongoDB keeps them as ObjectId.
"""

from typing import Optional, Union

from bson import ObjectId
from bson.errors import InvalidId

IdLike = Union[ObjectId, str]


def objectid_to_str(obj_id: Union[IdLike, None]) -> Optional[str]:
    """
    Convert ObjectId to string.

    Examples:
        >>> objectid_to_str(ObjectId("507f1f77bcf86cd799439011"))
        '507f1f77bcf86cd799439011'
        >>> objectid_to_str(None) is None
        True

    Raises:
        ValueError: If a string is given that is not a valid ObjectId
        TypeError: For any other type
    """
    if obj_id is None:
        return None

    if isinstance(obj_id, ObjectId):
        return str(obj_id)

    if isinstance(obj_id, str):
        if not ObjectId.is_valid(obj_id):
            raise ValueError(f"Invalid ObjectId string: {obj_id}")
        return obj_id

    raise TypeError(f"Cannot convert {type(obj_id)} to ObjectId string")


def str_to_objectid(obj_id_str: Union[IdLike, None]) -> Optional[ObjectId]:
    """
    Convert string to ObjectId.

    Examples:
        >>> str_to_objectid("507f1f77bcf86cd799439011")
        ObjectId('507f1f77bcf86cd799439011')

    Raises:
        ValueError: If string is not a valid ObjectId format
        TypeError: For any other type
    """
    if obj_id_str is None:
        return None

    if isinstance(obj_id_str, ObjectId):
        return obj_id_str

    if isinstance(obj_id_str, str):
        try:
            return ObjectId(obj_id_str)
        except InvalidId:
            raise ValueError(f"Invalid ObjectId string: {obj_id_str}")

    raise TypeError(f"Cannot convert {type(obj_id_str)} to ObjectId")


def is_valid_objectid(obj_id: object) -> bool:
    """Check whether ``obj_id`` is an ObjectId or a valid ObjectId string."""
    if isinstance(obj_id, ObjectId):
        return True
    if isinstance(obj_id, str):
        return ObjectId.is_valid(obj_id)
    return False

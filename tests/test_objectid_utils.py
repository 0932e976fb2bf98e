import pytest
from bson import ObjectId

from repositories.objectid_utils import is_valid_objectid, objectid_to_str, str_to_objectid

OID = "507f1f77bcf86cd799439011"


def test_objectid_to_str():
    assert objectid_to_str(ObjectId(OID)) == OID
    assert objectid_to_str(OID) == OID
    assert objectid_to_str(None) is None


def test_objectid_to_str_rejects_bad_input():
    with pytest.raises(ValueError):
        objectid_to_str("nope")
    with pytest.raises(TypeError):
        objectid_to_str(42)


def test_str_to_objectid():
    oid = ObjectId(OID)
    assert str_to_objectid(OID) == oid
    assert str_to_objectid(oid) is oid
    assert str_to_objectid(None) is None


def test_str_to_objectid_rejects_bad_input():
    with pytest.raises(ValueError):
        str_to_objectid("t1")
    with pytest.raises(TypeError):
        str_to_objectid(3.14)


@pytest.mark.parametrize(
    "value, expected",
    [(OID, True), (ObjectId(), True), ("t1", False), (None, False), (123, False)],
)
def test_is_valid_objectid(value, expected):
    assert is_valid_objectid(value) is expected

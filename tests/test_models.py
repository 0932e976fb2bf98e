from datetime import datetime

import pytest
from bson import ObjectId
from pydantic import ValidationError as PydanticValidationError
from pymongo import ReturnDocument

from repositories.models import (
    TaskCreate,
    TaskModel,
    TaskUpdate,
    UpdateOptions,
    UserCreate,
    UserUpdate,
    coerce_model,
    insert_defaults,
    utc_now,
)


def test_utc_now_is_naive_with_millisecond_precision():
    now = utc_now()

    assert now.tzinfo is None
    assert now.microsecond % 1000 == 0


def test_to_dict_excludes_id_and_from_dict_maps_object_id():
    oid = ObjectId()
    task = TaskModel.from_dict({"_id": oid, "title": "x", "__v": 0})

    assert task.id == str(oid)
    assert "id" not in task.to_dict()
    assert task.to_dict()["title"] == "x"


def test_from_dict_does_not_mutate_input():
    document = {"_id": ObjectId(), "title": "x"}
    TaskModel.from_dict(document)
    assert "_id" in document


class TestUpdateOptions:
    def test_defaults(self):
        options = UpdateOptions()
        assert options.new is False
        assert options.upsert is False
        assert options.return_document == ReturnDocument.BEFORE

    def test_new_returns_after(self):
        assert UpdateOptions(new=True).return_document == ReturnDocument.AFTER

    def test_unknown_key_rejected(self):
        with pytest.raises(PydanticValidationError):
            UpdateOptions.model_validate({"returnOriginal": False})

    def test_sort_direction_checked(self):
        with pytest.raises(PydanticValidationError):
            UpdateOptions(sort=[("title", 0)])


class TestTaskInputs:
    def test_create_requires_title(self):
        with pytest.raises(PydanticValidationError):
            TaskCreate()

    def test_update_only_keeps_explicit_fields(self):
        patch = TaskUpdate(done=True, due_date=None)
        assert patch.to_set() == {"done": True, "due_date": None}

    def test_update_rejects_null_title(self):
        with pytest.raises(PydanticValidationError):
            TaskUpdate(title=None)

    def test_update_rejects_unknown_field(self):
        with pytest.raises(PydanticValidationError):
            TaskUpdate.model_validate({"completed": True})

    def test_update_parses_dates(self):
        patch = TaskUpdate.model_validate({"due_date": "2026-11-01T09:00:00"})
        assert patch.due_date == datetime(2026, 11, 1, 9, 0)


class TestUserInputs:
    def test_email_normalized(self):
        user = UserCreate(first_name="A", last_name="B", email=" A@B.Co ", password="h")
        assert user.email == "a@b.co"

    def test_negative_age_rejected(self):
        with pytest.raises(PydanticValidationError):
            UserUpdate(age=-1)

    def test_unknown_role_rejected(self):
        with pytest.raises(PydanticValidationError):
            UserUpdate(role="superuser")

    def test_role_dumped_as_plain_string(self):
        assert UserUpdate(role="admin").to_set() == {"role": "admin"}


def test_coerce_model_accepts_instance_mapping_and_none():
    options = UpdateOptions(new=True)

    assert coerce_model(UpdateOptions, options) is options
    assert coerce_model(UpdateOptions, {"upsert": True}).upsert is True
    assert coerce_model(UpdateOptions, None) == UpdateOptions()


def test_insert_defaults_skips_required_and_null_defaults():
    assert insert_defaults(TaskCreate) == {"done": False}
    assert insert_defaults(UserCreate) == {"role": "user"}

"""Tests for status results and status code categories."""

import pytest
from pydantic import ValidationError

from pigschema import ImmutableFieldError, ItemKindMismatchError, Severity, Status, StatusCategory, StatusCode


class TestStatus:
    def test_success(self) -> None:
        status = Status.success("Imported 5 of 5 items")

        assert status.ok
        assert status.code == StatusCode.OK
        assert str(status) == "[0] Imported 5 of 5 items"

    def test_error(self) -> None:
        status = Status.error(StatusCode.DUPLICATE_ID, "identifier o:Weight is used twice", item_id="o:Weight")

        assert not status.ok
        assert status.severity == Severity.ERROR
        assert status.item_id == "o:Weight"
        assert str(status) == "[671] identifier o:Weight is used twice"

    def test_warning_is_ok(self) -> None:
        status = Status.warning(StatusCode.UNSUPPORTED_DATATYPE, "xs:token values are handled as strings", field="datatype")

        assert status.ok
        assert status.code == StatusCode.UNSUPPORTED_DATATYPE

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            Status.success().message = "changed"  # type: ignore[misc]

    @pytest.mark.parametrize(
        "code, category",
        [
            (StatusCode.OK, StatusCategory.OK),
            (StatusCode.ID_CHANGED, StatusCategory.IMMUTABILITY),
            (StatusCode.INVALID_DATETIME, StatusCategory.IDENTIFIER),
            (StatusCode.TEXT_LANG_MISSING, StatusCategory.TEXT),
            (StatusCode.ITEM_TYPE_NOT_ALLOWED, StatusCategory.INSTANTIATION),
            (StatusCode.DUPLICATE_ID, StatusCategory.REFERENCE),
            (StatusCode.LINK_TARGET_NOT_ELIGIBLE, StatusCategory.REFERENCE),
            (StatusCode.SPECIALIZATION_KIND, StatusCategory.REFERENCE),
            (StatusCode.CARDINALITY, StatusCategory.CARDINALITY),
            (StatusCode.VALUE_RANGE, StatusCategory.VALUE_RANGE),
            (StatusCode.SCHEMA_INVALID, StatusCategory.SCHEMA),
            (StatusCode.FETCH_FAILED, StatusCategory.IO),
            (StatusCode.PARSE_FAILURE, StatusCategory.PARSE),
        ],
    )
    def test_category(self, code, category) -> None:
        assert Status(code=code).category == category

    @pytest.mark.parametrize(
        "name",
        ["INVALID_ID", "INVALID_ARRAY", "TEXT_INVALID", "ITEM_NOT_CREATED", "ITEM_EXCEPTION", "SCHEMA_ERROR", "NOT_IMPLEMENTED"],
    )
    def test_retired_codes_not_defined(self, name) -> None:
        assert name not in StatusCode.__members__


class TestContractErrors:
    def test_kind_mismatch_carries_code(self) -> None:
        error = ItemKindMismatchError("pig:Entity", "pig:Property")

        assert error.code == StatusCode.ITEM_TYPE_CHANGED
        assert "pig:Property" in str(error)

    def test_immutable_field_error(self) -> None:
        error = ImmutableFieldError("id", "d:req-1", "d:req-2")

        assert error.code == StatusCode.ID_CHANGED

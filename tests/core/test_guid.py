import pytest
from pydantic import BaseModel, ValidationError
from catalog_admin.core.types import GUID


class Reference(BaseModel):
    id: GUID


class TestGUID:
    """Test cases for the GUID type"""

    def test_encode_guid(self):
        guid = GUID.encode_guid("Category")

        assert guid.startswith("gid://catalog-admin/Category/")
        assert "," not in guid
        assert "=" not in guid
        assert guid != GUID.encode_guid("Category")

    def test_valid_guid_is_accepted(self):
        guid = GUID.encode_guid("Product")

        reference = Reference(id=f"  {guid} ")

        assert reference.id == guid
        assert isinstance(reference.id, GUID)
        assert reference.model_dump(mode="json") == {"id": str(guid)}

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "not-a-guid",
            "gid://catalog-admin/Category",
            "gid://catalog-admin//abc",
            "gid://catalog-admin/Category/abc,def",
        ],
    )
    def test_invalid_guid_is_rejected(self, value):
        with pytest.raises(ValidationError):
            Reference(id=value)

import pytest
from catalog_admin.core.exceptions import errors
from catalog_admin.core.types import GUID
from catalog_admin.domain.models import Category
from catalog_admin.domain.repositories import CategoryRepository

pytestmark = pytest.mark.anyio


def make_category(id: str, name: str, parent: Category | None = None) -> Category:
    category = Category(id=GUID(f"gid://catalog-admin/Category/{id}"), name=name, slug=name.lower())
    category.place_under(parent)
    return category


class TestFindDescendants:
    """Test cases for CategoryRepository.find_descendants"""

    async def test_matches_whole_path_segments(self, category_repository):
        a = await category_repository.save(make_category("AAAA", "First"))
        ab = await category_repository.save(make_category("AAAAB", "Second"))
        child = await category_repository.save(make_category("CCCC", "Child", parent=a))
        other_child = await category_repository.save(make_category("DDDD", "Other Child", parent=ab))
        grandchild = await category_repository.save(make_category("EEEE", "Grandchild", parent=child))

        descendants = await category_repository.find_descendants(a)

        assert [category.id for category in descendants] == [child.id, grandchild.id]
        assert [category.id for category in await category_repository.find_descendants(ab)] == [other_child.id]

    async def test_refresh_reloads_rows_written_by_another_session(self, other_session, category_repository):
        parent = await category_repository.save(make_category("AAAA", "Parent"))
        child = await category_repository.save(make_category("CCCC", "Child", parent=parent))

        other_repository = CategoryRepository(other_session)
        await other_repository.claim_version(await other_repository.find_one_by(child.id))
        await other_session.commit()

        assert (await category_repository.find_descendants(parent))[0].version == 1
        assert (await category_repository.find_descendants(parent, refresh=True))[0].version == 2


class TestVersioning:
    """Test cases for optimistic version checks"""

    async def test_claim_version_bumps_stored_version(self, session, category_repository):
        category = await category_repository.save(make_category("AAAA", "Versioned"))

        new_version = await category_repository.claim_version(category)
        await session.commit()

        assert new_version == 2
        assert category.version == 2
        await session.refresh(category)
        assert category.version == 2

    async def test_stale_version_is_rejected(self, session, category_repository):
        category = await category_repository.save(make_category("AAAA", "Versioned"))

        await category_repository.claim_version(category)
        await session.commit()

        with pytest.raises(errors.CategoryVersionConflictError):
            await category_repository.claim_version(category, expected_version=1)

    async def test_claim_versions_rejects_any_stale_row(self, other_session, category_repository):
        first = await category_repository.save(make_category("AAAA", "First"))
        second = await category_repository.save(make_category("BBBB", "Second"))

        other_repository = CategoryRepository(other_session)
        await other_repository.claim_version(await other_repository.find_one_by(second.id))
        await other_session.commit()

        with pytest.raises(errors.CategoryVersionConflictError):
            await category_repository.claim_versions([first, second])

    async def test_assert_version_keeps_version(self, session, category_repository):
        category = await category_repository.save(make_category("AAAA", "Versioned"))

        await category_repository.assert_version(category)
        await session.commit()
        await session.refresh(category)

        assert category.version == 1

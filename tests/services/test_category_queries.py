from decimal import Decimal

import pytest
from pydantic import ValidationError
from catalog_admin.core.config import settings
from catalog_admin.core.exceptions import errors
from catalog_admin.core.types import GUID
from catalog_admin.domain.enums import ProductStatus

pytestmark = pytest.mark.anyio


class TestGetTree:
    """Test cases for CategoryService.get_tree"""

    async def test_empty_catalog(self, service):
        assert await service.get_tree() == []

    async def test_tree_nests_children_in_display_order(self, service):
        clothing = await service.create_category({"name": "Clothing", "display_order": 2})
        books = await service.create_category({"name": "Books", "display_order": 1})
        await service.create_category({"name": "Shirts", "parent_id": clothing.id, "display_order": 1})
        await service.create_category({"name": "Coats", "parent_id": clothing.id, "display_order": 1})
        await service.create_category({"name": "Hats", "parent_id": clothing.id, "display_order": 0})

        tree = await service.get_tree()

        assert [node.name for node in tree] == ["Books", "Clothing"]
        assert tree[0].id == books.id
        assert tree[0].children == ()
        assert [child.name for child in tree[1].children] == ["Hats", "Coats", "Shirts"]
        assert all(child.parent_id == clothing.id for child in tree[1].children)

    async def test_inactive_categories_hide_their_subtree(self, service):
        active = await service.create_category({"name": "Garden"})
        hidden = await service.create_category({"name": "Archive", "is_active": False})
        await service.create_category({"name": "Old Stock", "parent_id": hidden.id})
        await service.create_category({"name": "Plants", "parent_id": active.id})

        tree = await service.get_tree()
        names = {node.name for root in tree for node in root.walk()}
        assert names == {"Garden", "Plants"}

        full_tree = await service.get_tree(include_inactive=True)
        full_names = {node.name for root in full_tree for node in root.walk()}
        assert full_names == {"Garden", "Plants", "Archive", "Old Stock"}

    async def test_root_only_keeps_direct_children(self, service):
        root = await service.create_category({"name": "Kitchen"})
        knives = await service.create_category({"name": "Knives", "parent_id": root.id})
        await service.create_category({"name": "Cutlery", "parent_id": root.id, "is_active": False})
        await service.create_category({"name": "Chef Knives", "parent_id": knives.id})
        await service.create_category({"name": "Bath"})

        tree = await service.get_tree(root_only=True)

        assert [node.name for node in tree] == ["Bath", "Kitchen"]
        assert tree[0].children == ()
        assert [child.name for child in tree[1].children] == ["Knives"]
        assert tree[1].children[0].children == ()

        full_tree = await service.get_tree(include_inactive=True, root_only=True)
        assert [child.name for child in full_tree[1].children] == ["Cutlery", "Knives"]

    async def test_tree_is_a_snapshot(self, service):
        await service.create_category({"name": "Toys"})

        tree = await service.get_tree()
        await service.create_category({"name": "Games"})

        assert [node.name for node in tree] == ["Toys"]
        with pytest.raises(ValidationError):
            tree[0].name = "Changed"


class TestAncestryQueries:
    """Test cases for descendants, breadcrumbs and details"""

    async def test_get_descendants(self, service):
        a = await service.create_category({"name": "Electronics"})
        b = await service.create_category({"name": "Audio", "parent_id": a.id})
        c = await service.create_category({"name": "Headphones", "parent_id": b.id})
        await service.create_category({"name": "Furniture"})

        descendants = await service.get_descendants(a.id)

        assert [category.id for category in descendants] == [b.id, c.id]
        assert await service.get_descendants(c.id) == []

    async def test_get_descendants_of_unknown_category(self, service):
        with pytest.raises(errors.CategoryNotFoundError):
            await service.get_descendants(GUID.encode_guid("Category"))

    async def test_get_full_path(self, service):
        a = await service.create_category({"name": "Electronics"})
        b = await service.create_category({"name": "Audio", "parent_id": a.id})
        c = await service.create_category({"name": "Headphones", "parent_id": b.id})

        assert await service.get_full_path(a.id) == ["Electronics"]
        assert await service.get_full_path(c.id) == ["Electronics", "Audio", "Headphones"]

    async def test_missing_ancestor_shows_placeholder(self, service, category_repository):
        a = await service.create_category({"name": "Electronics"})
        b = await service.create_category({"name": "Audio", "parent_id": a.id})
        c = await service.create_category({"name": "Headphones", "parent_id": b.id})

        await category_repository.delete(b.id)

        assert await service.get_full_path(c.id) == [
            "Electronics",
            settings.CATEGORY_UNKNOWN_ANCESTOR_NAME,
            "Headphones",
        ]

    async def test_get_category_details(self, service, add_product):
        a = await service.create_category({"name": "Electronics"})
        b = await service.create_category({"name": "Audio", "parent_id": a.id})
        await service.create_category({"name": "Speakers", "parent_id": b.id, "display_order": 2})
        await service.create_category({"name": "Headphones", "parent_id": b.id, "display_order": 1})
        await add_product("Audio")
        await add_product("Audio", status=ProductStatus.INACTIVE)

        details = await service.get_category_details(b.id)

        assert details.category.id == b.id
        assert details.category.path == [a.id]
        assert details.breadcrumb == ["Electronics", "Audio"]
        assert details.product_count == 2
        assert [child.name for child in details.children] == ["Headphones", "Speakers"]

    async def test_get_category_details_of_unknown_category(self, service):
        with pytest.raises(errors.CategoryNotFoundError):
            await service.get_category_details(GUID.encode_guid("Category"))


class TestListCategories:
    """Test cases for CategoryService.list_categories"""

    async def test_list_with_summary(self, service, add_product):
        await add_product("Garden")
        await add_product("Garden", name="Rake")
        await add_product("Nowhere")
        root = await service.create_category({"name": "Garden"})
        await service.create_category({"name": "Plants", "parent_id": root.id})
        await service.create_category({"name": "Archive", "is_active": False})

        response = await service.list_categories()

        assert response.results.total_count == 3
        assert response.results.page == 1
        assert response.results.has_next is False
        assert response.summary.total_categories == 3
        assert response.summary.active_categories == 2
        assert response.summary.root_categories == 2
        assert response.summary.total_products == 2

    async def test_summary_totals_stored_product_counts(self, service, add_product):
        await service.create_category({"name": "Garden"})
        await add_product("Garden")

        before = await service.list_categories()
        await service.recompute_all_statistics()
        after = await service.list_categories()

        assert before.summary.total_products == 0
        assert after.summary.total_products == 1

    async def test_filter_root_categories(self, service):
        root = await service.create_category({"name": "Garden"})
        await service.create_category({"name": "Plants", "parent_id": root.id})

        response = await service.list_categories({"parent": "root"})
        assert [item.name for item in response.results.items] == ["Garden"]

        response = await service.list_categories({"parent": root.id})
        assert [item.name for item in response.results.items] == ["Plants"]

    async def test_search_and_filters(self, service):
        await service.create_category({"name": "Garden Tools", "description": "Spades"})
        await service.create_category({"name": "Kitchen", "description": "Pots and garden herbs"})
        await service.create_category({"name": "Books", "is_active": False})

        response = await service.list_categories({"search": "GARDEN"})
        assert {item.name for item in response.results.items} == {"Garden Tools", "Kitchen"}

        response = await service.list_categories({"is_active": False})
        assert [item.name for item in response.results.items] == ["Books"]

        response = await service.list_categories({"level": 1})
        assert response.results.items == []

    async def test_sorting_and_pages(self, service):
        for name in ("Alpha", "Bravo", "Charlie", "Delta", "Echo"):
            await service.create_category({"name": name})

        response = await service.list_categories({"sort_by": "name", "sort_order": "desc", "page": 2, "limit": 2})

        assert [item.name for item in response.results.items] == ["Charlie", "Bravo"]
        assert response.results.total_count == 5
        assert response.results.total_pages == 3
        assert response.results.has_next is True
        assert response.results.has_previous is True

    async def test_invalid_parameters(self, service):
        with pytest.raises(errors.ValidationError):
            await service.list_categories({"sort_by": "slug"})

        with pytest.raises(errors.ValidationError):
            await service.list_categories({"limit": 500})


class TestStatistics:
    """Test cases for product statistics of categories"""

    async def test_update_product_count(self, service, add_product):
        category = await service.create_category({"name": "Shoes"})
        await add_product("Shoes")
        await add_product("Shoes", status=ProductStatus.DISCONTINUED)
        await add_product("Shoes", status=ProductStatus.ACTIVE)

        assert (await service.get_category(category.id)).product_count == 0

        refreshed = await service.update_product_count(category.id)

        assert refreshed.product_count == 3
        assert refreshed.active_product_count == 2

    async def test_recompute_all_statistics(self, service, add_product):
        shoes = await service.create_category({"name": "Shoes"})
        hats = await service.create_category({"name": "Hats"})
        await add_product("Shoes")
        await add_product("Hats", status=ProductStatus.DRAFT)

        refreshed = await service.recompute_all_statistics()

        assert refreshed == 2
        assert (await service.get_category(shoes.id)).product_count == 1
        assert (await service.get_category(shoes.id)).active_product_count == 1
        assert (await service.get_category(hats.id)).product_count == 1
        assert (await service.get_category(hats.id)).active_product_count == 0

    async def test_get_product_statistics(self, service, add_product):
        category = await service.create_category({"name": "Watches"})
        await add_product("Watches", price="10.00", stock_quantity=2)
        await add_product("Watches", price="30.00", stock_quantity=1, status=ProductStatus.INACTIVE)

        statistics = await service.get_product_statistics(category.id)

        assert statistics.category_id == category.id
        assert statistics.category_name == "Watches"
        assert statistics.total_products == 2
        assert statistics.active_products == 1
        assert statistics.total_stock == 3
        assert statistics.total_stock_value == Decimal("50.00")
        assert statistics.average_price == Decimal("20.00")
        assert statistics.min_price == Decimal("10.00")
        assert statistics.max_price == Decimal("30.00")
        assert (await service.get_category(category.id)).product_count == 2

    async def test_get_product_statistics_without_products(self, service):
        category = await service.create_category({"name": "Empty"})

        statistics = await service.get_product_statistics(category.id)

        assert statistics.total_products == 0
        assert statistics.total_stock == 0
        assert statistics.average_price == Decimal("0")
        assert statistics.max_price == Decimal("0")

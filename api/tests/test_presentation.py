"""
Tests for presentation helpers used by the site views
"""
from tourbook.services.presentation import (
    DELETED_CATEGORY,
    decorate_package,
    featured_category,
    group_by_category,
    short_description,
)


def package(id, categories=(), sub_categories=(), created_at="2024-01-01T00:00:00", **extra):
    return {
        "id": id,
        "title": f"Package {id}",
        "description": "A short trip.",
        "categories": list(categories),
        "sub_categories": list(sub_categories),
        "created_at": created_at,
        **extra,
    }


KERALA = {"id": "c1", "name": "Kerala", "image_url": "https://assets.test/kerala.jpg"}
MUNNAR = {"id": "s1", "name": "Munnar", "image_url": "https://assets.test/munnar.jpg"}


class TestShortDescription:
    def test_long_text_is_cut_at_twenty_words(self):
        text = " ".join(f"word{i}" for i in range(30))
        result = short_description(text)
        assert result == " ".join(f"word{i}" for i in range(20)) + "..."

    def test_exactly_twenty_words_is_unchanged(self):
        text = " ".join(f"word{i}" for i in range(20))
        assert short_description(text) == text

    def test_short_and_empty_text(self):
        assert short_description("Tea and hills") == "Tea and hills"
        assert short_description("") == ""
        assert short_description(None) == ""


class TestDecoratePackage:
    def test_first_category_and_subcategory_are_denormalised(self):
        decorated = decorate_package(package("p1", [KERALA], [MUNNAR]))

        assert decorated["category_name"] == "Kerala"
        assert decorated["category_image"] == KERALA["image_url"]
        assert decorated["sub_category_name"] == "Munnar"
        assert decorated["sub_category_image"] == MUNNAR["image_url"]
        assert decorated["short_description"] == "A short trip."

    def test_dangling_category_reference_shows_deleted(self):
        decorated = decorate_package(package("p1"))

        assert decorated["category_name"] == DELETED_CATEGORY
        assert decorated["category_image"] == ""
        assert decorated["sub_category_name"] is None


class TestGroupByCategory:
    def test_packages_are_grouped_newest_first(self):
        categories = [
            {**KERALA, "sub_categories": [{**MUNNAR, "is_active": True}]},
            {"id": "c2", "name": "Goa", "image_url": "", "sub_categories": []},
        ]
        packages = [
            package("old", [KERALA], [MUNNAR], created_at="2024-01-01T00:00:00"),
            package("new", [KERALA], created_at="2024-03-01T00:00:00"),
        ]

        kerala, goa = group_by_category(categories, packages)

        assert [p["id"] for p in kerala["packages"]] == ["new", "old"]
        assert [p["id"] for p in kerala["direct_packages"]] == ["new"]
        assert kerala["location_count"] == 2
        assert goa["packages"] == []
        assert goa["location_count"] == 0

    def test_inactive_subcategories_are_hidden(self):
        categories = [{
            **KERALA,
            "sub_categories": [
                {**MUNNAR, "is_active": True},
                {"id": "s2", "name": "Wayanad", "image_url": "", "is_active": False},
            ],
        }]

        (kerala,) = group_by_category(categories, [])
        assert [s["name"] for s in kerala["sub_categories"]] == ["Munnar"]

    def test_featured_category_by_name(self):
        grouped = group_by_category([{**KERALA, "sub_categories": []}], [])

        assert featured_category(grouped)["name"] == "Kerala"
        assert featured_category(grouped, name="Goa") is None

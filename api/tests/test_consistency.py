"""
Tests for package category/subcategory consistency checks
"""
import pytest
from bson import ObjectId

from tourbook.exceptions import ValidationError
from tourbook.services.consistency import (
    CATEGORIES_NOT_FOUND,
    SUBCATEGORIES_LOOKUP_FAILED,
    SUBCATEGORIES_MISMATCH,
    owners_by_subcategory,
    subcategories_belong,
    validate_package_relations,
)


class TestSubcategoriesBelong:
    def test_every_subcategory_owned_by_a_selected_category(self):
        kerala, goa = ObjectId(), ObjectId()
        munnar, calangute = ObjectId(), ObjectId()
        owners = {munnar: kerala, calangute: goa}

        assert subcategories_belong([kerala, goa], [munnar, calangute], owners)
        assert not subcategories_belong([kerala], [munnar, calangute], owners)

    def test_unknown_subcategory_does_not_belong(self):
        kerala = ObjectId()
        assert not subcategories_belong([kerala], [ObjectId()], {})

    def test_no_subcategories_always_belong(self):
        assert subcategories_belong([ObjectId()], [], {})

    def test_owners_map_covers_embedded_subcategories(self):
        kerala, munnar, alleppey = ObjectId(), ObjectId(), ObjectId()
        owners = owners_by_subcategory([
            {"_id": kerala, "sub_categories": [{"_id": munnar}, {"_id": alleppey}]},
            {"_id": ObjectId()},
        ])
        assert owners == {munnar: kerala, alleppey: kerala}


class TestValidatePackageRelations:
    async def test_matching_subcategory_passes(self, db, make_category):
        kerala = await make_category("Kerala", ["Munnar", "Alleppey"])
        munnar = kerala.sub_categories[0]

        await validate_package_relations(db, [kerala.id], [munnar.id])

    async def test_subcategory_of_unselected_category_fails(self, db, make_category):
        kerala = await make_category("Kerala", ["Munnar"])
        goa = await make_category("Goa", ["Calangute"])

        with pytest.raises(ValidationError) as exc:
            await validate_package_relations(db, [kerala.id], [goa.sub_categories[0].id])

        assert exc.value.message == SUBCATEGORIES_MISMATCH
        assert exc.value.field == "sub_categories"

    async def test_subcategories_across_several_selected_categories(self, db, make_category):
        kerala = await make_category("Kerala", ["Munnar"])
        goa = await make_category("Goa", ["Calangute"])

        await validate_package_relations(
            db,
            [kerala.id, goa.id],
            [kerala.sub_categories[0].id, goa.sub_categories[0].id],
        )

    async def test_empty_subcategory_list_passes(self, db, make_category):
        kerala = await make_category("Kerala", ["Munnar"])
        await validate_package_relations(db, [kerala.id], [])

    async def test_unknown_subcategory_fails(self, db, make_category):
        kerala = await make_category("Kerala", ["Munnar"])

        with pytest.raises(ValidationError) as exc:
            await validate_package_relations(db, [kerala.id], [ObjectId()])

        assert exc.value.message == SUBCATEGORIES_MISMATCH

    async def test_missing_category_fails(self, db, make_category):
        kerala = await make_category("Kerala")

        with pytest.raises(ValidationError) as exc:
            await validate_package_relations(db, [kerala.id, ObjectId()], [])

        assert exc.value.message == CATEGORIES_NOT_FOUND
        assert exc.value.field == "categories"

    async def test_no_categories_fails(self, db):
        with pytest.raises(ValidationError) as exc:
            await validate_package_relations(db, [], [])
        assert exc.value.field == "categories"

    async def test_lookup_error_fails_closed(self):
        kerala, munnar = ObjectId(), ObjectId()

        class BrokenCollection:
            async def count_documents(self, query):
                return 1

            def find(self, query):
                raise ConnectionError("connection reset")

        with pytest.raises(ValidationError) as exc:
            await validate_package_relations({"categories": BrokenCollection()}, [kerala], [munnar])

        assert exc.value.message == SUBCATEGORIES_LOOKUP_FAILED
        assert exc.value.field == "sub_categories"

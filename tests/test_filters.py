from sqlalchemy.dialects import postgresql

from app.models import Property, PropertyType
from app.repositories.sql import where_clause
from app.schemas.property_search import PropertySearchParams
from app.services.filters import TEXT_SEARCH_FIELDS, Op, build_criteria, matches_all


def compile_pg(clause) -> str:
    return str(clause.compile(dialect=postgresql.dialect()))


def test_empty_params_build_no_criteria():
    assert build_criteria(PropertySearchParams()) == []
    assert where_clause([]) is None


def test_blank_values_are_ignored():
    params = PropertySearchParams(query="   ", city="", features=["", " "])
    assert build_criteria(params) == []


def test_each_filter_becomes_one_criterion():
    params = PropertySearchParams(
        query="garden",
        city="Dubai",
        min_price=1,
        max_price=2,
        min_bedrooms=3,
        min_bathrooms=1.5,
        property_type=PropertyType.villa,
        min_square_feet=100,
        max_square_feet=200,
        features=["pool"],
    )
    criteria = build_criteria(params)

    assert len(criteria) == 10
    text = criteria[0]
    assert text.op is Op.ICONTAINS_ANY
    assert text.fields == TEXT_SEARCH_FIELDS
    assert [c.op for c in criteria if c.field == "price"] == [Op.GTE, Op.LTE]


def test_criteria_match_in_memory():
    prop = Property(
        title="Garden villa",
        description="",
        address="",
        city="Dubai",
        price=150000.0,
        bedrooms=4,
        property_type=PropertyType.villa,
        features=["pool", "garden"],
    )
    hit = PropertySearchParams(query="GARDEN", min_price=100000, property_type=PropertyType.villa, features=["pool"])
    miss = PropertySearchParams(query="garden", min_bathrooms=1)

    assert matches_all(prop, build_criteria(hit))
    # bathrooms unknown never satisfies a lower bound
    assert not matches_all(prop, build_criteria(miss))


def test_sql_clause_uses_ilike_and_jsonb_containment():
    params = PropertySearchParams(query="50%_off", features=["pool", "garage"], min_price=10)
    sql = compile_pg(where_clause(build_criteria(params)))

    assert sql.count("ILIKE") == len(TEXT_SEARCH_FIELDS)
    assert " OR " in sql
    assert "@>" in sql
    assert "properties.price >=" in sql

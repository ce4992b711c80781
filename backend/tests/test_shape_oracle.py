import pytest

from domain.value_objects.dto_type import DtoType
from services.shape_oracle import pascal_case


@pytest.mark.parametrize("value, expected", [
    ("customer", "Customer"),
    ("order items", "OrderItems"),
    ("first_name", "FirstName"),
    ("orderItems", "OrderItems"),
    ("", ""),
])
def test_pascal_case(value, expected):
    assert pascal_case(value) == expected


def test_entity_shapes_cover_every_default_kind(shape_oracle, customer):
    shapes = shape_oracle.shapes_for_entity(customer)

    expected = set(DtoType) - {
        DtoType.CUSTOM, DtoType.CUSTOM_ENUM, DtoType.CREATE_NESTED_MANY_INPUT, DtoType.ENUM
    }
    assert set(shapes) == expected
    assert shapes[DtoType.ENTITY].name == "Customer"
    assert shapes[DtoType.WHERE_UNIQUE_INPUT].name == "CustomerWhereUniqueInput"
    assert shapes[DtoType.FIND_ONE_ARGS].name == "CustomerFindUniqueArgs"
    assert shapes[DtoType.UPDATE_ARGS].name == "UpdateCustomerArgs"
    for dto_type, shape in shapes.items():
        assert shape.dto_type == dto_type


def test_related_entity_shape(shape_oracle, customer, order):
    shapes = shape_oracle.shapes_for_related_entity(customer, order)

    assert list(shapes) == [DtoType.CREATE_NESTED_MANY_INPUT]
    assert shapes[DtoType.CREATE_NESTED_MANY_INPUT].name == "OrderCreateNestedManyWithoutCustomersInput"


def test_enum_field_shape(shape_oracle, customer, status_field):
    shape = shape_oracle.shape_for_enum_field(customer, status_field)

    assert shape.name == "EnumCustomerStatus"
    assert shape.dto_type == DtoType.ENUM


def test_shapes_are_deterministic(shape_oracle, customer):
    assert shape_oracle.shapes_for_entity(customer) == shape_oracle.shapes_for_entity(customer)


def test_field_descriptors(orders_field, single_order_field, status_field):
    assert orders_field.is_lookup()
    assert orders_field.lookup.allow_multiple_selection is True
    assert orders_field.lookup.related_entity_id == "entity-order"
    assert single_order_field.lookup.allow_multiple_selection is False
    assert not status_field.is_lookup()

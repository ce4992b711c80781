import pytest

from domain.value_objects.dto_type import DtoType, SettingsField
from repositories.dto_specifications import (
    CustomDtosSpec,
    DefaultDtosSpec,
    DisplayNameIsSpec,
    ExcludingIdSpec,
    InModuleSpec,
    RelatedEntitySpec,
    RelatedFieldSpec,
    SettingsEquals,
    SettingsNot,
    filter_by_settings,
    settings_predicate,
)
from repositories.specifications import AND, OR, MatchAllSpecification, combine
from schemas import ModuleDto

from conftest import MODULE_ID, RESOURCE_ID


def make_dto(dto_id, dto_type, **kwargs):
    return ModuleDto(
        id=dto_id,
        name=kwargs.pop("name", dto_id),
        display_name=kwargs.pop("display_name", dto_id),
        dto_type=dto_type,
        resource_id=RESOURCE_ID,
        parent_block_id=kwargs.pop("parent_block_id", MODULE_ID),
        **kwargs,
    )


@pytest.fixture
def dtos():
    return [
        make_dto("custom", DtoType.CUSTOM),
        make_dto("custom-enum", DtoType.CUSTOM_ENUM),
        make_dto("entity", DtoType.ENTITY),
        make_dto("nested", DtoType.CREATE_NESTED_MANY_INPUT, related_entity_id="entity-order"),
        make_dto("enum", DtoType.ENUM, related_field_id="perm-status"),
    ]


def ids(dtos):
    return [dto.id for dto in dtos]


class TestInMemoryEvaluation:

    def test_custom_partition(self, dtos):
        assert ids(filter_by_settings(dtos, [CustomDtosSpec()])) == ["custom", "custom-enum"]

    def test_default_partition(self, dtos):
        assert ids(filter_by_settings(dtos, [DefaultDtosSpec()])) == ["entity", "nested", "enum"]

    def test_partitions_are_complementary(self, dtos):
        custom = set(ids(filter_by_settings(dtos, [CustomDtosSpec()])))
        default = set(ids(filter_by_settings(dtos, [DefaultDtosSpec()])))
        assert custom.isdisjoint(default)
        assert custom | default == set(ids(dtos))

    def test_missing_key_never_equals(self, dtos):
        result = filter_by_settings(dtos, [SettingsEquals(SettingsField.RELATED_ENTITY_ID, "entity-order")])
        assert ids(result) == ["nested"]

    def test_missing_key_always_matches_not(self, dtos):
        result = filter_by_settings(dtos, [SettingsNot(SettingsField.RELATED_FIELD_ID, "perm-status")])
        assert ids(result) == ["custom", "custom-enum", "entity", "nested"]

    def test_or_combinator(self, dtos):
        predicates = [
            RelatedEntitySpec("entity-order"),
            RelatedFieldSpec("perm-status"),
        ]
        assert ids(filter_by_settings(dtos, predicates, OR)) == ["nested", "enum"]

    def test_and_of_empty_list_matches_everything(self, dtos):
        assert filter_by_settings(dtos, []) == dtos

    def test_operators_compose(self, dtos):
        spec = ~CustomDtosSpec() & ~SettingsEquals(SettingsField.DTO_TYPE, DtoType.ENUM)
        assert ids(filter_by_settings(dtos, [spec])) == ["entity", "nested"]

    def test_scope_specs(self, dtos):
        other = make_dto("elsewhere", DtoType.CUSTOM, parent_block_id="module-2", display_name="CUSTOM")
        candidates = dtos + [other]

        assert "elsewhere" not in ids(filter_by_settings(candidates, [InModuleSpec(MODULE_ID)]))
        assert ids(filter_by_settings(candidates, [DisplayNameIsSpec("Custom")])) == ["custom", "elsewhere"]
        assert ids(filter_by_settings(candidates, [DisplayNameIsSpec("custom"), ExcludingIdSpec("custom")])) == ["elsewhere"]


class TestSettingsPredicateBuilder:

    def test_equals(self):
        spec = settings_predicate(SettingsField.DTO_TYPE, equals=DtoType.CUSTOM)
        assert isinstance(spec, SettingsEquals)
        assert spec.value == "Custom"

    def test_not(self):
        spec = settings_predicate(SettingsField.DTO_TYPE, not_="Custom")
        assert isinstance(spec, SettingsNot)

    def test_requires_exactly_one_operator(self):
        with pytest.raises(ValueError):
            settings_predicate(SettingsField.DTO_TYPE)
        with pytest.raises(ValueError):
            settings_predicate(SettingsField.DTO_TYPE, equals="a", not_="b")

    def test_unknown_field_is_rejected(self):
        with pytest.raises(ValueError):
            SettingsEquals("color", "red")

    def test_unknown_combinator_is_rejected(self):
        with pytest.raises(ValueError):
            combine([CustomDtosSpec()], "XOR")

    def test_combine_empty_matches_all(self):
        assert isinstance(combine([], AND), MatchAllSpecification)


class TestSqlEvaluation:
    """The same specifications must select the same rows in the database."""

    @pytest.fixture
    def stored(self, repository):
        repository.create(name="Custom", dto_type=DtoType.CUSTOM, resource_id=RESOURCE_ID, parent_block_id=MODULE_ID)
        repository.create(name="Colors", dto_type=DtoType.CUSTOM_ENUM, resource_id=RESOURCE_ID, parent_block_id=MODULE_ID)
        repository.create(name="Customer", dto_type=DtoType.ENTITY, resource_id=RESOURCE_ID, parent_block_id=MODULE_ID)
        repository.create(
            name="OrderCreateNestedManyWithoutCustomersInput",
            dto_type=DtoType.CREATE_NESTED_MANY_INPUT,
            resource_id=RESOURCE_ID,
            parent_block_id=MODULE_ID,
            related_entity_id="entity-order",
        )
        repository.create(
            name="EnumCustomerStatus",
            dto_type=DtoType.ENUM,
            resource_id=RESOURCE_ID,
            parent_block_id=MODULE_ID,
            related_field_id="perm-status",
        )
        return repository.find_many()

    @pytest.mark.parametrize("spec", [
        CustomDtosSpec(),
        DefaultDtosSpec(),
        RelatedEntitySpec("entity-order"),
        SettingsNot(SettingsField.RELATED_ENTITY_ID, "entity-order"),
        RelatedFieldSpec("perm-status"),
        SettingsNot(SettingsField.RELATED_FIELD_ID, "perm-status"),
        ~CustomDtosSpec(),
        DisplayNameIsSpec("CUSTOMER"),
        RelatedEntitySpec("entity-order") | RelatedFieldSpec("perm-status"),
    ])
    def test_sql_matches_in_memory(self, repository, stored, spec):
        in_memory = {dto.id for dto in stored if spec.is_satisfied_by(dto)}
        in_sql = {dto.id for dto in repository.find_many(spec)}
        assert in_sql == in_memory

    def test_count_uses_same_filter(self, repository, stored):
        assert repository.count(CustomDtosSpec()) == 2
        assert repository.count(DefaultDtosSpec()) == 3
        assert repository.count() == 5

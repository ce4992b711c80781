import pytest

from config.dto_config import DtoSettings
from domain.value_objects.dto_type import DtoType, PropertyType
from dtos.request.module_dto_request import (
    CreateModuleDtoEnumMemberRequest,
    CreateModuleDtoPropertyRequest,
    UpdateModuleDtoEnumMemberRequest,
    UpdateModuleDtoPropertyRequest,
)
from exceptions import ConflictError, ForbiddenError, InvalidNameError, NotFoundError, StaleVersionError
from repositories.module_dto_repository import ModuleDtoRepository
from schemas import ModuleDtoProperty, PropertyTypeDef
from services.dto_property_editor import DtoPropertyEditor

from conftest import MODULE_ID, RESOURCE_ID


@pytest.fixture
def editor(db_session, enabled_settings, repository):
    return DtoPropertyEditor(db_session, enabled_settings, repository)


@pytest.fixture
def custom_dto(repository):
    return repository.create(
        name="Address", dto_type=DtoType.CUSTOM, resource_id=RESOURCE_ID, parent_block_id=MODULE_ID
    )


@pytest.fixture
def custom_enum(repository):
    return repository.create(
        name="Colors", dto_type=DtoType.CUSTOM_ENUM, resource_id=RESOURCE_ID, parent_block_id=MODULE_ID
    )


@pytest.fixture
def default_dto(repository):
    return repository.create(
        name="Customer", dto_type=DtoType.ENTITY, resource_id=RESOURCE_ID, parent_block_id=MODULE_ID
    )


def add_property(editor, dto, name):
    return editor.add_property(CreateModuleDtoPropertyRequest(dto_id=dto.id, name=name))


def add_member(editor, dto, name):
    return editor.add_enum_member(CreateModuleDtoEnumMemberRequest(dto_id=dto.id, name=name))


def property_names(repository, dto):
    return [p.name for p in repository.find_one(dto.id).properties]


class TestProperties:

    def test_add_uses_default_shape(self, editor, repository, custom_dto):
        prop = add_property(editor, custom_dto, "street")

        assert prop == ModuleDtoProperty(
            name="street",
            is_array=False,
            is_optional=False,
            property_types=[PropertyTypeDef(type=PropertyType.STRING, is_array=False)],
        )
        assert property_names(repository, custom_dto) == ["street"]

    def test_add_keeps_order(self, editor, repository, custom_dto):
        for name in ("street", "city", "zip"):
            add_property(editor, custom_dto, name)
        assert property_names(repository, custom_dto) == ["street", "city", "zip"]

    def test_add_duplicate(self, editor, custom_dto):
        add_property(editor, custom_dto, "street")
        with pytest.raises(ConflictError):
            add_property(editor, custom_dto, "street")

    def test_names_are_case_sensitive(self, editor, repository, custom_dto):
        add_property(editor, custom_dto, "street")
        add_property(editor, custom_dto, "Street")
        assert property_names(repository, custom_dto) == ["street", "Street"]

    @pytest.mark.parametrize("fixture_name", ["default_dto", "custom_enum"])
    def test_only_custom_dtos_take_properties(self, request, editor, fixture_name):
        dto = request.getfixturevalue(fixture_name)
        with pytest.raises(ForbiddenError):
            add_property(editor, dto, "street")

    @pytest.mark.parametrize("edit, message", [
        (lambda editor, dto: add_property(editor, dto, "street"),
         "Properties can only be added to custom DTOs"),
        (lambda editor, dto: editor.update_property(dto.id, "street", UpdateModuleDtoPropertyRequest(is_array=True)),
         "Properties can only be updated on custom DTOs"),
        (lambda editor, dto: editor.delete_property(dto.id, "street"),
         "Properties can only be deleted from custom DTOs"),
    ])
    def test_forbidden_message_names_the_edit(self, editor, custom_enum, edit, message):
        with pytest.raises(ForbiddenError) as exc_info:
            edit(editor, custom_enum)
        assert exc_info.value.message == message

    def test_missing_dto(self, editor):
        with pytest.raises(NotFoundError):
            editor.add_property(CreateModuleDtoPropertyRequest(dto_id="missing", name="street"))

    def test_add_then_delete_round_trips(self, editor, repository, custom_dto):
        add_property(editor, custom_dto, "street")
        before = property_names(repository, custom_dto)

        add_property(editor, custom_dto, "city")
        removed = editor.delete_property(custom_dto.id, "city")

        assert removed.name == "city"
        assert property_names(repository, custom_dto) == before

    def test_delete_missing_property(self, editor, custom_dto):
        with pytest.raises(NotFoundError):
            editor.delete_property(custom_dto.id, "street")

    def test_update_merges_patch(self, editor, repository, custom_dto):
        add_property(editor, custom_dto, "tags")

        updated = editor.update_property(custom_dto.id, "tags", UpdateModuleDtoPropertyRequest(
            is_array=True,
            property_types=[PropertyTypeDef(type=PropertyType.INTEGER)],
        ))

        assert updated.name == "tags"
        assert updated.is_array is True
        assert updated.is_optional is False
        assert updated.property_types[0].type == PropertyType.INTEGER
        assert repository.find_one(custom_dto.id).properties == [updated]

    def test_rename_to_sibling_name(self, editor, custom_dto):
        add_property(editor, custom_dto, "street")
        add_property(editor, custom_dto, "city")

        with pytest.raises(ConflictError):
            editor.update_property(custom_dto.id, "city", UpdateModuleDtoPropertyRequest(name="street"))

    def test_rename_to_own_name(self, editor, repository, custom_dto):
        add_property(editor, custom_dto, "street")

        updated = editor.update_property(custom_dto.id, "street", UpdateModuleDtoPropertyRequest(name="street"))

        assert updated.name == "street"
        assert property_names(repository, custom_dto) == ["street"]

    def test_rename_keeps_position(self, editor, repository, custom_dto):
        for name in ("street", "city", "zip"):
            add_property(editor, custom_dto, name)

        editor.update_property(custom_dto.id, "city", UpdateModuleDtoPropertyRequest(name="town"))

        assert property_names(repository, custom_dto) == ["street", "town", "zip"]

    def test_update_missing_property(self, editor, custom_dto):
        with pytest.raises(NotFoundError):
            editor.update_property(custom_dto.id, "street", UpdateModuleDtoPropertyRequest(is_optional=True))

    def test_empty_property_types_are_rejected(self):
        with pytest.raises(ValueError):
            UpdateModuleDtoPropertyRequest(property_types=[])

    def test_edits_keep_name_and_enabled(self, editor, repository, custom_dto):
        repository.update(custom_dto.id, {"enabled": False})

        add_property(editor, custom_dto, "street")

        stored = repository.find_one(custom_dto.id)
        assert stored.name == "Address"
        assert stored.enabled is False


class TestEnumMembers:

    def test_add_defaults_value_to_name(self, editor, custom_enum):
        member = add_member(editor, custom_enum, "ACTIVE")

        assert member.name == "ACTIVE"
        assert member.value == "ACTIVE"

    def test_add_duplicate(self, editor, custom_enum):
        add_member(editor, custom_enum, "ACTIVE")
        with pytest.raises(ConflictError):
            add_member(editor, custom_enum, "ACTIVE")

    def test_invalid_member_name(self, editor, repository, custom_enum):
        with pytest.raises(InvalidNameError):
            add_member(editor, custom_enum, "NOT ACTIVE")
        assert repository.find_one(custom_enum.id).members == []

    @pytest.mark.parametrize("fixture_name", ["default_dto", "custom_dto"])
    def test_only_custom_enums_take_members(self, request, editor, fixture_name):
        dto = request.getfixturevalue(fixture_name)
        with pytest.raises(ForbiddenError) as exc_info:
            add_member(editor, dto, "ACTIVE")
        assert exc_info.value.message == "Enum members can only be added to custom Enum DTOs"

    @pytest.mark.parametrize("edit, message", [
        (lambda editor, dto: editor.update_enum_member(dto.id, "ACTIVE", UpdateModuleDtoEnumMemberRequest(value="on")),
         "Enum members can only be updated on custom Enum DTOs"),
        (lambda editor, dto: editor.delete_enum_member(dto.id, "ACTIVE"),
         "Enum members can only be deleted from custom Enum DTOs"),
    ])
    def test_forbidden_message_names_the_edit(self, editor, default_dto, edit, message):
        with pytest.raises(ForbiddenError) as exc_info:
            edit(editor, default_dto)
        assert exc_info.value.message == message

    def test_update_value(self, editor, custom_enum):
        add_member(editor, custom_enum, "ACTIVE")

        member = editor.update_enum_member(custom_enum.id, "ACTIVE", UpdateModuleDtoEnumMemberRequest(value="active"))

        assert member.name == "ACTIVE"
        assert member.value == "active"

    def test_rename_validates_syntax(self, editor, custom_enum):
        add_member(editor, custom_enum, "ACTIVE")
        with pytest.raises(InvalidNameError):
            editor.update_enum_member(custom_enum.id, "ACTIVE", UpdateModuleDtoEnumMemberRequest(name="IN ACTIVE"))

    def test_rename_to_sibling_name(self, editor, custom_enum):
        add_member(editor, custom_enum, "ACTIVE")
        add_member(editor, custom_enum, "INACTIVE")
        with pytest.raises(ConflictError):
            editor.update_enum_member(custom_enum.id, "INACTIVE", UpdateModuleDtoEnumMemberRequest(name="ACTIVE"))

    def test_delete(self, editor, repository, custom_enum):
        add_member(editor, custom_enum, "ACTIVE")
        add_member(editor, custom_enum, "INACTIVE")

        removed = editor.delete_enum_member(custom_enum.id, "ACTIVE")

        assert removed.name == "ACTIVE"
        assert [m.name for m in repository.find_one(custom_enum.id).members] == ["INACTIVE"]

    def test_delete_missing_member(self, editor, custom_enum):
        with pytest.raises(NotFoundError):
            editor.delete_enum_member(custom_enum.id, "ACTIVE")


class InterleavingRepository(ModuleDtoRepository):
    """
    Lets a competing writer land between the editor's read and its write.

    The first `races` reads of the DTO are each followed by another editor
    adding a property of its own.
    """

    def __init__(self, db, competitor_names):
        super().__init__(db)
        self.competitor_names = list(competitor_names)
        self.competitor = ModuleDtoRepository(db)

    def find_one(self, dto_id, spec=None):
        dto = super().find_one(dto_id, spec)
        if dto is not None and self.competitor_names:
            name = self.competitor_names.pop(0)
            current = self.competitor.find_one(dto_id)
            self.competitor.update(
                dto_id,
                {"properties": [*current.properties, ModuleDtoProperty(name=name)]},
                expected_version=current.version,
            )
        return dto


class TestConcurrentEdits:

    def test_racing_adds_both_survive(self, db_session, repository, custom_dto):
        racing_repo = InterleavingRepository(db_session, ["city"])
        editor = DtoPropertyEditor(db_session, DtoSettings(max_edit_attempts=3), racing_repo)

        editor.add_property(CreateModuleDtoPropertyRequest(dto_id=custom_dto.id, name="street"))

        assert property_names(repository, custom_dto) == ["city", "street"]
        # create, competitor's add, editor's add
        assert repository.find_one(custom_dto.id).version == 3

    def test_retry_rechecks_conflicts(self, db_session, repository, custom_dto):
        racing_repo = InterleavingRepository(db_session, ["street"])
        editor = DtoPropertyEditor(db_session, DtoSettings(max_edit_attempts=3), racing_repo)

        with pytest.raises(ConflictError):
            editor.add_property(CreateModuleDtoPropertyRequest(dto_id=custom_dto.id, name="street"))

        assert property_names(repository, custom_dto) == ["street"]

    def test_gives_up_after_max_attempts(self, db_session, repository, custom_dto):
        racing_repo = InterleavingRepository(db_session, ["a", "b"])
        editor = DtoPropertyEditor(db_session, DtoSettings(max_edit_attempts=2), racing_repo)

        with pytest.raises(StaleVersionError):
            editor.add_property(CreateModuleDtoPropertyRequest(dto_id=custom_dto.id, name="street"))

        assert property_names(repository, custom_dto) == ["a", "b"]

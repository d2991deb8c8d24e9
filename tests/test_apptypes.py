import pytest

from blogserver.apptypes import (
    Category,
    Register,
    RoleID,
    Storage,
    to_category,
    to_register,
    to_storage,
)

CATEGORY_LABELS = ["未使用", "系统", "背景", "封面", "插图", "广告", "友链"]


@pytest.mark.parametrize("member", [m for m in Category if m is not Category.UNKNOWN])
def test_category_round_trip(member):
    assert to_category(str(member)) is member


@pytest.mark.parametrize("member", [m for m in Storage if m is not Storage.UNKNOWN])
def test_storage_round_trip(member):
    assert to_storage(str(member)) is member


@pytest.mark.parametrize("member", [m for m in Register if m is not Register.UNKNOWN])
def test_register_round_trip(member):
    assert to_register(str(member)) is member


def test_labels_from_source():
    assert str(Category(3)) == "封面"
    assert str(Storage(1)) == "七牛云"
    assert str(Register(0)) == "邮箱"


def test_unknown_labels():
    assert str(to_category("nothing")) == "未知类别"
    assert str(to_storage("nothing")) == "未知存储"
    assert str(to_register("nothing")) == "未知"


def test_unknown_text_maps_to_minus_one():
    assert to_category("nothing") == -1
    assert to_storage("nothing") == -1
    assert to_register("nothing") == -1


def test_iota_ordering():
    assert [to_category(label) for label in CATEGORY_LABELS] == list(range(7))
    assert [to_storage("本地"), to_storage("七牛云")] == [0, 1]
    assert [to_register("邮箱"), to_register("QQ")] == [0, 1]


def test_role_ids():
    assert [RoleID(0), RoleID(1), RoleID(2)] == [RoleID.GUEST, RoleID.USER, RoleID.ADMIN]


def test_labels_are_distinct():
    parsed = {to_category(str(m)) for m in Category if m >= 0}
    assert len(parsed) == len(CATEGORY_LABELS)
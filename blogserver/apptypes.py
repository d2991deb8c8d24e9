"""Enumerations shared by the data models: image categories, storage, registration and roles."""

from enum import IntEnum


class Category(IntEnum):
    """Category of an uploaded image."""

    UNKNOWN = -1
    NULL = 0
    SYSTEM = 1
    CAROUSEL = 2
    COVER = 3
    ILLUSTRATION = 4
    AD_IMAGE = 5
    LOGO = 6

    def __str__(self) -> str:
        return _CATEGORY_LABELS[self]


class Storage(IntEnum):
    """Where an image is stored."""

    UNKNOWN = -1
    LOCAL = 0
    QINIU = 1

    def __str__(self) -> str:
        return _STORAGE_LABELS[self]


class Register(IntEnum):
    """How a user account was registered."""

    UNKNOWN = -1
    EMAIL = 0
    QQ = 1

    def __str__(self) -> str:
        return _REGISTER_LABELS[self]


class RoleID(IntEnum):
    """Role of a user."""

    GUEST = 0
    USER = 1
    ADMIN = 2


_CATEGORY_LABELS = {
    Category.UNKNOWN: "未知类别",
    Category.NULL: "未使用",
    Category.SYSTEM: "系统",
    Category.CAROUSEL: "背景",
    Category.COVER: "封面",
    Category.ILLUSTRATION: "插图",
    Category.AD_IMAGE: "广告",
    Category.LOGO: "友链",
}

_STORAGE_LABELS = {
    Storage.UNKNOWN: "未知存储",
    Storage.LOCAL: "本地",
    Storage.QINIU: "七牛云",
}

_REGISTER_LABELS = {
    Register.UNKNOWN: "未知",
    Register.EMAIL: "邮箱",
    Register.QQ: "QQ",
}

_CATEGORY_BY_LABEL = {
    label: member for member, label in _CATEGORY_LABELS.items() if member is not Category.UNKNOWN
}
_STORAGE_BY_LABEL = {
    label: member for member, label in _STORAGE_LABELS.items() if member is not Storage.UNKNOWN
}
_REGISTER_BY_LABEL = {
    label: member for member, label in _REGISTER_LABELS.items() if member is not Register.UNKNOWN
}


def to_category(text: str) -> Category:
    """Return the category whose label is ``text``, or ``Category.UNKNOWN``."""
    return _CATEGORY_BY_LABEL.get(text, Category.UNKNOWN)


def to_storage(text: str) -> Storage:
    """Return the storage whose label is ``text``, or ``Storage.UNKNOWN``."""
    return _STORAGE_BY_LABEL.get(text, Storage.UNKNOWN)


def to_register(text: str) -> Register:
    """Return the registration source whose label is ``text``, or ``Register.UNKNOWN``."""
    return _REGISTER_BY_LABEL.get(text, Register.UNKNOWN)
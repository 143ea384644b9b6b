"""Mapped types shared across test modules, for namespace resolution tests."""

from jsonmap import MappedObject


class Address(MappedObject):
    PROPERTIES = {
        "street": "string",
        "city": "string",
    }
    REQUIRED = ["city|string"]


class ItemCollection:
    """Collection wrapper used in tests."""

    def __init__(self, items):
        self.items = list(items)

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, index):
        return self.items[index]

"""Unwrap an enveloped list with the pre-processing hook before mapping."""

import json

from jsonmap import MappedObject
from jsonmap.print_util import write_mapped

JSON_DATA = """
{
    "users": {
        "user": [
            {"name": "John", "surname": "Smith", "age": 24},
            {"name": "Marry", "surname": "Cary", "age": 22}
        ]
    },
    "meta": {"result": true, "version": "1.0", "took": "0.035"}
}
"""


class User(MappedObject):
    PROPERTIES = {
        "name": "string",
        "surname": "string",
        "age": "int",
    }


class Meta(MappedObject):
    PROPERTIES = {
        "result": "bool",
        "version": "string",
        "took": "float",
    }


class Data(MappedObject):
    PROPERTIES = {
        "users": "User[]",
        "meta": "Meta",
    }

    def format_json(self, json_data):
        json_data["users"] = (json_data.get("users") or {}).get("user") or []
        return json_data


if __name__ == "__main__":
    data = Data(json.loads(JSON_DATA))
    write_mapped(data)

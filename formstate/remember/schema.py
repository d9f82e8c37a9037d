"""JSON schema for remembered form snapshots on disk."""

SNAPSHOT_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Remembered form snapshot",
    "type": "object",
    "required": ["remember_key", "snapshot"],
    "properties": {
        "remember_key": {"type": "string", "minLength": 1},
        "snapshot": {
            "type": "object",
            "required": ["data", "errors"],
            "properties": {
                "data": {"type": "object"},
                "errors": {
                    "type": "object",
                    "additionalProperties": {"type": "string"},
                },
            },
            "additionalProperties": False,
        },
        "meta": {
            "type": "object",
            "properties": {
                "created_at": {"type": "string"},
                "updated_at": {"type": "string"},
            },
        },
    },
}

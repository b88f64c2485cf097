"""Constants shared across the package."""

# Fields that must be present and truthy on a session-creation body.
SESSION_REQUIRED_FIELDS = (
    "chunk_size",
    "file_name",
    "file_size",
    "max_chunk",
    "mime_type",
    "provider",
)
"""Language selection for multilingual pokemon names."""

SUPPORTED_LANGUAGES = ("english", "french", "japanese", "chinese")
DEFAULT_LANGUAGE = "english"


def resolve_language(code: str | None) -> str:
    """Returns `code` if it is a supported language, otherwise the default."""
    return code if code in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE

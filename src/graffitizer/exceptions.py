"""Exception hierarchy for Graffitizer."""


class GraffitizerError(Exception):
    """Base exception for all Graffitizer errors."""

    pass


class GlyphError(GraffitizerError):
    """Errors related to glyph lookup or processing."""

    pass


class GlyphNotFoundError(GlyphError):
    """No glyph outline is available for a character."""

    def __init__(self, letter: str, source: str | None = None) -> None:
        self.letter = letter
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"No glyph found for letter '{letter}'{where}")


class GlyphProcessingError(GlyphError):
    """Error turning glyph markup into a processed glyph."""

    def __init__(self, letter: str, reason: str) -> None:
        self.letter = letter
        self.reason = reason
        super().__init__(f"Error processing glyph '{letter}': {reason}")


class MarkupError(GraffitizerError):
    """Errors related to glyph markup."""

    pass


class MarkupValidationError(MarkupError):
    """Markup is not well-formed or has no SVG root element."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid glyph markup: {reason}")


class MarkupSanitizationError(MarkupError):
    """Markup could not be reduced to the allowed element set."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to sanitize glyph markup: {reason}")


class RuleTableError(GraffitizerError):
    """Invalid overlap or rotation rule data."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class OptionsError(GraffitizerError):
    """Invalid customization option update."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class PresetNotFoundError(GraffitizerError):
    """Requested style preset does not exist."""

    def __init__(self, preset_id: str) -> None:
        self.preset_id = preset_id
        super().__init__(f"Style preset '{preset_id}' not found")


class ExportError(GraffitizerError):
    """Error writing a rendered composition."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write '{path}': {reason}")

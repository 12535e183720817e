"""Error types with formatted source context."""

from __future__ import annotations

from cslc.nodes import Position


class StyleError(Exception):
    """Base class for style compilation errors.

    Errors carry an optional source position and the style text; both are
    used by :meth:`format` to show the offending line.
    """

    def __init__(
        self,
        message: str,
        position: Position | None = None,
        source: str = "",
    ) -> None:
        self.message = message
        self.position = position
        self.source = source
        super().__init__(message)

    def __str__(self) -> str:
        return self.format()

    def format(self, filename: str = "style.csl") -> str:
        if self.position is None:
            return f"error: {self.message}\n  --> {filename}"

        lines = self.source.splitlines(keepends=True)
        line_idx = self.position.line - 1

        # Build the source line (strip trailing newline for display)
        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\n").rstrip("\r")
        else:
            source_line = ""

        if self.position.column is not None:
            col = self.position.column
            underline_len = max(1, min(2, len(source_line) - col + 1))
        else:
            # Element errors know only the line: underline its content
            stripped = source_line.lstrip()
            col = len(source_line) - len(stripped) + 1
            underline_len = max(1, len(stripped.rstrip()))

        pad = " " * (col - 1)
        carets = "^" * underline_len

        line_num = str(self.position.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.position.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )


class StyleInputError(StyleError):
    """The style identifier is neither inline XML nor a readable file."""


class StyleParseError(StyleError):
    """The style text is not well-formed XML."""


class StyleStructureError(StyleError):
    """A fragment lacks required children or uses an element out of place."""


class StyleOptionError(StyleError):
    """An option holds a value outside its accepted domain."""

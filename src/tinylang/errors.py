from dataclasses import dataclass, field
from typing import List, Optional
from pathlib import Path


@dataclass
class SourceLocation:
    """Location in source code"""
    file: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass
class ParseError:
    """A syntax diagnostic recorded by the parser. Never raised."""
    message: str
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        return self.message

    def describe(self) -> str:
        loc = str(self.location) if self.location else "unknown location"
        return f"ParseError at {loc}: {self.message}"


@dataclass
class TinylangError(Exception):
    """Fatal error with source location and context"""
    message: str
    error_type: str = "TinylangError"  # e.g. "NestingError", "InternalError"
    location: Optional[SourceLocation] = None
    context: Optional[str] = None
    notes: List[str] = field(default_factory=list)  # Additional notes/hints
    traceback: Optional[str] = None  # For internal errors, full Python traceback

    def __str__(self) -> str:
        parts = []

        # Error type and location
        loc = str(self.location) if self.location else "unknown location"
        parts.append(f"{self.error_type} at {loc}: {self.message}")

        # Source context if available
        if self.context:
            parts.append("\nContext:")
            parts.append(self.context)

        # Additional notes
        if self.notes:
            parts.append("\nNotes:")
            parts.extend(f"  - {note}" for note in self.notes)

        # Python traceback for internal errors
        if self.traceback:
            parts.append("\nPython traceback:")
            parts.append(self.traceback)

        return "\n".join(parts)

    @classmethod
    def from_exception(cls, e: Exception, location: Optional[SourceLocation] = None) -> 'TinylangError':
        """Create a TinylangError from a Python exception with full traceback"""
        import traceback
        tb = "".join(traceback.format_exception(type(e), e, e.__traceback__))
        return cls(
            message=str(e),
            error_type="InternalError",
            location=location,
            traceback=tb,
            notes=["This may be an interpreter bug - please report it"]
        )


@dataclass
class NestingTooDeepError(TinylangError):
    """Raised by the parser or evaluator when input nests past the configured limit"""
    error_type: str = "NestingError"
    max_depth: int = 0

    @classmethod
    def exceeded(cls, stage: str, max_depth: int,
                 location: Optional[SourceLocation] = None) -> 'NestingTooDeepError':
        context = None
        if location is not None:
            context = get_source_context(location.file, location.line, context_lines=0)
        return cls(
            message=f"too deeply nested: {stage} exceeded maximum depth of {max_depth}",
            location=location,
            context=context,
            max_depth=max_depth,
            notes=["Raise the limit with --max-depth if the input is legitimate"],
        )


def get_source_context(file_path: str, line: int, context_lines: int = 3) -> Optional[str]:
    """Get source code context around a location"""
    path = Path(file_path)
    if not path.exists():
        return None
    try:
        with open(path) as f:
            lines = f.readlines()
    except OSError:
        return None

    start = max(0, line - context_lines - 1)
    end = min(len(lines), line + context_lines)

    context = []
    for i in range(start, end):
        line_num = i + 1
        prefix = '> ' if line_num == line else '  '
        context.append(f"{prefix}{line_num:4d} | {lines[i].rstrip()}")

    return '\n'.join(context)

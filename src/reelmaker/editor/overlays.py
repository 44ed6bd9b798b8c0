"""Subtitle styling and SRT formatting for burned-in captions."""

import re
from dataclasses import dataclass

# Paralinguistic hints such as [excited] or [pause] meant for speech synthesis
_BRACKETED = re.compile(r"\[[^\]]*\]")
_WHITESPACE = re.compile(r"\s+")


@dataclass
class SubtitleStyle:
    """libass style overrides for burned-in subtitles.

    Colours use the ASS ``&HAABBGGRR&`` notation.
    """

    font: str = "DejaVu Sans"
    font_size: int = 14
    primary_colour: str = "&H00FFFFFF&"
    outline: int = 2
    border_style: int = 1
    alignment: int = 2

    def to_force_style(self) -> str:
        """Render as a ``force_style`` value for the subtitles filter."""
        return ",".join([
            f"FontName={self.font}",
            f"FontSize={self.font_size}",
            f"PrimaryColour={self.primary_colour}",
            f"Outline={self.outline}",
            f"BorderStyle={self.border_style}",
            f"Alignment={self.alignment}",
        ])


# Preset styles
STYLES = {
    "default": SubtitleStyle(),
    "large": SubtitleStyle(font_size=18, outline=3),
    # BorderStyle=3 draws an opaque box behind the text
    "boxed": SubtitleStyle(border_style=3, outline=1),
}


def get_style(name: str) -> SubtitleStyle:
    """Get a subtitle style by name.

    Args:
        name: Style name.

    Returns:
        SubtitleStyle configuration.

    Raises:
        ValueError: If style not found.
    """
    if name not in STYLES:
        raise ValueError(f"Unknown style: {name}. Available: {list(STYLES.keys())}")
    return STYLES[name]


def register_style(name: str, style: SubtitleStyle) -> None:
    """Register a custom subtitle style.

    Args:
        name: Name for the style.
        style: SubtitleStyle configuration.
    """
    STYLES[name] = style


def clean_narration(text: str) -> str:
    """Strip bracketed stage directions and normalize whitespace.

    Returns a single space when nothing is left, since SRT cues cannot be
    empty.
    """
    text = _BRACKETED.sub("", text or "")
    text = _WHITESPACE.sub(" ", text).strip()
    return text or " "


def format_timestamp(seconds: float) -> str:
    """Format seconds as an SRT timestamp, ``HH:MM:SS,mmm``."""
    total_ms = max(0, round(seconds * 1000))
    hours, rem = divmod(total_ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, ms = divmod(rem, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{ms:03d}"


def format_srt(narration: str, start: float, end: float) -> str:
    """Build a one-cue SRT document.

    Args:
        narration: Narration text; bracketed hints are removed.
        start: Cue start in seconds.
        end: Cue end in seconds.

    Returns:
        SRT document text.

    Raises:
        ValueError: If end is before start.
    """
    if end < start:
        raise ValueError(f"Cue ends before it starts: {start} > {end}")

    text = clean_narration(narration)
    return f"1\n{format_timestamp(start)} --> {format_timestamp(end)}\n{text}\n"

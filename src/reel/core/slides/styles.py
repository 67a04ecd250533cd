"""Text styling for text slides: font size, color and font family."""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field

MIN_FONT_SIZE = 8
MAX_FONT_SIZE = 72


class FontFamily(str, Enum):
    """Fonts offered by the text slide editor."""
    ARIAL = "Arial"
    VERDANA = "Verdana"
    TIMES_NEW_ROMAN = "Times New Roman"
    COURIER = "Courier"


class TextStyle(BaseModel):
    """Visual style of a text slide.

    Frozen: restyling a slide replaces its style rather than editing it,
    so a style can never be changed from under an exported video.
    """
    model_config = ConfigDict(frozen=True)

    font_size: int = Field(default=24, ge=MIN_FONT_SIZE, le=MAX_FONT_SIZE)
    color: str = Field(default="#FFFFFF", pattern=r"^#[0-9A-Fa-f]{6}$")
    font_family: FontFamily = FontFamily.ARIAL

    def clone(self) -> "TextStyle":
        return TextStyle(
            font_size=self.font_size,
            color=self.color,
            font_family=self.font_family,
        )

"""
RGB color model and the fixed reference colors of the daylight curve.
"""

from pydantic import BaseModel, ConfigDict, Field

from lightsync.lighting_math import clamp_channel, hex_to_rgb, scale_brightness


class RGBColor(BaseModel):
    """Color with 8-bit channels."""
    model_config = ConfigDict(frozen=True)

    r: int = Field(..., ge=0, le=255, description="Red component (0-255)")
    g: int = Field(..., ge=0, le=255, description="Green component (0-255)")
    b: int = Field(..., ge=0, le=255, description="Blue component (0-255)")

    @classmethod
    def from_channels(cls, r: float, g: float, b: float) -> "RGBColor":
        """Build a color, clamping each channel into 0-255."""
        return cls(r=clamp_channel(r), g=clamp_channel(g), b=clamp_channel(b))

    @classmethod
    def from_hex(cls, value: str) -> "RGBColor":
        """Parse "#RRGGBB" (leading '#' optional)."""
        return cls.from_channels(*hex_to_rgb(value))

    def scaled(self, brightness: int) -> "RGBColor":
        """Return this color scaled by brightness (0-255)."""
        return RGBColor(
            r=scale_brightness(self.r, brightness),
            g=scale_brightness(self.g, brightness),
            b=scale_brightness(self.b, brightness),
        )

    def as_tuple(self) -> tuple[int, int, int]:
        return self.r, self.g, self.b


NIGHT_COLOR = RGBColor(r=20, g=20, b=60)
SUNRISE_COLOR = RGBColor(r=255, g=150, b=50)
NOON_COLOR = RGBColor(r=255, g=255, b=255)
SUNSET_COLOR = RGBColor(r=255, g=100, b=100)

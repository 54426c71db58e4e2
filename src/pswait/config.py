"""Runtime configuration for pswait."""

from typing import Literal

from pydantic import BaseModel, Field

ONE_DAY = 60 * 60 * 24


class WatchConfig(BaseModel):
    """Settings for one watch run."""

    interval: int = Field(default=10, gt=0)
    max_duration: int = Field(default=ONE_DAY, gt=0)
    verbose: bool = True
    source: Literal["ps", "psutil"] = "ps"
    sound: bool = True
    desktop: bool = True
    message: str = "Done!"

    @property
    def max_ticks(self) -> int:
        """Number of polls that fit in max_duration."""
        return max(1, self.max_duration // self.interval)

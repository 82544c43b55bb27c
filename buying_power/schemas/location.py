# This project was developed with assistance from AI tools.
"""Location identity used to scope cached rate data."""

from pydantic import BaseModel, ConfigDict


def _norm(value: str | None) -> str:
    return (value or "").strip().casefold()


class LocationKey(BaseModel):
    """State + county identity. The zip code is advisory and never compared."""

    model_config = ConfigDict(frozen=True)

    state: str | None = None
    county: str | None = None
    zip_code: str | None = None

    @property
    def is_complete(self) -> bool:
        """True when both state and county are present."""
        return bool(_norm(self.state) and _norm(self.county))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocationKey):
            return NotImplemented
        return (_norm(self.state), _norm(self.county)) == (_norm(other.state), _norm(other.county))

    def __hash__(self) -> int:
        return hash((_norm(self.state), _norm(self.county)))

    def __str__(self) -> str:
        return f"{self.county}, {self.state}"

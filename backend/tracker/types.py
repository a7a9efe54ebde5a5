from typing import Self

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, model_validator

NAME_MAX_LENGTH = 50


class CreateGameRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)


class AddPlayersRequest(BaseModel):
    """Players to seat, given as new or existing names and/or profile ids."""

    model_config = ConfigDict(extra="forbid")

    names: list[str] = Field(default_factory=list, max_length=20)
    profile_ids: list[str] = Field(default_factory=list, max_length=20)

    @model_validator(mode="after")
    def _validate_players(self) -> Self:
        if not self.names and not self.profile_ids:
            raise ValueError("Provide at least one name or profile id")
        for name in self.names:
            if not name.strip() or len(name) > NAME_MAX_LENGTH:
                raise ValueError(f"Player names must be 1-{NAME_MAX_LENGTH} characters")
        return self


class RecordScoreRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # keypad text ("-40") or a JSON integer; parsed by ledger.ledger.parse_points
    points: StrictInt | StrictStr
    played: StrictBool = False


class CreateProfileRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)

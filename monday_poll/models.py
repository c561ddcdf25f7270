from typing import Generic, TypeVar

from pydantic import BaseModel, Field

CountT = TypeVar("CountT")


class Question(BaseModel, Generic[CountT]):
    """Yes/no tallies for one trailing window."""

    yes: CountT = Field(..., description="Votes answering yes")
    no: CountT = Field(..., description="Votes answering no")

    def set_answer(self, yes: bool, answer: CountT) -> None:
        if yes:
            self.yes = answer
        else:
            self.no = answer


class Summary(BaseModel, Generic[CountT]):
    """Tallies for the five trailing windows, measured back from one instant.

    The windows are nested, so every count is at least as large as the one
    in the next smaller window.
    """

    last_24_hours: Question[CountT]
    last_12_hours: Question[CountT]
    last_6_hours: Question[CountT]
    last_3_hours: Question[CountT]
    last_hour: Question[CountT]

    def questions(self) -> list[Question[CountT]]:
        """Questions ordered from the widest window to the narrowest."""
        return [
            self.last_24_hours,
            self.last_12_hours,
            self.last_6_hours,
            self.last_3_hours,
            self.last_hour,
        ]


class HealthResponse(BaseModel):
    status: str = "ok"
    submissions: int = Field(..., description="Submissions currently stored")

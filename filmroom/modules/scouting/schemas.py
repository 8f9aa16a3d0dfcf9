from pydantic import BaseModel


class OpponentSummary(BaseModel):
    name: str
    games: int = 0
    scouting_games: int = 0

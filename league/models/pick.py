from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from league.models.match import Decision, Side


class PickOutcome(str, Enum):
    """Resultado pronosticado, siempre desde el punto de vista del local"""
    WIN = "WIN"
    DRAW = "DRAW"
    LOSS = "LOSS"


class Pick(BaseModel):
    """Pronóstico de un usuario para un partido (forma canónica)"""

    id: str  # pick-{user_id}-{match_id}

    match_id: str
    user_id: str

    home_score: Optional[int] = None
    away_score: Optional[int] = None
    outcome: Optional[PickOutcome] = None

    advances: Optional[Side] = None  # quién pasa si el pick es un empate en eliminatorias
    winner: Optional[Side] = None    # campo legacy, solo rellena huecos de `advances`
    decided_by: Optional[Decision] = None

    created_at: datetime
    updated_at: datetime

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PickInput(BaseModel):
    """Datos que envía el usuario al crear o editar un pick"""

    match_id: str
    user_id: str

    home_score: Optional[int] = None
    away_score: Optional[int] = None
    advances: Optional[Side] = None
    decided_by: Optional[Decision] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UserPicksDoc(BaseModel):
    """Documento de almacenamiento con todos los picks de un usuario"""

    user_id: str
    updated_at: datetime
    picks: list[Pick] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True

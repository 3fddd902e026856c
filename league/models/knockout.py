from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class FixtureState(BaseModel):
    """Estado del calendario inferido a partir de los partidos"""

    group_complete: bool
    draw_ready: bool
    knockout_started: bool

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class KnockoutActivationState(BaseModel):
    """Decisión sobre si el cuadro de eliminatorias se considera activo"""

    active: bool
    inferred_active: bool
    forced_by_override: bool
    mismatch_warning: Optional[str] = None
    source_label: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True

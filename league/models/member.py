from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class Member(BaseModel):
    """Miembro de la liga con sus alias de identidad"""

    id: str
    name: str
    handle: Optional[str] = None

    # Alias alternativos de la misma persona
    email: Optional[str] = None
    uid: Optional[str] = None  # uid del proveedor de auth externo

    is_admin: bool = False

    class Config:
        alias_generator = to_camel
        populate_by_name = True

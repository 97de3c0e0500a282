"""
botengine/pricing/personas.py — The sales/design specialist personas.

Each persona biases pricing through a fixed multiplier and is shown to the
end user by display name and expertise line.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional


@dataclass(frozen=True)
class Persona:
    key: str
    display_name: str
    expertise: str
    multiplier: float


DEFAULT_DISPLAY_NAME = "Design Specialist"
DEFAULT_EXPERTISE = "Interior design expert"

PERSONAS = MappingProxyType({
    "kavya": Persona(
        key="kavya",
        display_name="Kavya - Premium Specialist",
        expertise="Luxury residential interiors with premium materials",
        multiplier=1.4,
    ),
    "arjun": Persona(
        key="arjun",
        display_name="Arjun - Design Expert",
        expertise="Functional design with quality materials and smart budgets",
        multiplier=1.0,
    ),
    "priya": Persona(
        key="priya",
        display_name="Priya - Budget Specialist",
        expertise="Cost-effective beautiful homes with practical solutions",
        multiplier=0.7,
    ),
    "rohan": Persona(
        key="rohan",
        display_name="Rohan - Commercial Expert",
        expertise="Commercial spaces for enhanced business success",
        multiplier=1.2,
    ),
})


def get_persona(persona_id) -> Optional[Persona]:
    """Case-insensitive persona lookup. Returns None for unknown or non-string ids."""
    if not isinstance(persona_id, str):
        return None
    return PERSONAS.get(persona_id.strip().lower())


def is_valid_persona(persona_id) -> bool:
    return get_persona(persona_id) is not None


def display_name(persona_id) -> str:
    persona = get_persona(persona_id)
    return persona.display_name if persona else DEFAULT_DISPLAY_NAME


def expertise(persona_id) -> str:
    persona = get_persona(persona_id)
    return persona.expertise if persona else DEFAULT_EXPERTISE

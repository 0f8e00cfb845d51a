from typing import Dict, List

from .persona import Persona

DEFAULT_PERSONAS: Dict[str, Persona] = {
    "early_adopter": Persona(
        id="early_adopter",
        name="Alice",
        role="flagship smartphone user",
        traits="early adopter, tech-savvy, shares reviews online",
        bio="31-year-old product designer who queues for launches and spends "
            "weekends testing gadgets in flagship stores.",
    ),
    "pragmatist": Persona(
        id="pragmatist",
        name="Bob",
        role="mid-range tablet user",
        traits="price-sensitive, practical, compares before buying",
        bio="45-year-old accountant and father of two who visits stores only "
            "after researching prices online.",
    ),
    "social_shopper": Persona(
        id="social_shopper",
        name="Carol",
        role="wearable and earbuds user",
        traits="trend-driven, social, values in-store experiences",
        bio="24-year-old graduate student who treats shopping as a social "
            "outing and posts store visits on social media.",
    ),
    "senior_newcomer": Persona(
        id="senior_newcomer",
        name="David",
        role="first-time smartphone switcher",
        traits="cautious, needs guidance, loyal once satisfied",
        bio="67-year-old retired teacher moving from a feature phone who "
            "relies on staff explanations.",
    ),
    "business_user": Persona(
        id="business_user",
        name="Erin",
        role="laptop and productivity suite user",
        traits="time-poor, efficiency-focused, brand-loyal",
        bio="38-year-old sales director who buys during short breaks between "
            "meetings and expects fast checkout.",
    ),
}

DEFAULT_PANELS: Dict[str, List[str]] = {
    "mixed": ["early_adopter", "pragmatist", "social_shopper"],
    "mainstream": ["pragmatist", "senior_newcomer", "business_user"],
    "full": list(DEFAULT_PERSONAS.keys()),
}


def get_default_panel(name: str = "mixed") -> List[Persona]:
    """Get default personas for a named panel."""
    ids = DEFAULT_PANELS.get(name, DEFAULT_PANELS["mixed"])
    return [DEFAULT_PERSONAS[persona_id] for persona_id in ids]


def get_available_panels() -> List[str]:
    return list(DEFAULT_PANELS.keys())

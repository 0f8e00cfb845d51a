from pydantic import BaseModel, ConfigDict, Field


class Persona(BaseModel):
    """A synthetic consumer profile taking part in a focus group."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    role: str = Field("", description="Device or segment label")
    traits: str = Field("", description="Free-form trait tags")
    # Older records call this field "description"
    bio: str = Field("", alias="description", description="Long-form background")

    def card(self) -> str:
        """One-paragraph persona card used in system prompts."""
        header = self.name
        details = ", ".join(part for part in (self.role, self.traits) if part)
        if details:
            header = f"{header} ({details})"
        if self.bio:
            return f"{header}. Background: {self.bio}"
        return header

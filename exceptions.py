"""
Error taxonomy for the volunteer network engine.

Below-threshold matches are a filtering outcome, not an error, and have no
exception here.
"""


class VolunteerNetworkError(Exception):
    """Base class for engine errors."""


class NotFoundError(VolunteerNetworkError):
    """Unknown volunteer, mission, resource, loan or training program id."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} not found: {entity_id}")


class InvalidStateError(VolunteerNetworkError):
    """Operation not allowed in the entity's current state."""

# salesops/domain/errors.py
from __future__ import annotations


class LeadNotFound(LookupError):
    def __init__(self, lead_id: int) -> None:
        super().__init__(f"Lead {lead_id} not found")
        self.lead_id = lead_id


class InvalidTransition(ValueError):
    """Raised when a lead status change is not in the transition table."""


class LossReasonRequired(InvalidTransition):
    pass


class ProhibitedTermFound(ValueError):
    def __init__(self, term: str) -> None:
        super().__init__(f'Prohibited term detected: "{term}". Adjust the text.')
        self.term = term

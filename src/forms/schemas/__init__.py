"""Filing schemas, one per filing type."""

# Import all schema modules to register them
from forms.schemas import changes, dependents, insurance, rewards

__all__ = ["changes", "dependents", "insurance", "rewards"]

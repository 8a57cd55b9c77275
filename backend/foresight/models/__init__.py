# Import all models so Base.metadata is populated.
from foresight.models.transaction import Transaction  # noqa: F401
from foresight.models.goal import Goal  # noqa: F401

"""
Scrumkit – SQLAlchemy ORM models package.

Imports all model classes so the app can discover them through a single
``import scrumkit.models`` before ``create_all``.
"""

from scrumkit.models.session import RetroSession, SessionPhase       # noqa: F401
from scrumkit.models.item import Item, ItemCategory                  # noqa: F401
from scrumkit.models.vote import Vote                                # noqa: F401
from scrumkit.models.action_item import ActionItem, ActionPriority, ActionStatus  # noqa: F401
from scrumkit.models.report import Report                            # noqa: F401

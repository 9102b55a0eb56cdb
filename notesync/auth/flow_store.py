"""
Ephemeral storage for the in-flight authorization flow.

Flow state lives only as long as the process. A restart abandons any
pending authorization, which bounds how long a leaked state/verifier pair
stays usable. Durable credentials live in credential_store instead.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from .models import FlowState

logger = logging.getLogger(__name__)


class FlowStore(ABC):
    """Abstract base class for authorization flow storage."""

    @abstractmethod
    async def store(self, flow: FlowState) -> None:
        """Store the flow state, replacing any previous one."""
        pass

    @abstractmethod
    async def load(self) -> Optional[FlowState]:
        """Return the current flow state, if any."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove the flow state. Safe to call when nothing is stored."""
        pass


class InMemoryFlowStore(FlowStore):
    """Process-scoped flow store holding a single slot."""

    def __init__(self):
        self._flow: Optional[FlowState] = None

    async def store(self, flow: FlowState) -> None:
        if self._flow is not None:
            logger.debug("Replacing stale authorization flow")
        self._flow = flow

    async def load(self) -> Optional[FlowState]:
        return self._flow

    async def clear(self) -> None:
        self._flow = None

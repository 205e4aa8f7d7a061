"""
Clock and id source injected into the operations layer.

Operations never read the wall clock or generate ids on their own; they ask
the Clock they were constructed with, so tests can pin both.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Clock(ABC):
    """Source of timestamps and unique record ids"""
    
    @abstractmethod
    def now(self) -> datetime:
        """Current timestamp"""
        pass
    
    @abstractmethod
    def new_id(self) -> str:
        """Unique opaque identifier"""
        pass


class SystemClock(Clock):
    """Timezone-aware UTC wall clock with uuid4 ids"""
    
    def now(self) -> datetime:
        return datetime.now(timezone.utc)
    
    def new_id(self) -> str:
        return uuid.uuid4().hex

"""
Daily logging streak.

The streak counts consecutive calendar days on which at least one
transaction dated that same day was logged.

Rules:
- Logging a transaction dated today advances the streak once per day.
  Yesterday's log continues it; anything else restarts it at 1.
- At boot, an unlogged gap of more than one day zeroes the current count.
  `last_log_date` is kept so history is not erased.
- `longest_count` never decreases.
- Deleting a transaction never touches the streak.
"""

from datetime import date, datetime
from typing import Union

from pocketledger.log import get_logger
from pocketledger.models.ledger import UserStreak


logger = get_logger(__name__)


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


class StreakTracker:
    """Owns a `UserStreak` and applies the day-by-day rules to it."""
    
    def __init__(self, state: UserStreak):
        self._state = state
    
    @property
    def state(self) -> UserStreak:
        return self._state
    
    def integrity_check(self, today: date) -> bool:
        """
        Zero the current count if the last log is more than a day old.
        
        Returns:
            True if the state changed and should be persisted
        """
        last = self._state.last_log_date
        if last is None or last == today:
            return False
        if (today - last).days > 1 and self._state.current_count != 0:
            logger.info(
                "streak_reset",
                last_log_date=last.isoformat(),
                previous_count=self._state.current_count,
            )
            self._state = self._state.model_copy(update={"current_count": 0})
            return True
        return False
    
    def is_reward_due(self, tx_date: Union[date, datetime], today: date) -> bool:
        """True when this would be the first transaction logged for today."""
        return _as_date(tx_date) == today and self._state.last_log_date != today
    
    def record(self, tx_date: Union[date, datetime], today: date) -> bool:
        """
        Count a logged transaction towards the streak.
        
        Only transactions dated today count, and only the first per day.
        
        Returns:
            True if the state changed and should be persisted
        """
        if _as_date(tx_date) != today:
            return False
        
        last = self._state.last_log_date
        if last == today:
            return False
        
        if last is not None and (today - last).days == 1:
            count = self._state.current_count + 1
        else:
            count = 1
        
        self._state = UserStreak(
            current_count=count,
            longest_count=max(count, self._state.longest_count),
            last_log_date=today,
        )
        return True

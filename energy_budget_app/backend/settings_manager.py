# backend/settings_manager.py
import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from backend.database import get_session, AppSetting, DEFAULT_SETTINGS
from backend.security_utils import validate_daily_budget, validate_reset_time
from backend.task_manager import PersistenceError

logger = logging.getLogger(__name__)

DAILY_BUDGET_KEY = 'DailyBudget'
RESET_TIME_KEY = 'ResetTime'


@dataclass(frozen=True)
class EnergySettings:
    daily_budget: int
    reset_time: str


class SettingsManager:
    """
    Typed access to the two energy settings. Values are validated on write only;
    a corrupted stored value surfaces as ValueError on read.
    """

    def __init__(self, session_factory=None):
        self.db_session = session_factory or get_session

    def _get_value(self, key: str) -> str:
        with self.db_session() as session:
            try:
                row = session.query(AppSetting).filter(AppSetting.key == key).first()
            except SQLAlchemyError as e:
                logger.error("Database error reading setting %s: %s", key, e)
                raise PersistenceError(f"Database error reading setting {key}") from e
            return row.value if row else DEFAULT_SETTINGS[key]

    def get_daily_budget(self) -> int:
        return int(self._get_value(DAILY_BUDGET_KEY))

    def get_reset_time(self) -> str:
        return self._get_value(RESET_TIME_KEY)

    def get_settings(self) -> EnergySettings:
        return EnergySettings(
            daily_budget=self.get_daily_budget(),
            reset_time=self.get_reset_time()
        )

    def update_settings(self, daily_budget, reset_time) -> EnergySettings:
        """
        Validate both values, then upsert both keys in one transaction.

        Raises:
            ValidationError: either value is invalid (nothing is written)
            PersistenceError: the write failed
        """
        settings = EnergySettings(
            daily_budget=validate_daily_budget(daily_budget),
            reset_time=validate_reset_time(reset_time)
        )
        values = {
            DAILY_BUDGET_KEY: str(settings.daily_budget),
            RESET_TIME_KEY: settings.reset_time,
        }

        with self.db_session() as session:
            try:
                for key, value in values.items():
                    row = session.query(AppSetting).filter(AppSetting.key == key).first()
                    if row is None:
                        row = AppSetting(key=key)
                        session.add(row)
                    row.value = value
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error("Database error in update_settings: %s", e)
                raise PersistenceError("Database error in update_settings") from e

        logger.info("Settings updated: budget=%s reset=%s", settings.daily_budget, settings.reset_time)
        return settings

    def get_all(self) -> dict:
        """Every stored setting row, keyed by name (export helper)."""
        with self.db_session() as session:
            try:
                rows = session.query(AppSetting).order_by(AppSetting.key).all()
            except SQLAlchemyError as e:
                logger.error("Database error listing settings: %s", e)
                raise PersistenceError("Database error listing settings") from e
            return {row.key: row.value for row in rows}

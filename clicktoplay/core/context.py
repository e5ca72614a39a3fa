"""Component context management for clicktoplay."""

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from clicktoplay.core.config import Environment, Settings
from clicktoplay.core.logging import setup_logging
from clicktoplay.scenario import ScenarioManager
from clicktoplay.session import ClickToPlaySession

logger = logging.getLogger(__name__)


class Context(BaseModel):
    """Holds settings and the scenario manager for a CLI run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    settings: Optional[Settings] = None
    scenario_manager: Optional[ScenarioManager] = None
    _initialized: bool = False

    def initialize(
        self,
        config_file: Optional[Path] = None,
        env: Optional[Environment] = None,
        **overrides
    ) -> None:
        """Initialize all components in the correct order.

        Args:
            config_file: Optional path to configuration file
            env: Optional environment override
            **overrides: Settings overrides
        """
        if self._initialized:
            logger.warning("Context already initialized")
            return

        try:
            # 1. Load settings first
            self.settings = Settings(config_file=config_file, env=env, **overrides)

            # 2. Setup logging
            setup_logging(
                settings=self.settings,
                context={"component": "context"}
            )
            logger.info("Initializing clicktoplay context")

            # 3. Discover scenarios
            self.scenario_manager = ScenarioManager(
                scenario_dirs=self.settings.scenarios.scenario_dirs,
                include_builtin=self.settings.scenarios.include_builtin
            )
            logger.debug(f"Scenario manager initialized with {len(self.scenario_manager.scenarios)} scenarios")

            self._initialized = True
            logger.info("Context initialization complete")

        except Exception as e:
            logger.exception("Failed to initialize context")
            self.cleanup()
            raise RuntimeError(f"Context initialization failed: {e}") from e

    def new_session(self, click_to_play: Optional[bool] = None) -> ClickToPlaySession:
        """Create a session configured from settings.

        Args:
            click_to_play: Override the configured click-to-play flag
        """
        session = ClickToPlaySession.from_settings(self.settings)
        if click_to_play is not None:
            session.set_click_to_play(click_to_play)
        return session

    def cleanup(self) -> None:
        """Release components."""
        self.scenario_manager = None
        self._initialized = False
        logger.debug("Context cleanup complete")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

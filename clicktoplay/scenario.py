"""Scripted click-to-play scenarios.

A scenario is an ordered list of steps run against a `PluginHost`. Action
steps drive the host; ``expect_*`` steps poll the host until the expected
state shows up or the wait times out.
"""

import datetime
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from clicktoplay.core.errors import ScenarioAssertionError, ScenarioConfigError
from clicktoplay.core.logging import time_operation
from clicktoplay.core.navigation import NavigationKind
from clicktoplay.core.permissions import Permission
from clicktoplay.core.wait import WaitSettings, async_wait_for_condition
from clicktoplay.session import PluginHost

logger = logging.getLogger(__name__)

SCENARIO_SUFFIXES = (".yaml", ".yml", ".json")


class ScenarioAction(str, Enum):
    """Action performed by a scenario step."""
    NEW_PAGE = "new_page"
    ADD_OBJECT = "add_object"
    NAVIGATE = "navigate"
    CLICK_ACTIVATE = "click_activate"
    SET_CLICK_TO_PLAY = "set_click_to_play"
    SET_PERMISSION = "set_permission"
    EXPECT_ACTIVATED = "expect_activated"
    EXPECT_NOTIFICATION = "expect_notification"
    EXPECT_OBJECT_COUNT = "expect_object_count"


class StepStatus(str, Enum):
    """Status of a scenario step."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ScenarioStatus(str, Enum):
    """Status of a scenario."""
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"


_REQUIRED_FIELDS = {
    ScenarioAction.NEW_PAGE: ("url",),
    ScenarioAction.ADD_OBJECT: ("origin",),
    ScenarioAction.NAVIGATE: ("kind", "url"),
    ScenarioAction.CLICK_ACTIVATE: ("origin",),
    ScenarioAction.SET_CLICK_TO_PLAY: ("enabled",),
    ScenarioAction.SET_PERMISSION: ("origin", "permission"),
    ScenarioAction.EXPECT_ACTIVATED: ("index",),
    ScenarioAction.EXPECT_NOTIFICATION: (),
    ScenarioAction.EXPECT_OBJECT_COUNT: ("count",),
}


class ScenarioStep(BaseModel):
    """A single step in a scenario."""
    action: ScenarioAction
    url: Optional[str] = None
    origin: Optional[str] = None
    kind: Optional[NavigationKind] = None
    index: Optional[int] = None
    count: Optional[int] = None
    permission: Optional[Permission] = None
    expected: Optional[bool] = None
    enabled: Optional[bool] = None
    remember: bool = False
    description: Optional[str] = None
    status: StepStatus = StepStatus.PENDING
    result: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None
    start_time: Optional[datetime.datetime] = None
    end_time: Optional[datetime.datetime] = None

    @field_validator("permission", mode="before")
    @classmethod
    def parse_permission(cls, value: Any) -> Optional[Permission]:
        if value is None:
            return None
        return Permission.parse(value)

    @field_validator("kind", mode="before")
    @classmethod
    def parse_kind(cls, value: Any) -> Optional[NavigationKind]:
        if value is None:
            return None
        return NavigationKind.parse(value)

    @model_validator(mode="after")
    def check_required_fields(self) -> "ScenarioStep":
        missing = [
            name for name in _REQUIRED_FIELDS[self.action]
            if getattr(self, name) is None
        ]
        if missing:
            raise ValueError(
                f"Step '{self.action.value}' requires: {', '.join(missing)}"
            )
        return self

    @property
    def label(self) -> str:
        """Human readable description of the step."""
        if self.description:
            return self.description

        if self.action == ScenarioAction.EXPECT_ACTIVATED:
            state = "activated" if self.expected is not False else "blocked"
            return f"Object {self.index} should be {state}"
        if self.action == ScenarioAction.EXPECT_NOTIFICATION:
            state = "visible" if self.expected is not False else "hidden"
            return f"Notification should be {state}"
        if self.action == ScenarioAction.EXPECT_OBJECT_COUNT:
            return f"Page should have {self.count} objects"
        if self.action == ScenarioAction.NAVIGATE:
            return f"Navigate ({self.kind.value}) to {self.url}"
        if self.action == ScenarioAction.SET_CLICK_TO_PLAY:
            return f"Click-to-play {'enabled' if self.enabled else 'disabled'}"

        target = self.url or self.origin or ""
        return f"{self.action.value} {target}".strip()

    def reset(self) -> None:
        self.status = StepStatus.PENDING
        self.result = None
        self.error = None
        self.start_time = None
        self.end_time = None

    async def execute(self, host: PluginHost, wait_settings: WaitSettings) -> Dict[str, Any]:
        """Run the step against a host.

        Args:
            host: Host to drive
            wait_settings: Poll settings for expectations

        Returns:
            Dictionary with step results

        Raises:
            ConditionTimeoutError: If an expectation is not met in time
            ScenarioAssertionError: If a click was expected to activate objects and did not
        """
        if self.action == ScenarioAction.NEW_PAGE:
            host.new_page(self.url)
            return {"url": self.url}

        if self.action == ScenarioAction.ADD_OBJECT:
            return {"index": host.add_object(self.origin)}

        if self.action == ScenarioAction.NAVIGATE:
            host.navigate(self.kind, self.url)
            return {"kind": self.kind.value, "url": self.url}

        if self.action == ScenarioAction.CLICK_ACTIVATE:
            result = host.click_activate(self.origin, remember=self.remember)
            if self.expected and not result.activated:
                raise ScenarioAssertionError(
                    f"{self.label}: nothing was activated",
                    {"result": result.model_dump()}
                )
            return result.model_dump()

        if self.action == ScenarioAction.SET_CLICK_TO_PLAY:
            host.set_click_to_play(self.enabled)
            return {"click_to_play": self.enabled}

        if self.action == ScenarioAction.SET_PERMISSION:
            host.set_permission(self.origin, self.permission)
            return {"origin": self.origin, "permission": self.permission.value}

        expected = self.expected is not False

        if self.action == ScenarioAction.EXPECT_ACTIVATED:
            await async_wait_for_condition(
                lambda: host.is_activated(self.index) == expected,
                f"{self.label}: waited too long",
                wait_settings
            )
            return {"index": self.index, "activated": expected}

        if self.action == ScenarioAction.EXPECT_NOTIFICATION:
            await async_wait_for_condition(
                lambda: host.notification_visible() == expected,
                f"{self.label}: waited too long",
                wait_settings
            )
            return {"notification_visible": expected}

        await async_wait_for_condition(
            lambda: host.object_count() == self.count,
            f"{self.label}: waited too long",
            wait_settings
        )
        return {"count": self.count}


class Scenario(BaseModel):
    """A named sequence of steps."""
    name: str
    description: str = ""
    steps: List[ScenarioStep] = []
    status: ScenarioStatus = ScenarioStatus.PENDING
    current_step: int = 0
    source: Optional[Path] = None
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.now)
    started_at: Optional[datetime.datetime] = None
    finished_at: Optional[datetime.datetime] = None

    def add_step(self, action: Union[str, ScenarioAction], **fields: Any) -> ScenarioStep:
        """Append a step.

        Args:
            action: Step action
            **fields: Step fields such as url, origin, index, expected

        Returns:
            The new step

        Raises:
            ScenarioConfigError: If the step is invalid
        """
        try:
            step = ScenarioStep(action=action, **fields)
        except ValidationError as e:
            raise ScenarioConfigError(
                f"Invalid step for scenario {self.name}: {e}",
                {"action": str(action), "fields": fields}
            )
        self.steps.append(step)
        return step

    def reset(self) -> None:
        """Return the scenario and all steps to pending."""
        self.status = ScenarioStatus.PENDING
        self.current_step = 0
        self.started_at = None
        self.finished_at = None
        for step in self.steps:
            step.reset()

    async def run(
        self,
        host: PluginHost,
        wait_settings: Optional[WaitSettings] = None
    ) -> List[Dict[str, Any]]:
        """Run all steps in order.

        The first failing step marks the scenario failed and its error is
        re-raised.

        Args:
            host: Host to drive
            wait_settings: Poll settings for expectations

        Returns:
            List of step results
        """
        wait_settings = wait_settings or WaitSettings()
        self.reset()
        self.status = ScenarioStatus.RUNNING
        self.started_at = datetime.datetime.now()
        logger.info(f"Running scenario {self.name} ({len(self.steps)} steps)")

        results = []
        try:
            while self.current_step < len(self.steps):
                step = self.steps[self.current_step]
                step.status = StepStatus.RUNNING
                step.start_time = datetime.datetime.now()

                try:
                    with time_operation(logger, f"Step {self.current_step + 1} ({step.label})"):
                        step.result = await step.execute(host, wait_settings)
                    step.status = StepStatus.COMPLETED
                    results.append(step.result)
                except Exception as e:
                    step.status = StepStatus.FAILED
                    step.error = (
                        e.to_dict() if hasattr(e, "to_dict")
                        else {"code": type(e).__name__, "message": str(e)}
                    )
                    raise
                finally:
                    step.end_time = datetime.datetime.now()

                self.current_step += 1

            self.status = ScenarioStatus.PASSED
            logger.info(f"Scenario {self.name} passed")
            return results

        except Exception:
            self.status = ScenarioStatus.FAILED
            raise
        finally:
            self.finished_at = datetime.datetime.now()

    def report(self) -> Dict[str, Any]:
        """Summary of the last run."""
        duration = None
        if self.started_at and self.finished_at:
            duration = (self.finished_at - self.started_at).total_seconds()
        return {
            "name": self.name,
            "status": self.status.value,
            "duration": duration,
            "steps": [
                {
                    "label": step.label,
                    "status": step.status.value,
                    "result": step.result,
                    "error": step.error
                }
                for step in self.steps
            ]
        }

    def save_report(self, path: Path) -> None:
        """Write the run report as JSON."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.report(), f, indent=2, default=str)
        logger.info(f"Report for {self.name} saved to {path}")

    def to_dict(self) -> Dict[str, Any]:
        """Scenario definition without run state."""
        return {
            "name": self.name,
            "description": self.description,
            "steps": [
                step.model_dump(
                    mode="json",
                    exclude_none=True,
                    exclude={"status", "result", "error", "start_time", "end_time"},
                    exclude_defaults=True
                )
                for step in self.steps
            ]
        }

    def save(self, path: Path) -> None:
        """Save the scenario definition as YAML or JSON."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            if path.suffix.lower() == ".json":
                json.dump(self.to_dict(), f, indent=2)
            else:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[Path] = None) -> "Scenario":
        """Create a scenario from its definition.

        Raises:
            ScenarioConfigError: If the definition is invalid
        """
        if not isinstance(data, dict) or "name" not in data:
            raise ScenarioConfigError(
                "Scenario definition must be a mapping with a name",
                {"source": str(source) if source else None}
            )
        try:
            return cls(
                name=data["name"],
                description=data.get("description", ""),
                steps=[ScenarioStep(**step) for step in data.get("steps") or []],
                source=source
            )
        except (TypeError, ValidationError) as e:
            raise ScenarioConfigError(
                f"Invalid scenario {data['name']}: {e}",
                {"source": str(source) if source else None}
            )

    @classmethod
    def from_file(cls, path: Path) -> "Scenario":
        """Load a scenario from a YAML or JSON file.

        Raises:
            ScenarioConfigError: If the file cannot be parsed
        """
        if path.suffix.lower() not in SCENARIO_SUFFIXES:
            raise ScenarioConfigError(
                f"Unsupported scenario file format: {path.suffix}",
                {"source": str(path)}
            )
        try:
            with open(path, "r") as f:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ScenarioConfigError(
                f"Failed to read scenario file {path}: {e}",
                {"source": str(path)}
            )
        return cls.from_dict(data, source=path)


def navigation_persistence_scenario(
    origin: str = "http://mochi.test:8888",
    url: str = "http://mochi.test:8888/plugin_add_dynamically.html"
) -> Scenario:
    """Activation must survive hash changes and history.replaceState.

    Steps: a blocked object prompts; the activate click allows the origin;
    later objects start active after a fragment navigation and after
    replaceState; a full load drops everything and prompts again.
    """
    scenario = Scenario(
        name="navigation_persistence",
        description="In-page navigation keeps click-to-play activation, a full load resets it"
    )
    add = scenario.add_step

    add("set_click_to_play", enabled=True)
    add("new_page", url=url)
    add("expect_notification", expected=False,
        description="Should not have a click-to-play notification")

    add("add_object", origin=origin)
    add("expect_notification", expected=True,
        description="Should have a click-to-play notification")
    add("expect_activated", index=0, expected=False,
        description="Plugin should not be activated")

    add("click_activate", origin=origin, expected=True)
    add("expect_activated", index=0, expected=True,
        description="Plugin should be activated after clicking activate")

    add("add_object", origin=origin)
    add("expect_activated", index=1, expected=True)

    add("navigate", kind="hash", url="#anchorNavigation")
    add("add_object", origin=origin)
    add("expect_activated", index=2, expected=True,
        description="Plugin should stay activated after hash change")

    add("navigate", kind="replace", url="replacedState")
    add("add_object", origin=origin)
    add("expect_activated", index=3, expected=True,
        description="Plugin should stay activated after history.replaceState")
    add("expect_object_count", count=4)

    add("navigate", kind="full", url=url)
    add("expect_object_count", count=0)
    add("expect_notification", expected=False)
    add("add_object", origin=origin)
    add("expect_activated", index=0, expected=False,
        description="Full load should require a fresh activation")
    add("expect_notification", expected=True)
    return scenario


BUILTIN_SCENARIOS = {
    "navigation_persistence": navigation_persistence_scenario,
}


class ScenarioManager:
    """Finds and keeps scenarios by name."""

    def __init__(self, scenario_dirs: Optional[List[Path]] = None, include_builtin: bool = True):
        """Initialize scenario manager.

        Args:
            scenario_dirs: Directories to search for scenario files
            include_builtin: Register the built-in scenarios
        """
        self.scenario_dirs = [Path(d) for d in (scenario_dirs or [])]
        self.scenarios: Dict[str, Scenario] = {}
        self.load_errors: Dict[str, str] = {}

        if include_builtin:
            for name, factory in BUILTIN_SCENARIOS.items():
                self.scenarios[name] = factory()

        self.discover()

    def discover(self) -> List[str]:
        """Load scenario files from the configured directories.

        Files that fail to load are skipped and recorded in load_errors.

        Returns:
            Names of the scenarios loaded from files
        """
        loaded = []
        for directory in self.scenario_dirs:
            if not directory.is_dir():
                logger.debug(f"Scenario directory {directory} does not exist")
                continue

            for path in sorted(directory.iterdir()):
                if path.suffix.lower() not in SCENARIO_SUFFIXES:
                    continue
                try:
                    scenario = Scenario.from_file(path)
                except ScenarioConfigError as e:
                    logger.error(f"Failed to load scenario {path.name}: {e}")
                    self.load_errors[str(path)] = str(e)
                    continue

                if scenario.name in self.scenarios:
                    logger.warning(f"Scenario {scenario.name} from {path} overrides an earlier one")
                self.scenarios[scenario.name] = scenario
                loaded.append(scenario.name)

        if loaded:
            logger.info(f"Loaded {len(loaded)} scenarios from files")
        return loaded

    def get_scenario(self, name: str) -> Optional[Scenario]:
        return self.scenarios.get(name)

    def resolve(self, name_or_path: str) -> Scenario:
        """Find a scenario by name, or load it from a file path.

        Raises:
            ScenarioConfigError: If nothing matches
        """
        scenario = self.get_scenario(name_or_path)
        if scenario:
            return scenario

        path = Path(name_or_path)
        if path.is_file():
            return Scenario.from_file(path)

        raise ScenarioConfigError(
            f"Scenario {name_or_path} not found",
            {"available": sorted(self.scenarios)}
        )

    def list_scenarios(self) -> List[Dict[str, Any]]:
        """List all scenarios.

        Returns:
            List of scenario information dictionaries
        """
        return [
            {
                "name": scenario.name,
                "description": scenario.description,
                "step_count": len(scenario.steps),
                "source": str(scenario.source) if scenario.source else "builtin"
            }
            for scenario in self.scenarios.values()
        ]

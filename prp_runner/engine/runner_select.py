"""Pick the CI runner label an implementation job should run on."""

from dataclasses import dataclass

from prp_runner.config.settings import RunnerConfig
from prp_runner.enums import RunnerType

FALLBACK_RUNNER = "ubuntu-latest"


@dataclass(frozen=True)
class RunnerSelection:
    runner_type: RunnerType
    runner: str
    fallback_runner: str = FALLBACK_RUNNER

    def to_outputs(self) -> dict[str, str]:
        return {"runner": self.runner, "fallback_runner": self.fallback_runner}


def detect_runner_type(owner: str | None, config: RunnerConfig) -> RunnerType:
    if owner and owner in config.org_owners:
        return RunnerType.ORG
    if owner and owner in config.personal_owners:
        return RunnerType.PERSONAL
    return RunnerType.DEFAULT


def select_runner(config: RunnerConfig, owner: str | None = None) -> RunnerSelection:
    """Map the runner configuration and repository owner to a runner label.

    ``org`` runs on Blacksmith, ``personal`` on BuildJet, anything else on
    GitHub-hosted runners. ``auto`` decides from the owner lists.
    """
    runner_type = config.runner_type
    if runner_type == RunnerType.AUTO:
        runner_type = detect_runner_type(owner, config)

    if runner_type == RunnerType.ORG:
        runner = f"blacksmith-{config.runner_size}-ubuntu-2204"
    elif runner_type == RunnerType.PERSONAL:
        runner = f"buildjet-{config.runner_size}-ubuntu-2204"
    else:
        runner = FALLBACK_RUNNER

    return RunnerSelection(runner_type=runner_type, runner=runner)

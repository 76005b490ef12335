import pytest

from mpdev.config import ApplyConfig
from mpdev.executor import CommandExecutor, CommandResult
from mpdev.registry import Registry
from mpdev.resources import (
    DeploymentManagerAutogenTemplate,
    DeploymentManagerTemplate,
    Metadata,
    Reference,
)


class FakeExecutor(CommandExecutor):
    """
    Records every command instead of running it.

    `results` scripts the outcome of successive calls (default: success).
    `on_run` is called with each CommandResult before it is returned, so a
    test can inspect files that only exist while the command runs.
    """

    def __init__(self, results=None, on_run=None):
        self.calls = []
        self.results = list(results or [])
        self.on_run = on_run

    @property
    def run_log(self):
        return [call.argv for call in self.calls]

    def run(self, command, *args, cwd=None):
        call = CommandResult(command=command, args=list(args), cwd=cwd)
        self.calls.append(call)
        if self.on_run is not None:
            self.on_run(call)
        if self.results:
            scripted = self.results.pop(0)
            if isinstance(scripted, Exception):
                raise scripted
            call.returncode = scripted.returncode
            call.stdout = scripted.stdout
            call.stderr = scripted.stderr
        return call


@pytest.fixture(autouse=True)
def isolated_home(monkeypatch, tmp_path_factory):
    """Keep tests away from a real ~/.config/mpdev."""
    monkeypatch.setenv("MPDEV_HOME", str(tmp_path_factory.mktemp("mpdev_home")))


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def registry(executor, tmp_path):
    return Registry(executor, ApplyConfig({"temp_dir": str(tmp_path)}))


def make_autogen(name="autogen", spec=None):
    return DeploymentManagerAutogenTemplate(
        Metadata(name=name),
        partner_id="testPartner1",
        solution_id="testSolution1",
        autogen_spec=spec,
    )


def make_dm_template(name="dm-temp", ref=None, zip_file_path=""):
    return DeploymentManagerTemplate(
        Metadata(name=name),
        deployment_manager_ref=ref if ref is not None else Reference(),
        zip_file_path=zip_file_path,
    )

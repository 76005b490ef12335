"""Argument construction for containerized tool invocations."""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Mount:
    """A bind mount from a host path into the container."""

    src: str
    dst: str

    def to_arg(self) -> str:
        return f"type=bind,src={self.src},dst={self.dst}"


@dataclass
class ContainerProcess:
    """
    A one-shot container run: `docker run --rm -i --mount ... <image> <args>`.

    Attributes:
        image: Image to run
        mounts: Bind mounts, in order
        args: Arguments passed to the image entrypoint
    """

    image: str
    mounts: List[Mount] = field(default_factory=list)
    args: List[str] = field(default_factory=list)

    def run_args(self) -> List[str]:
        """Arguments for the docker binary, starting with `run`."""
        argv = ["run", "--rm", "-i"]
        for mount in self.mounts:
            argv.extend(["--mount", mount.to_arg()])
        argv.append(self.image)
        argv.extend(self.args)
        return argv

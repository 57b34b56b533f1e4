"""
Declarative development shell for the stepped project.

The shell is a flat list of nixpkgs attributes plus two derived
environment variables:

  RUST_SRC_PATH    lets rust-analyzer find the standard library source;
  LD_LIBRARY_PATH  lets graphical frontends find the GPU adapters.

``render_shell_nix`` produces the ``shell.nix`` checked into the
repository. ``resolve_environment`` computes the values the variables
take once every attribute has been realised to a store path.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .errors import DevShellError

LOG = logging.getLogger(__name__)

RUST_SRC_ATTR = "rustPlatform.rustLibSrc"


@dataclass(frozen=True)
class ShellVariable:
    """
    An environment variable exported by the shell.

    ``expression`` is the Nix expression assigned in ``shell.nix``;
    ``comment`` is written on the line above it.
    """

    name: str
    expression: str
    comment: str


@dataclass(frozen=True)
class DevShell:
    packages: Tuple[str, ...]
    variables: Tuple[ShellVariable, ...] = field(default_factory=tuple)


DEFAULT_PACKAGES: Tuple[str, ...] = (
    "rustc",
    "cargo",
    RUST_SRC_ATTR,
    "rust-analyzer",
    "cargo-watch",
    "rustfmt",
    "pkg-config",
    "cmake",
    "fontconfig",
    "xorg.libX11",
    "xorg.libXcursor",
    "xorg.libXrandr",
    "xorg.libXi",
    "vulkan-loader",
    "vulkan-tools",
)

DEFAULT_SHELL = DevShell(
    packages=DEFAULT_PACKAGES,
    variables=(
        ShellVariable(
            name="RUST_SRC_PATH",
            expression=f'"${{pkgs.{RUST_SRC_ATTR}}}"',
            comment="Allows rust-analyzer to find the rust source",
        ),
        ShellVariable(
            name="LD_LIBRARY_PATH",
            expression='"${pkgs.lib.makeLibraryPath packages}"',
            comment="Without this graphical frontends can't find the GPU adapters",
        ),
    ),
)


def render_shell_nix(shell: DevShell = DEFAULT_SHELL) -> str:
    """
    Render ``shell`` as a ``shell.nix`` expression.
    """

    lines = [
        "{ pkgs ? import <nixpkgs> {} }:",
        "",
        "pkgs.mkShell rec {",
        "  packages = with pkgs; [",
    ]
    lines.extend(f"    {package}" for package in shell.packages)
    lines.append("  ];")

    for variable in shell.variables:
        lines.append("")
        if variable.comment:
            lines.append(f"  # {variable.comment}")
        lines.append(f"  {variable.name} = {variable.expression};")

    lines.append("}")
    return "\n".join(lines) + "\n"


def resolve_environment(
    shell: DevShell,
    store_paths: Mapping[str, str],
    library_paths: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Compute the shell's environment variables for realised packages.

    ``store_paths`` maps each package attribute to its default output.
    ``library_paths`` maps it to the output ``lib.getOutput "lib"``
    selects, which differs for multi-output packages such as fontconfig;
    it defaults to ``store_paths``. LD_LIBRARY_PATH is the ``lib``
    directory of every library output in package order, which is what
    ``lib.makeLibraryPath`` yields.
    """

    if library_paths is None:
        library_paths = store_paths

    missing = [p for p in shell.packages if p not in store_paths or p not in library_paths]
    if missing:
        raise DevShellError(f"no store path for packages: {', '.join(missing)}")

    env: Dict[str, str] = {}
    names = {v.name for v in shell.variables}
    if "RUST_SRC_PATH" in names:
        if RUST_SRC_ATTR not in store_paths:
            raise DevShellError(f"RUST_SRC_PATH needs {RUST_SRC_ATTR} in the shell")
        env["RUST_SRC_PATH"] = store_paths[RUST_SRC_ATTR]
    if "LD_LIBRARY_PATH" in names:
        env["LD_LIBRARY_PATH"] = ":".join(
            f"{library_paths[p].rstrip('/')}/lib" for p in shell.packages
        )
    return env


def _run_nix_build(args: List[str], what: str) -> str:
    cmd = ["nix-build", *args, "--no-out-link"]
    LOG.debug("Running nix command: %s", " ".join(cmd))
    try:
        completed = subprocess.run(cmd, check=False, text=True, capture_output=True)
    except OSError as exc:  # noqa: BLE001
        raise DevShellError(f"failed to execute nix-build: {exc}") from exc

    if completed.returncode != 0:
        detail = (completed.stderr or "").strip()
        raise DevShellError(f"nix-build failed for {what}: {detail}")

    paths = [line for line in completed.stdout.splitlines() if line.strip()]
    if not paths:
        raise DevShellError(f"nix-build produced no output path for {what}")
    # The first output is the default one, which is what ``with pkgs`` refers to.
    return paths[0].strip()


def _nix_build(attr: str) -> str:
    return _run_nix_build(["<nixpkgs>", "-A", attr], attr)


def _nix_build_library(attr: str) -> str:
    expression = f'with import <nixpkgs> {{}}; lib.getOutput "lib" {attr}'
    return _run_nix_build(["-E", expression], f"{attr} (lib output)")


def nix_store_paths(
    shell: DevShell,
    build: Callable[[str], str] = _nix_build,
) -> Dict[str, str]:
    """
    Realise every package of ``shell`` and return its default output.
    """

    return {package: build(package) for package in shell.packages}


def nix_library_paths(
    shell: DevShell,
    build: Callable[[str], str] = _nix_build_library,
) -> Dict[str, str]:
    """
    Realise the library output of every package of ``shell``.

    ``build`` receives the package attribute and returns the store path
    of its ``lib`` output, or of ``out`` when it has none.
    """

    return {package: build(package) for package in shell.packages}


def export_lines(env: Mapping[str, str]) -> List[str]:
    return [f"export {name}={shlex.quote(value)}" for name, value in env.items()]

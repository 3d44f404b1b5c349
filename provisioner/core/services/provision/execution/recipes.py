"""
L4 Execution — Build recipes.

Three recipe shapes cover the whole catalog:

- ``autotools``        — configure / make -jN / elevated make install
- ``script_installer`` — the package's own installer, then fixups
- ``bootstrap_copy``   — self-bootstrapping build, then move the binary

All output goes to the entry's log.  Any non-zero step raises
``BuildStepFailure``; there is no retry.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from provisioner.core.models.catalog import CatalogEntry
from provisioner.core.services.provision.data.constants import CANONICAL_SHEBANG
from provisioner.core.services.provision.domain.errors import BuildStepFailure
from provisioner.core.services.provision.execution.privilege import PrivilegeManager
from provisioner.core.services.provision.execution.subprocess_runner import _run_logged

logger = logging.getLogger(__name__)


@dataclass
class BuildContext:
    """Everything a recipe needs for one entry."""

    entry: CatalogEntry
    source_dir: Path
    build_dir: Path
    log_path: Path
    prefix: str
    jobs: int
    privilege: PrivilegeManager

    @property
    def bin_dir(self) -> Path:
        return Path(self.prefix) / "bin"


def _substitute_build_vars(args: tuple[str, ...] | list[str], ctx: BuildContext) -> list[str]:
    """Replace ``{prefix}`` / ``{jobs}`` placeholders in recipe arguments."""
    variables = {"prefix": ctx.prefix, "jobs": str(ctx.jobs)}
    result: list[str] = []
    for token in args:
        for key, value in variables.items():
            token = token.replace(f"{{{key}}}", value)
        result.append(token)
    return result


def _step(
    ctx: BuildContext,
    label: str,
    cmd: list[str],
    *,
    cwd: Path | None = None,
    elevated: bool = False,
    env_overrides: dict[str, str] | None = None,
) -> None:
    logger.info("%s: %s", ctx.entry.name, label)
    result = _run_logged(
        cmd,
        log_path=ctx.log_path,
        cwd=cwd,
        env_overrides=env_overrides,
        privilege=ctx.privilege,
        elevated=elevated,
    )
    if not result["ok"]:
        raise BuildStepFailure(
            ctx.entry.name,
            label,
            returncode=result.get("returncode"),
            log_path=ctx.log_path,
        )


# ── Generic autotools ───────────────────────────────────────────


def build_autotools(ctx: BuildContext) -> None:
    """``configure --prefix``, ``make -jN``, elevated ``make <install target>``."""
    entry = ctx.entry
    if entry.in_tree:
        workdir = ctx.source_dir
    else:
        workdir = ctx.build_dir
        workdir.mkdir(parents=True, exist_ok=True)

    configure = ctx.source_dir / entry.configure_script
    make_args = _substitute_build_vars(entry.make_args, ctx)

    _step(
        ctx,
        "configure",
        [str(configure), f"--prefix={ctx.prefix}", *_substitute_build_vars(entry.configure_args, ctx)],
        cwd=workdir,
    )
    _step(ctx, "make", ["make", f"-j{ctx.jobs}", *make_args], cwd=workdir)
    _step(ctx, "install", ["make", *make_args, entry.install_target], cwd=workdir, elevated=True)


# ── Script-driven installer ─────────────────────────────────────


def _site_packages(prefix: str) -> list[Path]:
    return sorted(Path(prefix).glob("lib/python3*/site-packages"))


def _fix_entry_point(ctx: BuildContext) -> None:
    """Force the installed entry point's interpreter directive to canonical form."""
    script = ctx.bin_dir / ctx.entry.executable
    if not script.is_file():
        raise BuildStepFailure(ctx.entry.name, "fixup", log_path=ctx.log_path,
                               detail=f"{script} was not installed")

    lines = script.read_text(encoding="utf-8").splitlines(keepends=True)
    if lines and lines[0].startswith("#!"):
        if lines[0].strip() == CANONICAL_SHEBANG:
            return
        lines[0] = CANONICAL_SHEBANG + "\n"
    else:
        lines.insert(0, CANONICAL_SHEBANG + "\n")

    staged = ctx.build_dir / script.name
    staged.parent.mkdir(parents=True, exist_ok=True)
    staged.write_text("".join(lines), encoding="utf-8")
    _step(ctx, "fixup shebang", ["install", "-m", "0755", str(staged), str(script)], elevated=True)


def _purge_bytecode(ctx: BuildContext) -> None:
    """Delete any ``__pycache__`` the installer left in its own package dirs.

    Other packages sharing the prefix's site-packages are never touched.
    """
    owned = ctx.entry.package_dirs or (ctx.entry.name,)
    caches = [
        cache
        for site in _site_packages(ctx.prefix)
        for pkg in owned
        if (site / pkg).is_dir()
        for cache in sorted((site / pkg).rglob("__pycache__"))
        if cache.is_dir()
    ]
    if caches:
        _step(ctx, "fixup bytecode", ["rm", "-rf", *map(str, caches)], elevated=True)


def _normalize_metadata(ctx: BuildContext) -> None:
    """Rename ``<name>-<version>-pyX.Y.egg-info`` to ``<name>-<version>.egg-info``."""
    entry = ctx.entry
    stem = f"{entry.name}-{entry.version}"
    tagged = re.compile(rf"^{re.escape(stem)}-py\d+(?:\.\d+)*\.egg-info$")

    for site in _site_packages(ctx.prefix):
        for meta in site.iterdir():
            if not tagged.match(meta.name):
                continue
            target = site / f"{stem}.egg-info"
            if target.exists():
                _step(ctx, "fixup metadata", ["rm", "-rf", str(target)], elevated=True)
            _step(ctx, "fixup metadata", ["mv", str(meta), str(target)], elevated=True)


def build_script_installer(ctx: BuildContext) -> None:
    """Run the package's ``setup.py`` installer, then normalize what it produced."""
    no_bytecode = {"PYTHONDONTWRITEBYTECODE": "1"}
    _step(
        ctx,
        "install",
        [
            "python3", "setup.py", "--no-user-cfg", "install",
            f"--prefix={ctx.prefix}", "--root=/", "--no-compile",
        ],
        cwd=ctx.source_dir,
        elevated=True,
        env_overrides=no_bytecode,
    )
    _fix_entry_point(ctx)
    _purge_bytecode(ctx)
    _normalize_metadata(ctx)


# ── Bootstrap-then-copy ─────────────────────────────────────────


def build_bootstrap_copy(ctx: BuildContext) -> None:
    """Run ``configure.py --bootstrap`` and move the resulting binary into ``bin``."""
    _step(ctx, "bootstrap", ["python3", "configure.py", "--bootstrap"], cwd=ctx.source_dir)

    binary = ctx.source_dir / ctx.entry.executable
    if not binary.is_file():
        raise BuildStepFailure(ctx.entry.name, "bootstrap", log_path=ctx.log_path,
                               detail=f"{binary.name} was not produced")

    _step(ctx, "install", ["mkdir", "-p", str(ctx.bin_dir)], elevated=True)
    _step(ctx, "install", ["mv", "-f", str(binary), str(ctx.bin_dir / binary.name)], elevated=True)


RECIPES: dict[str, Callable[[BuildContext], None]] = {
    "autotools": build_autotools,
    "script_installer": build_script_installer,
    "bootstrap_copy": build_bootstrap_copy,
}


def run_recipe(ctx: BuildContext) -> None:
    """Dispatch on ``entry.build_recipe``."""
    recipe = RECIPES.get(ctx.entry.build_recipe)
    if recipe is None:
        raise BuildStepFailure(ctx.entry.name, "build", detail=f"unknown recipe {ctx.entry.build_recipe!r}")
    recipe(ctx)

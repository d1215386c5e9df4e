"""
Command-line interface for strata.

Merges YAML, TOML and JSON files (and optionally the environment) and
prints the result:

    strata show defaults.yaml site.yaml --env-prefix APP_
    strata show defaults.yaml site.toml --provenance
    strata get server.port defaults.yaml site.yaml --type int
"""

import json as _json
import logging as _logging
import os as _os
import pathlib as _pathlib
import sys as _sys
import typing as _typing

import click as _click
import rich.console as _rich_console
import rich.syntax as _rich_syntax
import yaml as _yaml

import strata
import strata.accessor as accessor
import strata.errors as errors
import strata.merge as merge
import strata.path as path_mod
import strata.settings as settings
import strata.sources.adapters as adapters
import strata.value as value

_logger = _logging.getLogger(__name__)

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

_POLICIES = {
    "strict": merge.FailurePolicy.STRICT,
    "skip-unavailable": merge.FailurePolicy.SKIP_UNAVAILABLE,
}

_TYPES: dict[str, type] = {"bool": bool, "int": int, "float": float, "str": str}


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(strata.__version__, "--version", prog_name="strata")
@_click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Strata - inspect layered configuration."""
    level = "DEBUG" if verbose else settings.get_settings().log_level.upper()
    _logging.basicConfig(
        level=getattr(_logging, level),
        format="%(levelname)s %(name)s: %(message)s",
    )


_LAYER_OPTIONS = [
    _click.argument(
        "files",
        nargs=-1,
        type=_click.Path(dir_okay=False, path_type=_pathlib.Path),
    ),
    _click.option(
        "--env-prefix",
        type=str,
        default=None,
        help="Add environment variables with this prefix as the top layer",
    ),
    _click.option(
        "--env-delimiter",
        type=str,
        default=None,
        help="Nested-key separator in variable names (default: __)",
    ),
    _click.option(
        "--parse-env/--no-parse-env",
        default=True,
        help="Read environment values as YAML scalars (default: on)",
    ),
    _click.option(
        "--policy",
        type=_click.Choice(sorted(_POLICIES)),
        default=None,
        help="What to do when a file cannot be read (default: strict)",
    ),
]


def _layer_options(func: _typing.Callable[..., _typing.Any]) -> _typing.Callable[..., _typing.Any]:
    """Attach the options shared by every command that builds layers."""
    for decorator in reversed(_LAYER_OPTIONS):
        func = decorator(func)
    return func


def _merge_layers(
    files: tuple[_pathlib.Path, ...],
    env_prefix: str | None,
    env_delimiter: str | None,
    parse_env: bool,
    policy: str | None,
) -> merge.MergedConfig:
    """Merge the files in order, then the environment layer if requested."""
    try:
        layer_sources: list[_typing.Any] = [
            adapters.file_source(file, required=True) for file in files
        ]
    except errors.SourceUnavailable as e:
        raise _click.ClickException(str(e)) from e
    if env_prefix:
        delimiter = env_delimiter or settings.get_settings().env_delimiter
        layer_sources.append(
            adapters.EnvironmentSource(
                env_prefix, delimiter=delimiter, parse_values=parse_env
            )
        )
    chosen = _POLICIES[policy] if policy is not None else None
    _logger.debug("Merging %d file(s), env prefix %r", len(files), env_prefix)
    try:
        config = merge.merge(layer_sources, chosen)
    except errors.SourceFailedError as e:
        raise _click.ClickException(f"{e}: {e.__cause__}") from e
    except errors.StrataError as e:
        raise _click.ClickException(str(e)) from e

    for name in config.skipped:
        _click.echo(f"warning: skipped unavailable source {name}", err=True)
    return config


def _resolve(config: merge.MergedConfig, expression: str) -> tuple[path_mod.Path, value.Value]:
    try:
        target = path_mod.Path.parse(expression)
        return target, config.accessor().get(target)
    except errors.StrataError as e:
        raise _click.ClickException(str(e)) from e


# =============================================================================
# show
# =============================================================================


@cli.command(name="show")
@_layer_options
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.option("--provenance", is_flag=True, help="Show where each value came from")
@_click.option("--path", "expression", type=str, default=None, help="Show only this subtree")
@_click.option(
    "--color/--no-color",
    "use_color",
    default=None,
    help="Enable/disable syntax highlighting (default: auto-detect TTY)",
)
def show(
    files: tuple[_pathlib.Path, ...],
    env_prefix: str | None,
    env_delimiter: str | None,
    parse_env: bool,
    policy: str | None,
    as_json: bool,
    provenance: bool,
    expression: str | None,
    use_color: bool | None,
) -> None:
    """Show the merged configuration.

    FILES (.yaml, .yml, .toml or .json) are merged in the order given;
    later files win. The environment layer, if any, wins over all files.

    Examples:
        strata show base.yaml local.yaml            # merged YAML
        strata show base.yaml --json                # as JSON
        strata show base.yaml local.yaml --provenance
        strata show base.yaml --env-prefix APP_ --path server
    """
    config = _merge_layers(files, env_prefix, env_delimiter, parse_env, policy)

    if expression is not None:
        target, subtree = _resolve(config, expression)
    else:
        target, subtree = path_mod.Path.root(), config.root

    if provenance:
        for line in _provenance_lines(config, target, subtree):
            _click.echo(line)
    elif as_json:
        _click.echo(_json.dumps(value.to_python(subtree), indent=2))
    else:
        yaml_text = _yaml.safe_dump(
            value.to_python(subtree),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        color_enabled, force_color = _should_use_color(use_color)
        _print_yaml(yaml_text, color=color_enabled, force_color=force_color)


def _provenance_lines(
    config: merge.MergedConfig,
    prefix: path_mod.Path,
    subtree: value.Value,
) -> list[str]:
    """Render ``path = value  # [source]`` for every leaf under ``prefix``.

    A prefix inside a leaf (an element of a Sequence) gets a single line.
    """
    lines = [
        _provenance_line(path, leaf, source)
        for path, leaf, source in config.leaves()
        if path.startswith(prefix)
    ]
    if not lines:
        lines.append(_provenance_line(prefix, subtree, config.source_of(prefix)))
    return lines


def _provenance_line(path: path_mod.Path, leaf: value.Value, source: str | None) -> str:
    rendered = _json.dumps(value.to_python(leaf))
    label = str(path) if not path.is_root else "<root>"
    return f"{label} = {rendered}  # [{source or 'unknown'}]"


def _should_use_color(cli_flag: bool | None) -> tuple[bool, bool]:
    """Determine whether to use color output.

    Priority:
    1. CLI flag (--color / --no-color) if specified
    2. NO_COLOR env var (if set, disable color) - standard convention
    3. Auto-detect: color if stdout is a TTY

    Returns:
        Tuple of (color_enabled, force_color).
        force_color is True when color was explicitly requested.
    """
    if cli_flag is not None:
        return (cli_flag, cli_flag)
    if _os.environ.get("NO_COLOR") is not None:
        return (False, False)
    return (_sys.stdout.isatty(), False)


def _print_yaml(yaml_text: str, *, color: bool = True, force_color: bool = False) -> None:
    """Print YAML text, optionally with syntax highlighting."""
    if not color:
        _click.echo(yaml_text, nl=False)
        return
    console = _rich_console.Console(
        force_terminal=force_color,
        no_color=False if force_color else None,
        color_system="truecolor" if force_color else "auto",
    )
    console.print(
        _rich_syntax.Syntax(
            yaml_text,
            "yaml",
            theme="monokai",
            background_color="default",
        )
    )


# =============================================================================
# get
# =============================================================================


@cli.command(name="get")
@_click.argument("expression", type=str)
@_layer_options
@_click.option(
    "--type",
    "type_name",
    type=_click.Choice(sorted(_TYPES)),
    default=None,
    help="Require the value to have this type",
)
def get(
    expression: str,
    files: tuple[_pathlib.Path, ...],
    env_prefix: str | None,
    env_delimiter: str | None,
    parse_env: bool,
    policy: str | None,
    type_name: str | None,
) -> None:
    """Print the value at EXPRESSION.

    Scalars print bare; containers print as YAML. Exits with status 1 if
    the path does not exist or, with --type, holds a different type.

    Examples:
        strata get server.port base.yaml local.yaml
        strata get 'labels["app.io/name"]' base.yaml --type str
    """
    config = _merge_layers(files, env_prefix, env_delimiter, parse_env, policy)

    if type_name is not None:
        try:
            result = accessor.Accessor(config).get_as(expression, _TYPES[type_name])
        except errors.StrataError as e:
            raise _click.ClickException(str(e)) from e
        _click.echo(_format_scalar(result))
        return

    _, node = _resolve(config, expression)
    if node.is_container():
        _click.echo(
            _yaml.safe_dump(
                value.to_python(node), default_flow_style=False, sort_keys=False
            ),
            nl=False,
        )
    else:
        _click.echo(_format_scalar(value.to_python(node)))


def _format_scalar(data: _typing.Any) -> str:
    if isinstance(data, str):
        return data
    return _json.dumps(data)


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="strata")


if __name__ == "__main__":
    main()

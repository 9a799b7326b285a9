"""Command-line interface for sign-app."""

import sys
from pathlib import Path
from typing import Optional

import click
import typer
from rich.console import Console
from rich.markup import escape

from sign_app import __version__
from sign_app.cache import AppListCache
from sign_app.collectors.codesign import extract_authorities
from sign_app.config import Config, load_config, save_example_config
from sign_app.errors import AppNotFoundError, SignAppError
from sign_app.models import ApplicationBundle, SigningRequest, SignOutcome
from sign_app.scanners.apps import find_user_installed_applications, resolve_app_by_name
from sign_app.selector import choose
from sign_app.signer import check_signature, sign_application, validate_app
from sign_app.toolchain import Toolchain, default_toolchain, require_codesign
from sign_app.util.log import setup_logging

app = typer.Typer(
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]}
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        print(f"sign-app version {__version__}")
        raise typer.Exit()


@app.command()
def sign(
    name: Optional[str] = typer.Option(
        None,
        "--name",
        "-n",
        help="Sign a specific user-installed app by name"
    ),
    list_apps: bool = typer.Option(
        False,
        "--list",
        "-l",
        help="List all user-installed macOS apps and pick one"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output"
    ),
    update_list: bool = typer.Option(
        False,
        "--update-list",
        help="Force update of the cached app list"
    ),
    check: bool = typer.Option(
        False,
        "--check",
        help="Verify if an app is already signed"
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Force re-signing even if the app is already signed"
    ),
    entitlements: Optional[Path] = typer.Option(
        None,
        "--entitlements",
        help="Specify custom entitlements file"
    ),
    backup: bool = typer.Option(
        False,
        "--backup",
        help="Create a backup of the app before signing"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Path to configuration file (default: ~/.sign-app.yaml)"
    ),
    generate_config: Optional[Path] = typer.Option(
        None,
        "--generate-config",
        help="Generate example configuration file at specified path and exit"
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """
    Sign user-installed macOS applications.

    Apps are signed with a deep ad-hoc signature. System applications
    (under /System/Applications, signed by Apple, or with a com.apple.
    bundle identifier) are refused.

    Examples:
        sign-app --name Foo                     # Sign /Applications/Foo.app
        sign-app --name Foo --check             # Only report signature state
        sign-app --list                         # Pick from discovered apps
        sign-app --update-list                  # Rediscover apps, then pick
        sign-app -n Foo --force --backup        # Back up, then re-sign
        sign-app -n Foo --entitlements ent.plist
    """
    if generate_config:
        try:
            save_example_config(generate_config)
            print(f"✓ Example configuration saved to {generate_config}", file=sys.stderr)
            sys.exit(0)
        except OSError as e:
            print(f"Error generating config: {e}", file=sys.stderr)
            sys.exit(1)

    setup_logging(verbose)
    console = Console()

    try:
        config = load_config(config_file)
    except (FileNotFoundError, SignAppError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        print("Continuing with default settings...", file=sys.stderr)
        config = Config()

    try:
        require_codesign()
        tools = default_toolchain()

        if name:
            app_path = resolve_app_by_name(name, config.application_dirs)
            if app_path is None:
                raise AppNotFoundError(name)
        elif list_apps or update_list:
            app_path = _select_from_list(config, tools, update_list, console)
            if app_path is None:
                console.print("No user-installed apps found.")
                sys.exit(0)
        else:
            print("Error: No action specified. Use -h or --help for usage information.", file=sys.stderr)
            sys.exit(1)

        if check:
            _report_signature(app_path, config, tools, verbose, console)
        else:
            request = SigningRequest(
                path=app_path,
                entitlements=str(entitlements.expanduser()) if entitlements else config.entitlements,
                force=force,
                backup=backup or config.backup
            )
            _sign(request, config, tools, verbose, console)
    except SignAppError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(e.exit_code)
    except (EOFError, KeyboardInterrupt):
        print("\nAborted.", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


def _select_from_list(
    config: Config,
    tools: Toolchain,
    update_list: bool,
    console: Console
) -> str | None:
    """Load or rebuild the cached app list and let the operator pick one."""
    cache = AppListCache(config.cache_file)

    if cache.is_stale(update_list):
        with console.status("Searching for user-installed apps..."):
            apps = find_user_installed_applications(
                tools,
                applications_dir=config.applications_dir,
                user_applications_dir=config.user_applications_dir,
                system_root=config.system_applications_root,
                excluded_prefixes=config.excluded_search_prefixes
            )
        cache.store(apps)
    else:
        apps = cache.load() or []

    if not apps:
        return None

    return choose(apps, console=console)


def _report_signature(
    app_path: str,
    config: Config,
    tools: Toolchain,
    verbose: bool,
    console: Console
) -> None:
    """Print whether an app is signed, without changing it."""
    validate_app(app_path, tools, config.system_applications_root)
    state = check_signature(app_path, tools)

    if state.is_signed:
        console.print(f"App is already signed: {escape(app_path)}")
        if verbose:
            bundle = ApplicationBundle(path=app_path).with_bundle_identifier(tools)
            if bundle.bundle_identifier:
                console.print(f"  Identifier: {escape(bundle.bundle_identifier)}", style="dim")
            for authority in extract_authorities(tools.query_authority(app_path) or ""):
                console.print(f"  Authority: {escape(authority)}", style="dim")
    else:
        console.print(f"App is not signed: {escape(app_path)}")


def _sign(
    request: SigningRequest,
    config: Config,
    tools: Toolchain,
    verbose: bool,
    console: Console
) -> None:
    """Sign an app and print what happened."""
    result = sign_application(request, tools, system_root=config.system_applications_root)

    if result.backup_path:
        console.print(f"Backup created: {escape(result.backup_path)}")

    if result.outcome == SignOutcome.ALREADY_SIGNED:
        console.print("App is already signed. Use --force to re-sign.")
        return

    if verbose and result.tool_output:
        console.print(result.tool_output, style="dim", markup=False, highlight=False)
    console.print(f"[green]✓[/green] App signed successfully: {escape(result.path)}")


def main() -> None:
    """Entry point for the CLI."""
    command = typer.main.get_command(app)
    try:
        code = command.main(prog_name="sign-app", standalone_mode=False)
    except click.UsageError as e:
        e.show()
        sys.exit(1)
    except click.Abort:
        print("Aborted.", file=sys.stderr)
        sys.exit(1)
    sys.exit(code or 0)


if __name__ == "__main__":
    main()

"""Command-line interface for signing resolution and release signing."""

import json
import sys
from pathlib import Path

import click
import yaml

from . import __version__
from .backends.base import SigningError
from .build import configure_build
from .config import ConfigError, load_config, load_default_config
from .keystore import inspect_keystore
from .properties import PropertiesError
from .report import REPORT_SUFFIX, load_report
from .resolver import (
    DEBUG,
    RELEASE,
    MissingCredentialsFileError,
    SigningResolver,
)
from .orchestrator import SigningOrchestrator


def _load_project_config(project_root, config):
    """Load the explicit or discovered config, with environment overrides."""
    try:
        if config:
            project_config = load_config(config)
            click.echo(f"Loaded config: {config}", err=True)
        else:
            project_config = load_default_config(Path(project_root))
        return project_config.apply_environment_overrides()
    except (FileNotFoundError, ConfigError) as e:
        click.echo(f"❌ Config error: {e}", err=True)
        sys.exit(1)


def _build_configuration(project_root, config):
    project_config = _load_project_config(project_root, config)
    resolver = SigningResolver(
        project_root,
        credentials_file=project_config.credentials_file,
        on_missing=project_config.get_on_missing_credentials(),
    )
    try:
        build_config = configure_build(
            project_config, resolver.credentials, resolver.project_root
        )
    except MissingCredentialsFileError as e:
        click.echo(f"❌ {e}: {resolver.credentials_path}", err=True)
        sys.exit(1)
    except (OSError, PropertiesError) as e:
        click.echo(f"❌ Invalid credentials file {resolver.credentials_path}: {e}", err=True)
        sys.exit(1)

    for warning in build_config.warnings:
        click.echo(f"⚠️  {warning}", err=True)

    return project_config, build_config


def _emit(data, output_format):
    if output_format == "json":
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(yaml.safe_dump(data, sort_keys=False), nl=False)


project_root_option = click.option(
    "--project-root",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    show_default=True,
    help="Android project directory holding the credentials file.",
)
config_option = click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file (YAML). Defaults to .release-signer.yaml if present.",
)


@click.group()
@click.version_option(version=__version__)
def main():
    """Android release signing resolver."""
    pass


@main.command()
@project_root_option
@config_option
@click.option(
    "--build-type",
    default=RELEASE,
    show_default=True,
    help="Build type to resolve.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"]),
    default="json",
    show_default=True,
)
@click.option("--show-secrets", is_flag=True, help="Print passwords in clear text.")
def resolve(project_root, config, build_type, output_format, show_secrets):
    """Show which signing identity a build type uses."""
    _, build_config = _build_configuration(project_root, config)

    try:
        selected = build_config.get_build_type(build_type)
    except KeyError as e:
        click.echo(f"❌ {e.args[0]}", err=True)
        sys.exit(1)

    data = {
        "build_type": selected.name,
        "fell_back": selected.resolution.fell_back,
        "identity": selected.signing.to_dict(redact=not show_secrets),
    }
    _emit(data, output_format)


@main.command(name="config")
@project_root_option
@config_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"]),
    default="yaml",
    show_default=True,
)
def show_config(project_root, config, output_format):
    """Print the build configuration produced for every build type."""
    _, build_config = _build_configuration(project_root, config)
    _emit(build_config.to_dict(redact=True), output_format)


@main.command()
@project_root_option
@config_option
def check(project_root, config):
    """Check that release signing would succeed."""
    _, build_config = _build_configuration(project_root, config)
    release = build_config.get_build_type(RELEASE)
    identity = release.signing

    click.echo(f"Release signing: {identity.variant}")

    if release.resolution.fell_back:
        click.echo("⚠️  Release builds are currently signed with the debug key", err=True)
        sys.exit(1)

    missing = identity.missing_fields()
    if missing:
        click.echo(f"❌ Missing signing credentials: {', '.join(missing)}", err=True)
        sys.exit(1)

    try:
        info = inspect_keystore(
            identity.keystore_path(), identity.store_password, identity.key_alias
        )
    except SigningError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    click.echo(f"✅ Keystore: {info.path}")
    click.echo(f"   Alias: {info.alias}")
    click.echo(f"   Subject: {info.subject}")
    click.echo(f"   Valid until: {info.not_valid_after.isoformat()}")
    click.echo(f"   SHA-256: {info.sha256_fingerprint}")


@main.command()
@click.argument("artifact", type=click.Path(exists=True, dir_okay=False))
@project_root_option
@config_option
@click.option(
    "--build-type",
    type=click.Choice([RELEASE, DEBUG]),
    default=RELEASE,
    show_default=True,
)
@click.option("--out", "output_path", type=click.Path(), help="Signed artifact path.")
@click.option("--no-report", is_flag=True, help="Skip signing report generation")
def sign(artifact, project_root, config, build_type, output_path, no_report):
    """Sign an APK or app bundle."""
    project_config, build_config = _build_configuration(project_root, config)
    orchestrator = SigningOrchestrator.from_config(project_config)

    click.echo(f"Signing artifact: {artifact}")
    try:
        report = orchestrator.sign_artifact(
            artifact,
            build_config.get_build_type(build_type),
            output_path=output_path,
            generate_report=not no_report,
        )
    except SigningError as e:
        click.echo(f"❌ Signing failed: {e}", err=True)
        sys.exit(1)

    click.echo("\n✅ Signing complete!")
    click.echo(f"Artifact: {report.artifact_path}")
    click.echo(f"Identity: {report.signed.identity.variant}")


@main.command()
@click.argument("artifact", type=click.Path(exists=True, dir_okay=False))
@project_root_option
@config_option
def verify(artifact, project_root, config):
    """Verify the signature of a signed APK or app bundle."""
    project_config = _load_project_config(project_root, config)
    orchestrator = SigningOrchestrator.from_config(project_config)

    try:
        backend = orchestrator.get_backend(artifact)
    except SigningError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    if not backend.is_available():
        click.echo(f"❌ {backend.get_format()} not found: {backend.executable}", err=True)
        sys.exit(1)

    click.echo(f"Verifying artifact: {artifact}")
    try:
        valid = orchestrator.verify_artifact(artifact)
    except SigningError as e:
        click.echo(f"❌ Verification failed: {e}", err=True)
        sys.exit(1)

    if not valid:
        sys.exit(1)


@main.command()
@click.argument("artifact", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--report",
    "report_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Signing report file",
)
def info(artifact, report_path):
    """Display information about a signed artifact."""
    if report_path is None:
        report_path = f"{artifact}{REPORT_SUFFIX}"

    if not Path(report_path).exists():
        click.echo(f"❌ Signing report not found: {report_path}", err=True)
        sys.exit(1)

    try:
        report = load_report(report_path)
    except (OSError, ValueError) as e:
        click.echo(f"❌ Failed to read signing report: {e}", err=True)
        sys.exit(1)

    identity = report.get("identity", {})
    click.echo(f"Artifact: {artifact}")
    click.echo(f"Build type: {report.get('build_type')}")
    click.echo(f"Timestamp: {report.get('timestamp')}")
    click.echo(f"Tool: {report.get('tool')}")
    click.echo("\nIdentity:")
    click.echo(f"  Variant: {identity.get('variant')}")
    click.echo(f"  Alias: {identity.get('key_alias')}")
    click.echo(f"  Keystore: {identity.get('store_file')}")
    if report.get("certificate_sha256"):
        click.echo(f"  Certificate SHA-256: {report['certificate_sha256']}")
    click.echo("\nArtifact:")
    click.echo(f"  SHA256: {report.get('artifact', {}).get('sha256')}")
    click.echo(f"  Size: {report.get('artifact', {}).get('size')} bytes")

    if report.get("signing_fell_back"):
        click.echo("\n⚠️  Release build was signed with the debug key")


if __name__ == "__main__":
    main()

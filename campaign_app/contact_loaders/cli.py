"""
CLI commands for contact loaders.
"""

from __future__ import annotations

from pathlib import Path

import click
from flask import current_app
from flask.cli import with_appcontext

from .csv_s3_upload.pipeline import (
    ClientChoiceData,
    ClientChoiceDataError,
    ContactUploadPipeline,
    UploadStatus,
    describe_contact_stats,
    describe_validation_stats,
)


@click.group(name="contacts")
def contacts_cli():
    """Contact loader commands."""


@contacts_cli.command("loaders")
@with_appcontext
def list_loaders():
    """List enabled contact loaders and whether they are usable from the admin UI."""
    state = current_app.extensions.get("contact_loaders", {})
    loaders = state.get("loaders", ())
    if not loaders:
        click.echo("No contact loaders configured.")
        return
    click.echo("Enabled contact loaders:")
    for entry in loaders:
        availability = "available" if entry["available"]["result"] else "server-side only"
        click.echo(f"  - {entry['name']} ({entry['display_name']}): {availability}")


@contacts_cli.command("upload")
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--client-choice-data",
    required=True,
    help='JSON object with the pre-signed destination, e.g. {"s3Url": "...", "s3key": "..."}.',
)
@with_appcontext
def upload_contacts(csv_path: Path, client_choice_data: str):
    """Parse CSV_PATH and PUT the contacts to the pre-signed storage URL."""
    try:
        ClientChoiceData.from_json(client_choice_data)
    except ClientChoiceDataError as exc:
        raise click.BadParameter(str(exc), param_hint="--client-choice-data") from exc

    stored_keys: list[str] = []
    pipeline = ContactUploadPipeline(
        client_choice_data,
        stored_keys.append,
        country=current_app.config.get("PHONE_NUMBER_COUNTRY", "US"),
        timeout=current_app.config.get("HTTP_TIMEOUT_SECONDS"),
        logger=current_app.logger,
    )
    with csv_path.open("rb") as handle:
        state = pipeline.handle_upload(handle, csv_path.name)

    for line in describe_contact_stats(state):
        click.echo(line)
    for line in describe_validation_stats(state.validation_stats):
        click.echo(line)

    if state.status is UploadStatus.ERROR:
        raise click.ClickException(state.error or "Contact upload failed.")
    click.echo(f"Stored contacts at key: {stored_keys[0]}")

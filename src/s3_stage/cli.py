"""Command-line interface for the S3 put stage."""

import sys

import click

from s3_stage.config import StageConfig
from s3_stage.exceptions import Cancelled, ConfigurationError, ItemReadError, UploadError
from s3_stage.logging_config import configure_logging
from s3_stage.orchestrator import run


@click.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="Cancel the upload after this many seconds.",
)
@click.option("--log-level", help="Logging level (defaults to S3_STAGE_LOG_LEVEL).")
def main(paths: tuple[str, ...], timeout: float | None, log_level: str | None) -> None:
    """Upload files and directories to S3.

    PATHS: Files or directories to upload. Directory contents are stored
    under their path relative to the directory.

    Credentials, region, bucket and ACL are read from S3_STAGE_* environment
    variables.
    """
    try:
        config = StageConfig()
    except Exception as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    configure_logging(log_level or config.log_level)

    try:
        result = run(paths=paths, config=config, timeout=timeout)

        click.echo(f"Found {result['files_found']} files")
        click.echo(f"Uploaded {result['files_uploaded']} files to {config.bucket}")

    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    except ItemReadError as e:
        click.echo(f"Read failed: {e}", err=True)
        sys.exit(1)

    except UploadError as e:
        click.echo(f"Upload failed: {e}", err=True)
        sys.exit(1)

    except Cancelled as e:
        click.echo(f"Upload cancelled: {e}", err=True)
        sys.exit(1)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()

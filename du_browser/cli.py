"""Command-line interface for du-browser."""

import logging
import sys
import click
from typing import Optional

from .config.config_manager import ConfigManager
from .core.encoders import write_text
from .core.scanner import DirectoryScanner


def setup_logging(level: str, log_file: Optional[str] = None):
    """Set up logging configuration."""
    # Convert string level to logging constant
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Logs go to stderr so `scan` output stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            click.echo(f"Warning: Could not set up file logging: {e}", err=True)


def _load_config(ctx, overrides=None):
    config_manager = ConfigManager(ctx.obj.get('config_path'))
    config = config_manager.load_config(overrides)
    logging_config = config_manager.get_logging_config()
    setup_logging(ctx.obj.get('log_level') or logging_config['level'],
                  ctx.obj.get('log_file') or logging_config['file'])
    return config


@click.group()
@click.option('--config', '-c', 'config_path',
              help='Path to configuration file')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level')
@click.option('--log-file',
              help='Log file path')
@click.pass_context
def cli(ctx, config_path: Optional[str], log_level: Optional[str], log_file: Optional[str]):
    """du-browser - Browse disk usage of a directory tree."""
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path
    ctx.obj['log_level'] = log_level
    ctx.obj['log_file'] = log_file


@cli.command()
@click.option('--base-path', '-b', help='Directory to report on')
@click.option('--host', help='Listening interface')
@click.option('--port', '-p', type=int, help='Listening port')
@click.option('--cache-duration', type=float, help='Seconds a computed report stays cached')
@click.option('--apology-timeout', type=float,
              help="Seconds after which to show 'this is taking a while'")
@click.pass_context
def serve(ctx, base_path, host, port, cache_duration, apology_timeout):
    """Serve disk usage reports over HTTP."""
    try:
        config = _load_config(ctx, {
            'scan': {'base_path': base_path},
            'server': {'host': host, 'port': port, 'apology_timeout_seconds': apology_timeout},
            'cache': {'duration_seconds': cache_duration},
        })
    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    import uvicorn
    from .server.app import build_orchestrator, create_app

    app = create_app(build_orchestrator(config))
    server_config = config['server']
    # uvicorn exits the process if the port cannot be bound
    uvicorn.run(app, host=server_config['host'], port=int(server_config['port']), log_config=None)


@cli.command()
@click.option('--base-path', '-b', help='Directory to report on')
@click.pass_context
def scan(ctx, base_path):
    """Scan the base directory once and print its breakdown."""
    try:
        config = _load_config(ctx, {'scan': {'base_path': base_path}})
        scan_config = config['scan']

        # A single walk never revisits a directory, so it runs uncached
        scanner = DirectoryScanner(cache=None, follow_symlinks=scan_config['follow_symlinks'])
        report = scanner.walk(scan_config['base_path'], "")
        write_text(report, sys.stdout)

    except Exception as e:
        click.echo(f"Error during scan: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def validate_config(ctx):
    """Validate configuration file."""
    try:
        config_manager = ConfigManager(ctx.obj.get('config_path'))
        config = config_manager.load_config()

        click.echo("✅ Configuration loaded successfully")

        server_config = config_manager.get_server_config()
        cache_config = config_manager.get_cache_config()
        click.echo(f"\n📊 Configuration Summary:")
        click.echo(f"   Base path: {config['scan']['base_path']}")
        click.echo(f"   Listening on: {server_config['host']}:{server_config['port']}")
        click.echo(f"   Cache duration: {cache_config['duration_seconds']}s")
        click.echo(f"   Apology timeout: {server_config['apology_timeout_seconds']}s")

    except Exception as e:
        click.echo(f"❌ Configuration validation failed: {e}", err=True)
        sys.exit(1)


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()

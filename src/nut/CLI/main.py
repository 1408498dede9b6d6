"""
Command Line Interface for Nut.
"""
import sys
import click
from ..BUILDERS.image_builder import ImageBuilder
from ..RUNTIME.lxc_driver import LXCDriver
from ..UTILS.logger import setup_logger
from ..config import NutConfig
from ..exceptions import NutError


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--env-file', default='.env', help='Settings file with NUT_* variables')
@click.pass_context
def cli(ctx, debug, env_file):
    """
    Nut - build LXC container images from Dockerfile-like scripts.
    """
    ctx.ensure_object(dict)
    config = NutConfig.from_env(env_file)
    setup_logger(debug, config.log_level)
    ctx.obj['config'] = config
    if 'driver' not in ctx.obj:
        ctx.obj['driver'] = LXCDriver(config.lxc_path, config.start_timeout)


def fail(error: NutError):
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@cli.command()
@click.option('--file', '-f', 'script', default='Dockerfile', help='Build script path')
@click.option('--name', '-n', required=True, help='Name of the container to build')
@click.option('--volume', default=None, help='Storage volume to clone the base image onto')
@click.option('--export', 'export_file', default=None, help='Archive the built container to this file')
@click.option('--sudo', is_flag=True, help='Export with elevated privileges')
@click.option('--stop', 'stop_after', is_flag=True, help='Stop the container once built')
@click.pass_context
def build(ctx, script, name, volume, export_file, sudo, stop_after):
    """Build a container from a build script."""
    builder = ImageBuilder(name, ctx.obj['driver'], ctx.obj['config'])
    try:
        builder.parse(script)
        manifest = builder.build(volume)
        if stop_after or export_file:
            builder.stop()
        if export_file:
            builder.export(export_file, sudo)
    except NutError as e:
        fail(e)
    click.echo(f"Built {name} ({len(manifest.env)} env, {len(manifest.labels)} labels)")


@cli.command()
@click.argument('name')
@click.pass_context
def stop(ctx, name):
    """Stop a built container."""
    builder = ImageBuilder(name, ctx.obj['driver'], ctx.obj['config'])
    builder.attach()
    try:
        builder.stop()
    except NutError as e:
        fail(e)
    click.echo(f"Stopped {name}")


@cli.command()
@click.argument('name')
@click.pass_context
def destroy(ctx, name):
    """Stop and remove a built container."""
    builder = ImageBuilder(name, ctx.obj['driver'], ctx.obj['config'])
    builder.attach()
    try:
        builder.destroy()
    except NutError as e:
        fail(e)
    click.echo(f"Destroyed {name}")


@cli.command()
@click.argument('name')
@click.argument('dest')
@click.option('--sudo', is_flag=True, help='Run the archiver with sudo')
@click.pass_context
def export(ctx, name, dest, sudo):
    """Archive a built container."""
    builder = ImageBuilder(name, ctx.obj['driver'], ctx.obj['config'])
    builder.attach()
    try:
        builder.export(dest, sudo)
    except NutError as e:
        fail(e)
    click.echo(f"Exported {name} to {dest}")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()

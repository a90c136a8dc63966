"""Command line entry point for Piano Pitch."""

import signal
import threading
from typing import Optional

import click

from ..logger import get_logger
from ..errors import CaptureError
from ..logging_config import setup_logging
from ..note_utils import frequency_to_label
from ..core.config import ConfigManager
from ..core.events import DetectionEvents
from ..core.factory import ESTIMATORS, ComponentFactory
from ..detection.capture_manager import CaptureCommand
from ..detection.ticker import CountingTicker
from ..ui.display import ConsoleDisplay

logger = get_logger(__name__)


@click.group()
@click.option(
    "--config-dir",
    envvar="PIANO_PITCH_CONFIG_DIR",
    type=click.Path(file_okay=False),
    default=None,
    help="Configuration directory (default: ~/.config/piano_pitch)",
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_dir: Optional[str], debug: bool):
    """Piano Pitch - detect the note being played and show it on a keyboard."""
    setup_logging("DEBUG" if debug else None)
    ctx.obj = ConfigManager(config_dir)


@cli.command()
@click.option("--device", type=int, default=None, help="Audio input device ID")
@click.option(
    "--wav",
    "wav_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Analyse a sound file instead of the microphone",
)
@click.option("--loop", is_flag=True, help="Loop the sound file")
@click.option("--gain", type=float, default=1.0, help="Gain applied to sound file samples")
@click.option(
    "--estimator",
    type=click.Choice(ESTIMATORS),
    default="autocorrelation",
    help="Pitch estimation algorithm",
)
@click.option("--sample-rate", type=int, default=None, help="Preferred sample rate in Hz")
@click.option("--frame-size", type=int, default=None, help="Samples per analysis frame")
@click.option(
    "--duration", type=float, default=None, help="Stop after this many seconds"
)
@click.pass_obj
def listen(
    config_manager: ConfigManager,
    device: Optional[int],
    wav_path: Optional[str],
    loop: bool,
    gain: float,
    estimator: str,
    sample_rate: Optional[int],
    frame_size: Optional[int],
    duration: Optional[float],
):
    """Detect notes until interrupted."""
    factory = ComponentFactory(config_manager)
    source = factory.create_frame_source(
        wav_path=wav_path,
        loop=loop,
        gain=gain,
        device_id=device,
        sample_rate=sample_rate,
        frame_size=frame_size,
    )
    if wav_path is not None and not loop:
        # Read the file once, as fast as frames can be analysed
        try:
            ticker = CountingTicker(source.frame_count())
        except CaptureError as e:
            raise click.ClickException(str(e)) from e
    else:
        ticker = factory.create_ticker(duration)

    events = DetectionEvents()
    display = ConsoleDisplay(**config_manager.get_config("display"))
    display.attach(events)

    manager = factory.create_capture_manager(
        source, factory.create_estimator(estimator), events, ticker
    )

    logger.info(f"Listening with the {estimator} estimator")
    hidden = threading.Event()
    previous_handler = signal.signal(signal.SIGTERM, lambda *_: hidden.set())
    try:
        click.echo("Listening. Press Ctrl+C to stop.", err=True)
        if manager.handle(CaptureCommand.START_REQUESTED) is None:
            raise click.exceptions.Exit(1)
        while not manager.wait(timeout=0.1):
            if hidden.is_set():
                manager.handle(CaptureCommand.HOST_HIDDEN)
                break
    except KeyboardInterrupt:
        click.echo("\nStopping.", err=True)
    finally:
        manager.handle(CaptureCommand.STOP_REQUESTED)
        signal.signal(signal.SIGTERM, previous_handler)


@cli.command()
def devices():
    """List audio input devices and the sample rates they accept."""
    from ..audio.audio_input import list_input_devices, supported_sample_rates

    inputs = list_input_devices()
    if not inputs:
        click.echo("No audio input devices found.")
        return
    for device in inputs:
        rates = ", ".join(str(r) for r in supported_sample_rates(device["id"]))
        click.echo(
            f"{device['id']}: {device['name']} "
            f"(inputs: {device['max_input_channels']}, "
            f"default rate: {device['default_samplerate']:.0f}Hz)"
        )
        click.echo(f"    supported rates: {rates or 'none'}")


@cli.command()
@click.argument("frequency", type=float)
def note(frequency: float):
    """Print the note nearest to FREQUENCY (Hz), or '--' if out of range."""
    click.echo(frequency_to_label(frequency))


@cli.group()
def config():
    """Show or reset stored configuration."""


@config.command("show")
@click.argument("name", required=False)
@click.pass_obj
def config_show(config_manager: ConfigManager, name: Optional[str]):
    """Show configuration NAME, or all of it."""
    names = [name] if name else sorted(config_manager.configs)
    for config_name in names:
        if config_name not in config_manager.configs:
            raise click.BadParameter(f"Unknown configuration: {config_name}")
        click.echo(f"[{config_name}]")
        for key, value in config_manager.get_config(config_name).items():
            click.echo(f"  {key} = {value}")


@config.command("reset")
@click.argument("name", required=False)
@click.pass_obj
def config_reset(config_manager: ConfigManager, name: Optional[str]):
    """Reset configuration NAME, or all of it, to defaults."""
    names = [name] if name else sorted(config_manager.default_configs)
    for config_name in names:
        if not config_manager.reset_config(config_name):
            raise click.ClickException(f"Could not reset configuration: {config_name}")
        click.echo(f"Reset {config_name}")


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()

"""Command-line interface for ethnosonic.

Provides commands for:
- transcribe: Convert a melody recording into note events
- soundscape: Ecoacoustic indices and band energies
- microtonal: Pitch histogram, cents deviation and scale matching
- linguistics: Voice activity, prosody, rhythm and vowel space
- info: Show audio file information
"""

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from .core import AnalysisError, AudioSignal

app = typer.Typer(
    name="ethnosonic",
    help="Audio analysis for ethnomusicology, soundscape ecology and linguistics",
    rich_markup_mode="markdown",
)
console = Console()


@dataclass
class StageTimings:
    """Track timing of processing stages."""

    stages: Dict[str, float] = field(default_factory=dict)
    _current_stage: Optional[str] = field(default=None, repr=False)
    _start_time: float = field(default=0.0, repr=False)

    def start(self, stage: str) -> None:
        """Start timing a stage."""
        self._current_stage = stage
        self._start_time = time.perf_counter()

    def stop(self) -> float:
        """Stop timing the current stage, return duration."""
        if self._current_stage is None:
            return 0.0
        duration = time.perf_counter() - self._start_time
        self.stages[self._current_stage] = duration
        self._current_stage = None
        return duration

    @property
    def total_time(self) -> float:
        return sum(self.stages.values())

    def print_summary(self) -> None:
        console.print("\n[bold]Timing Summary:[/bold]")
        for stage, duration in self.stages.items():
            console.print(f"  {stage}: {duration:.2f}s")
        console.print(f"  [bold]Total: {self.total_time:.2f}s[/bold]")

    def to_dict(self) -> Dict[str, Any]:
        return {"stages": self.stages, "total_time": self.total_time}


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )


def _load_signal(
    input_file: Path,
    preset: Optional[str],
    timings: StageTimings,
    quiet: bool = False,
) -> AudioSignal:
    """Load a file (and optionally preprocess it), exiting on failure."""
    from .input import AudioLoader
    from .processing import preprocess

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    timings.start("load")
    try:
        signal = AudioLoader().load(str(input_file))
    except AnalysisError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    timings.stop()

    if preset:
        timings.start("preprocess")
        try:
            result = preprocess(signal, preset)
        except AnalysisError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        timings.stop()
        if not quiet:
            for step in result.applied_steps:
                console.print(f"  [dim]{step}[/dim]")
        signal = result.signal

    return signal


def _run_analysis(label: str, analyze: Callable, signal: AudioSignal, options, quiet: bool):
    """Run one analysis entry point behind a rich progress bar."""
    try:
        if quiet:
            return analyze(signal, options)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task(label, total=100)
            return analyze(
                signal,
                options,
                progress=lambda percent: progress.update(task, completed=percent),
            )
    except AnalysisError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _emit_json(data: Dict[str, Any], output: Optional[Path]) -> None:
    if output is not None:
        output.write_text(json.dumps(data, indent=2))
        console.print(f"[green]Wrote[/green] {output}")
    else:
        console.print_json(data=data)


@app.command()
def transcribe(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write JSON results to this file"
    ),
    fft_size: int = typer.Option(2048, "--fft-size", help="Frame size: 1024/2048/4096/8192"),
    hop_size: int = typer.Option(512, "--hop-size", help="Samples between frames"),
    window: str = typer.Option("hann", "--window", help="rectangular/hann/hamming/blackman"),
    channel: str = typer.Option("mix", "--channel", help="left/right/mix/both"),
    threshold: float = typer.Option(0.05, "--threshold", help="Minimum frame RMS for a note"),
    min_duration: float = typer.Option(
        0.1, "--min-duration", help="Minimum note duration in seconds"
    ),
    quantize: str = typer.Option(
        "none", "-q", "--quantize", help="none/quarter/eighth/sixteenth/thirty-second"
    ),
    tempo: float = typer.Option(120.0, "-t", "--tempo", help="Tempo (BPM) for quantization"),
    detect_tempo: bool = typer.Option(
        False, "--detect-tempo", help="Estimate tempo from note onsets"
    ),
    tuning: str = typer.Option(
        "equal", "--tuning", help="equal/just/pythagorean/meantone/quarter_tone"
    ),
    reference: float = typer.Option(440.0, "--reference", help="A4 reference frequency in Hz"),
    scale: Optional[str] = typer.Option(
        None, "--scale", help="Only keep notes in this scale (e.g. major, pentatonic_minor)"
    ),
    scale_root: int = typer.Option(60, "--scale-root", help="MIDI root of --scale"),
    high_pass: float = typer.Option(0.0, "--high-pass", help="High-pass cutoff in Hz, 0 = off"),
    low_pass: float = typer.Option(0.0, "--low-pass", help="Low-pass cutoff in Hz, 0 = off"),
    noise_gate: float = typer.Option(0.0, "--noise-gate", help="Noise gate RMS, 0 = off"),
    max_duration: Optional[float] = typer.Option(
        None, "--max-duration", help="Only analyze the first N seconds"
    ),
    fast: bool = typer.Option(False, "--fast", help="Double the hop size"),
    preset: Optional[str] = typer.Option(
        None, "--preset", help="Preprocess first: field_recording/speech/music/ecology"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Transcribe a monophonic recording into notes.

    **Examples:**

        ethnosonic transcribe flute.wav

        ethnosonic transcribe kundu.wav --quantize sixteenth --detect-tempo --json
    """
    from .api import analyze_transcription
    from .core import AnalysisOptions

    _configure_logging(verbose)
    timings = StageTimings()
    signal = _load_signal(input_file, preset, timings, quiet=json_output)

    options = AnalysisOptions(
        fft_size=fft_size,
        hop_size=hop_size,
        window_type=window,
        channel_selection=channel,
        threshold=threshold,
        min_note_duration=min_duration,
        quantization=quantize,
        target_tempo=tempo,
        enable_tempo_detection=detect_tempo,
        tuning_system=tuning,
        reference_frequency=reference,
        enable_scale_constrain=scale is not None,
        scale_type=scale or "chromatic",
        scale_root=scale_root,
        enable_high_pass_filter=high_pass > 0,
        high_pass_frequency=high_pass or 80.0,
        enable_low_pass_filter=low_pass > 0,
        low_pass_frequency=low_pass or 2000.0,
        enable_noise_gate=noise_gate > 0,
        noise_gate_threshold=noise_gate or 0.02,
        max_processing_duration=max_duration,
        enable_fast_mode=fast,
    )

    timings.start("transcribe")
    result = _run_analysis(
        "Transcribing", analyze_transcription, signal, options, quiet=json_output
    )
    timings.stop()

    if json_output or output is not None:
        data = result.to_dict()
        data["input"] = str(input_file)
        data["timings"] = timings.to_dict()
        _emit_json(data, output)
        if json_output:
            return

    console.print(f"[green]Detected {len(result.notes)} notes[/green]")
    console.print(f"  Duration: {result.duration:.2f}s, Sample rate: {result.sample_rate}Hz")
    console.print(f"  Confidence: {result.confidence:.2f}")
    if result.detected_tempo is not None:
        console.print(f"  Detected tempo: {result.detected_tempo:.1f} BPM")
    if result.notes:
        _show_notes_table(result.notes)
    if verbose:
        timings.print_summary()


@app.command()
def soundscape(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write JSON results to this file"
    ),
    fft_size: int = typer.Option(2048, "--fft-size", help="Frame size: 1024/2048/4096/8192"),
    hop_size: int = typer.Option(1024, "--hop-size", help="Samples between frames"),
    include_spectrogram: bool = typer.Option(
        False, "--spectrogram", help="Include the full spectrogram in JSON output"
    ),
    preset: Optional[str] = typer.Option(
        None, "--preset", help="Preprocess first: field_recording/speech/music/ecology"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON"),
):
    """Compute acoustic indices (ACI, NDSI, entropy) of a field recording."""
    from .api import analyze_soundscape

    _configure_logging(verbose)
    timings = StageTimings()
    signal = _load_signal(input_file, preset, timings, quiet=json_output)
    options = {"fft_size": fft_size, "hop_size": hop_size}

    timings.start("soundscape")
    result = _run_analysis(
        "Analyzing soundscape", analyze_soundscape, signal, options, quiet=json_output
    )
    timings.stop()

    if json_output or output is not None:
        data = result.to_dict(include_spectrogram=include_spectrogram)
        data["input"] = str(input_file)
        _emit_json(data, output)
        if json_output:
            return

    indices = result.indices
    console.print(f"\n[bold]Acoustic Indices:[/bold] {input_file.name}")
    console.print(f"  ACI: {indices.aci:.4f}")
    console.print(f"  NDSI: {indices.ndsi:.3f}")
    console.print(f"  Entropy: {indices.entropy:.3f}")
    console.print(f"  Peak frequency: {indices.peak_frequency:.1f} Hz")
    console.print(f"  Spectral centroid: {indices.spectral_centroid:.1f} Hz")

    table = Table(title="Frequency Bands")
    table.add_column("Band", style="cyan")
    table.add_column("Range (Hz)", style="green")
    table.add_column("Energy %", style="magenta")
    for band in result.frequency_bands:
        table.add_row(
            band.label,
            f"{band.min_freq:.0f}-{band.max_freq:.0f}",
            f"{band.percentage:.1f}",
        )
    console.print(table)
    if verbose:
        timings.print_summary()


@app.command()
def microtonal(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write JSON results to this file"
    ),
    min_freq: float = typer.Option(80.0, "--min-freq", help="Lowest pitch in Hz"),
    max_freq: float = typer.Option(2000.0, "--max-freq", help="Highest pitch in Hz"),
    reference: float = typer.Option(440.0, "--reference", help="A4 reference frequency in Hz"),
    preset: Optional[str] = typer.Option(
        None, "--preset", help="Preprocess first: field_recording/speech/music/ecology"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON"),
):
    """Build a pitch histogram and match it against known scales."""
    from .api import analyze_microtonal

    _configure_logging(verbose)
    timings = StageTimings()
    signal = _load_signal(input_file, preset, timings, quiet=json_output)
    options = {
        "frequency_min": min_freq,
        "frequency_max": max_freq,
        "reference_frequency": reference,
    }

    timings.start("microtonal")
    result = _run_analysis(
        "Analyzing pitches", analyze_microtonal, signal, options, quiet=json_output
    )
    timings.stop()

    if json_output or output is not None:
        data = result.to_dict()
        data["input"] = str(input_file)
        _emit_json(data, output)
        if json_output:
            return

    console.print(f"\n[bold]Microtonal Analysis:[/bold] {input_file.name}")
    console.print(f"  Voiced frames: {result.total_notes}")
    console.print(f"  Average deviation: {result.average_cents_deviation:.1f} cents")
    console.print(f"  Microtonal content: {result.microtonal_content:.1f}%")
    if result.scale_analysis:
        scale = result.scale_analysis
        console.print(
            f"  Scale: {scale.detected_scale} (confidence: {scale.confidence:.2f}) "
            f"- {scale.cultural_context}"
        )
    else:
        console.print("  Scale: [yellow]no match[/yellow]")

    if result.dominant_pitches:
        table = Table(title="Dominant Pitches")
        table.add_column("Frequency (Hz)", style="cyan")
        table.add_column("Note", style="green")
        table.add_column("Cents", style="yellow")
        table.add_column("Share %", style="magenta")
        for entry in result.dominant_pitches:
            table.add_row(
                f"{entry.frequency:.0f}",
                entry.note_name,
                f"{entry.cents:+.1f}",
                f"{entry.percentage:.1f}",
            )
        console.print(table)


@app.command()
def linguistics(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write JSON results to this file"
    ),
    preset: Optional[str] = typer.Option(
        None, "--preset", help="Preprocess first: field_recording/speech/music/ecology"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON"),
):
    """Analyze speech: voice activity, prosody, rhythm and vowel space."""
    from .api import analyze_linguistics

    _configure_logging(verbose)
    timings = StageTimings()
    signal = _load_signal(input_file, preset, timings, quiet=json_output)

    timings.start("linguistics")
    result = _run_analysis(
        "Analyzing speech", analyze_linguistics, signal, None, quiet=json_output
    )
    timings.stop()

    if json_output or output is not None:
        data = result.to_dict()
        data["input"] = str(input_file)
        _emit_json(data, output)
        if json_output:
            return

    prosody, rhythm, vowels = result.prosody, result.rhythm, result.vowel_space
    console.print(f"\n[bold]Speech Analysis:[/bold] {input_file.name}")
    console.print(
        f"  Pitch: {prosody.average_pitch:.1f} Hz "
        f"(range {prosody.pitch_range[0]:.1f}-{prosody.pitch_range[1]:.1f}, "
        f"sd {prosody.pitch_variability:.1f})"
    )
    console.print(f"  Speech rate: {rhythm.speech_rate:.2f} syllables/s")
    console.print(
        f"  Pauses: {rhythm.pause_count} (average {rhythm.average_pause_duration:.2f}s)"
    )
    console.print(f"  Speech ratio: {rhythm.rhythm_ratio:.2f}")
    console.print(
        f"  Vowel space: F1 {vowels.average_f1:.0f} Hz, F2 {vowels.average_f2:.0f} Hz, "
        f"area {vowels.vowel_space_area:.0f}"
    )


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input audio file"),
):
    """Show information about an audio file."""
    from .analysis import TempoAnalyzer, select_channel
    from .input import AudioLoader

    timings = StageTimings()
    signal = _load_signal(input_file, None, timings)
    meta = AudioLoader().probe(str(input_file))

    console.print(f"\n[bold]Audio Info:[/bold] {input_file.name}")
    if meta["subtype"]:
        console.print(f"  Format: {meta['format']} ({meta['subtype']})")
    else:
        console.print(f"  Format: {meta['format']}")
    console.print(f"  Duration: {signal.duration:.2f} seconds")
    console.print(f"  Sample rate: {signal.sample_rate} Hz")
    console.print(f"  Channels: {signal.n_channels}")
    console.print(f"  Samples: {signal.n_samples:,}")

    tempo, _ = TempoAnalyzer().detect(select_channel(signal, "mix"), signal.sample_rate)
    console.print(f"  Estimated tempo: {tempo:.1f} BPM")


def _show_notes_table(notes):
    """Display notes in a table."""
    table = Table(title="Detected Notes")
    table.add_column("Pitch", style="cyan")
    table.add_column("Onset (s)", style="green")
    table.add_column("Duration (s)", style="yellow")
    table.add_column("Velocity", style="magenta")
    table.add_column("Confidence", style="blue")

    for note in notes:
        table.add_row(
            note.pitch_name,
            f"{note.start_time:.3f}",
            f"{note.duration:.3f}",
            str(note.velocity),
            f"{note.confidence:.2f}",
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()

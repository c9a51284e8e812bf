"""
FM Synth Demo

Renders each factory patch, a short melody and a live-edit sweep to WAV.
"""

import numpy as np
from pathlib import Path

# Add src to path for development
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fmbeast import (
    Controller,
    FMSynth,
    OfflineRenderer,
    SampleFormat,
    list_presets,
    render_midi_note,
    render_note,
    write_wav,
)


def demo_all_presets(output_dir: Path, sample_rate: int = 44100):
    """Render a short sample of each patch."""
    print("Rendering all patches...")

    for preset_name in list_presets():
        audio = render_note(
            freq=440.0,  # A4
            duration=1.5,
            preset=preset_name,
            sample_rate=sample_rate,
            dc_block=True,
        )
        output_path = write_wav(output_dir / f"fm_{preset_name}.wav", audio, sample_rate)
        print(f"  ✓ {preset_name}: {output_path}")


def demo_melody(output_dir: Path, sample_rate: int = 44100):
    """Render a simple arpeggio with the bell patch."""
    print("\nRendering bell melody...")

    melody = [
        (60, 0.4),  # C4
        (64, 0.4),  # E4
        (67, 0.4),  # G4
        (72, 0.8),  # C5
    ]

    clips = [
        render_midi_note(midi_note, duration, preset="bell", sample_rate=sample_rate)
        for midi_note, duration in melody
    ]
    output = np.concatenate(clips)

    output_path = write_wav(output_dir / "fm_melody.wav", output, sample_rate)
    print(f"  ✓ Melody: {output_path}")


def demo_live_sweep(output_dir: Path, sample_rate: int = 44100):
    """Sweep modulator feedback between blocks, as a control thread would."""
    print("\nRendering feedback sweep...")

    synth = FMSynth(sample_rate=sample_rate)
    controller = Controller(synth)
    renderer = OfflineRenderer(synth, block_size=512, sample_format=SampleFormat.I16)

    controller.note_on()
    blocks = []
    num_blocks = int(2.0 * sample_rate / renderer.block_size)
    for i in range(num_blocks):
        controller.set_operator_param(1, "feedback_amount", 0.5 * i / num_blocks)
        blocks.append(renderer.pull(renderer.block_size))
    controller.note_off()
    for _ in range(int(0.3 * sample_rate / renderer.block_size)):
        blocks.append(renderer.pull(renderer.block_size))

    output_path = write_wav(output_dir / "fm_sweep.wav", np.concatenate(blocks), sample_rate)
    print(f"  ✓ Sweep: {output_path}")


def main():
    """Run all demos."""
    print("=" * 50)
    print("FM Synth Demo")
    print("=" * 50)

    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    sample_rate = 44100

    demo_all_presets(output_dir, sample_rate)
    demo_melody(output_dir, sample_rate)
    demo_live_sweep(output_dir, sample_rate)

    print("\n" + "=" * 50)
    print(f"All demos complete! Output in: {output_dir}")
    print("=" * 50)


if __name__ == "__main__":
    main()

import argparse
import asyncio
import logging

import flero.audio_output
import flero.config
import flero.note_sequence
import flero.scheduler
import flero.tuning


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


DEMO_NOTES = [
	{'start': 0, 'length': 1, 'number': 1},
	{'start': 1, 'length': 1, 'number': 2},
	{'start': 2, 'length': 1, 'number': 3},
	{'start': 3, 'length': 1, 'number': 4},
	{'start': 5, 'length': 1, 'number': 2},
	{'start': 6, 'length': 1, 'number': 3},
]


def build_demo_sequence () -> flero.note_sequence.NoteSequence:

	"""
	Build the demo loop: a short pentatonic figure with a gap on beats 2 and 4.
	"""

	note_sequence = flero.note_sequence.create_empty_note_sequence()
	notes = [flero.note_sequence.create_note(**values) for values in DEMO_NOTES]

	for note in notes:
		note_sequence.add_note(note)

	note_sequence.remove_note(notes[2])

	return note_sequence


async def run (config: flero.config.SequencerConfig, seconds: float) -> None:

	"""
	Play the demo loop through a MIDI port for ``seconds`` seconds.
	"""

	output = flero.audio_output.MidiToneOutput(
		output_device_name = config.output_device_name,
		gain = config.gain
	)

	if output.midi_out is None:
		logger.error("No MIDI output available - nothing to play on.")
		return

	scale = flero.tuning.create_octave_scale("major_pentatonic")

	sequencer = flero.scheduler.create_sequencer(
		scale = scale,
		tempo = config.tempo,
		audio_output = output,
		note_sequence = build_demo_sequence(),
		**config.sequencer_options()
	)

	await output.start()

	try:
		sequencer.play()
		await asyncio.sleep(seconds)
	finally:
		sequencer.stop()
		await output.stop()


def main () -> None:

	"""
	Main entry point: play the demo loop.
	"""

	parser = argparse.ArgumentParser(description="Play the flero demo loop on a MIDI output.")
	parser.add_argument("--config", default="flero.yaml", help="YAML config file (default: flero.yaml)")
	parser.add_argument("--bpm", type=float, default=None, help="Override the configured tempo")
	parser.add_argument("--device", default=None, help="MIDI output device name")
	parser.add_argument("--seconds", type=float, default=20.0, help="How long to play (default: 20)")
	args = parser.parse_args()

	config = flero.config.load_config(args.config)

	if args.bpm is not None:
		config.tempo = args.bpm

	if args.device is not None:
		config.output_device_name = args.device

	logger.info("Flero starting...")

	try:
		asyncio.run(run(config, args.seconds))
	except KeyboardInterrupt:
		logger.info("Interrupted")


if __name__ == "__main__":
	main()

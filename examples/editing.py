import asyncio
import logging

import flero

logging.basicConfig(level=logging.INFO)


async def main () -> None:

	output = flero.MidiToneOutput()

	notes = flero.create_empty_note_sequence()
	notes.add_change_listener(lambda: logging.info(f"Sequence now holds {len(notes)} notes"))

	melody = [flero.create_note(start=beat, length=1, number=degree) for beat, degree in enumerate([0, 2, 4, 5, 4, 2, 1, 3])]

	for note in melody:
		notes.add_note(note)

	sequencer = flero.create_sequencer(
		scale = flero.create_octave_scale("major_pentatonic"),
		tempo = 120,
		audio_output = output,
		note_sequence = notes
	)

	await output.start()
	sequencer.play()

	# Let the loop play once, then edit it while it keeps going.
	await asyncio.sleep(4)
	notes.move_note(melody[3], new_start=3.5, new_pitch=7)
	notes.remove_note(melody[6])

	await asyncio.sleep(4)
	sequencer.change_tempo(160)

	await asyncio.sleep(4)
	sequencer.pause()
	await asyncio.sleep(1)
	sequencer.play()

	await asyncio.sleep(4)
	sequencer.stop()
	await output.stop()


if __name__ == "__main__":
	asyncio.run(main())

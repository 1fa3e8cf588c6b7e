import pytest

import conftest
import flero.__main__
import flero.config


def test_demo_sequence_skips_removed_note () -> None:

	"""The demo loop holds every demo note except the one removed after adding."""

	note_sequence = flero.__main__.build_demo_sequence()
	notes = list(note_sequence)

	assert [note.start for note in notes] == [0, 1, 3, 5, 6]
	assert [note.number for note in notes] == [1, 2, 4, 2, 3]


@pytest.mark.asyncio
async def test_demo_plays_through_midi (patch_midi: None) -> None:

	"""Running the demo briefly sends the first note and closes the port."""

	config = flero.config.SequencerConfig(output_device_name="Dummy MIDI")

	await flero.__main__.run(config, seconds=0.2)

	fake = conftest._current_fake_output
	notes_on = [message.note for message in fake.sent if message.type == 'note_on']

	assert fake.closed
	# Degree 1 of the major pentatonic scale is B4.
	assert notes_on[0] == 71

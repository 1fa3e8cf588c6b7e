"""
Flero - a lookahead note sequencer driven by an audio clock.

Flero plays an editable loop of notes against a precise output clock while the
tempo changes and the notes are edited underneath it.  A scheduling tick wakes
every few milliseconds, works out which beats fall inside a short lookahead
window, and queues those notes with absolute timestamps - so timer jitter never
reaches the audio.

Building blocks:

- **BeatTimeline** (``flero.timeline``) - immutable beat <-> time mapping.
  Loop wraps, resumes and tempo changes each derive a new one from the last
  exact anchor, so playback never drifts.
- **NoteSequence** (``flero.note_sequence``) - notes ordered by start beat,
  with range queries and change listeners for editors.
- **Scheduler** (``flero.scheduler``) - the lookahead loop plus the
  play/pause/stop/tempo state machine.
- **Tuning** (``flero.tuning``) - equal temperament and octave scales that
  turn note numbers into frequencies.
- **MidiToneOutput** (``flero.audio_output``) - plays tones on a MIDI port.

Minimal example:

    ```python
    import asyncio
    import flero

    async def main ():
        output = flero.MidiToneOutput()
        notes = flero.create_empty_note_sequence()
        notes.add_note(flero.create_note(start=0, length=1, number=2))

        sequencer = flero.create_sequencer(
            scale = flero.create_octave_scale("major_pentatonic"),
            tempo = 144,
            audio_output = output,
            note_sequence = notes
        )

        await output.start()
        sequencer.play()
        await asyncio.sleep(10)
        sequencer.stop()
        await output.stop()

    asyncio.run(main())
    ```

Package-level exports: ``BeatTimeline``, ``NoteSequence``, ``Note``,
``Scheduler``, ``MidiToneOutput``, ``create_note``,
``create_empty_note_sequence``, ``create_octave_scale``, ``create_sequencer``.
"""

import flero.audio_output
import flero.note_sequence
import flero.scheduler
import flero.timeline
import flero.tuning


BeatTimeline = flero.timeline.BeatTimeline
InvalidTempoError = flero.timeline.InvalidTempoError
Note = flero.note_sequence.Note
NoteSequence = flero.note_sequence.NoteSequence
InvalidNoteError = flero.note_sequence.InvalidNoteError
Scheduler = flero.scheduler.Scheduler
MidiToneOutput = flero.audio_output.MidiToneOutput

create_note = flero.note_sequence.create_note
create_empty_note_sequence = flero.note_sequence.create_empty_note_sequence
create_octave_scale = flero.tuning.create_octave_scale
create_sequencer = flero.scheduler.create_sequencer
